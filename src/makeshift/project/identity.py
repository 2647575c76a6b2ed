# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Identity of a project: its proper package and its proper path.

A project is named two equivalent ways.  Its *proper package* is a dotted name
such as ``acme.tools.lint``; its *proper path* is the relative directory
``acme/tools/lint`` holding its code.  One converts to the other by exchanging
``.`` and ``/``.  The segment ``builder`` is reserved throughout, because
subdirectory ``builder/`` holds a project's own building code.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

from makeshift.errors import ConfigurationError

# ###############
# Public Interface
# ###############

RESERVED_SEGMENT = "builder"


def to_path(package: str) -> PurePosixPath:
    """Return the proper path equivalent to *package*."""
    return PurePosixPath(package.replace(".", "/"))


def to_package(path: PurePosixPath) -> str:
    """Return the proper package equivalent to *path*.

    Raises:
        ConfigurationError: If *path* is absolute.
    """
    if path.is_absolute():
        raise ConfigurationError(f"Absolute project path: {path}")
    return ".".join(path.parts)


def validate_package(package: str) -> None:
    """Check that *package* is usable as the proper package of a project.

    Every segment must be a Python identifier, so a package never holds a
    path separator or a parent reference and always converts back from its path.

    Raises:
        ConfigurationError: If a segment is not an identifier or the package
            ends with the reserved segment ``builder``.
    """
    segments = package.split(".")
    if not all(segment.isidentifier() for segment in segments):
        raise ConfigurationError(f"Malformed project package: {package!r}")
    if segments[-1] == RESERVED_SEGMENT:
        raise ConfigurationError(f"Project package ends with `{RESERVED_SEGMENT}`: {package}")


def validate_code_package(package: str) -> None:
    """Check that *package* names a directory of code, e.g. added building code.

    Unlike a project package, it may end with ``builder``.

    Raises:
        ConfigurationError: If a segment is not an identifier.
    """
    if not all(segment.isidentifier() for segment in package.split(".")):
        raise ConfigurationError(f"Malformed code package: {package!r}")


def validate_path(path: PurePosixPath) -> None:
    """Check that *path* is usable as the proper path of a project.

    Raises:
        ConfigurationError: If *path* is absolute, empty, or ends with the
            reserved segment ``builder``.
    """
    if path.is_absolute():
        raise ConfigurationError(f"Absolute project path: {path}")
    if not path.parts:
        raise ConfigurationError("Empty project path")
    if path.name == RESERVED_SEGMENT:
        raise ConfigurationError(f"Project path ends with `{RESERVED_SEGMENT}`: {path}")


def validate_pair(package: str, path: PurePosixPath) -> None:
    """Check that *package* and *path* name the same project.

    Validate each individually before calling this function.

    Raises:
        ConfigurationError: If the two are not equivalent.
    """
    if to_path(package) != path:
        raise ConfigurationError(
            f"Inequivalent project package and path: {package!r} and {str(path)!r}"
        )


@dataclass(frozen=True)
class Project:
    """A project identified by its proper package and proper path.

    Attributes:
        package: The proper package, e.g. ``acme.tools``.
        path: The proper path relative to the workspace root, e.g. ``acme/tools``.
    """

    package: str
    path: PurePosixPath

    def __post_init__(self) -> None:
        validate_package(self.package)
        validate_path(self.path)
        validate_pair(self.package, self.path)

    @classmethod
    def from_package(cls, package: str) -> Project:
        """Create the project whose proper package is *package*."""
        validate_package(package)
        return cls(package=package, path=to_path(package))

    @classmethod
    def from_path(cls, path: PurePosixPath | str) -> Project:
        """Create the project whose proper path is *path*."""
        path = PurePosixPath(path)
        validate_path(path)
        return cls(package=to_package(path), path=path)

    def __str__(self) -> str:
        return self.package
