# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Timestamp-based decision of which source files need compiling.

Compiled output lives under a single output root, mirroring the source layout:
``<root>/a/b/some_name.py`` compiles to ``<output_root>/a/b/some_name.pyc``.
A source is stale when its output is missing, or when the source was modified
at or after the time the output was written.  Equal timestamps count as stale,
so an edit landing within the filesystem's timestamp granularity is never
skipped.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from makeshift.errors import FatalError

# ###############
# Public Interface
# ###############

SOURCE_SUFFIX = ".py"
OUTPUT_SUFFIX = ".pyc"


@dataclass(frozen=True)
class SourceArtifact:
    """A source file addressed by its proper path under a source root.

    Attributes:
        root: Directory the proper path is relative to (the workspace root for
            project code, the installation root for Makeshift's own code).
        proper_path: Relative path of the source file, e.g. ``acme/app/builder/build_target.py``.
    """

    root: Path
    proper_path: PurePosixPath

    @property
    def source_file(self) -> Path:
        return self.root / self.proper_path

    @property
    def simple_type_name(self) -> str:
        """The file name without its extension, e.g. ``build_target``."""
        return self.proper_path.stem

    @property
    def type_name(self) -> str:
        """The dotted module name proper to the file, e.g. ``acme.app.builder.build_target``."""
        return ".".join((*self.proper_path.parent.parts, self.simple_type_name))

    @property
    def class_name(self) -> str:
        """The name of the class proper to the file, e.g. ``BuildTarget``."""
        return class_name_of(self.simple_type_name)

    def output_file(self, output_root: Path) -> Path:
        """Return the path of the compiled output under *output_root*."""
        return output_root / self.proper_path.parent / (self.simple_type_name + OUTPUT_SUFFIX)


def class_name_of(simple_type_name: str) -> str:
    """Return the CapWords class name for a module stem, e.g. ``BuilderBuilder`` for ``builder_builder``."""
    return "".join(part[:1].upper() + part[1:] for part in simple_type_name.split("_"))


def needs_recompile(artifact: SourceArtifact, output_root: Path) -> bool:
    """Return True if *artifact* has never been compiled or has changed since.

    Raises:
        FatalError: If an existing file cannot be examined.
    """
    output = artifact.output_file(output_root)
    if not output.exists():
        return True
    try:
        return _mtime(artifact.source_file) >= _mtime(output)
    except OSError as exc:
        raise FatalError(
            f"Cannot compare modification times: {exc}",
            context={"source": str(artifact.source_file), "output": str(output)},
        ) from exc


def compilable_sources(
    root: Path,
    directory: PurePosixPath,
    output_root: Path,
    accept: Callable[[str], bool] | None = None,
) -> list[SourceArtifact]:
    """Return the stale source files directly inside *directory*.

    Subdirectories are not searched.

    Args:
        root: Source root that *directory* is relative to.
        directory: Proper path of the directory to list.
        output_root: Root of the compiled output.
        accept: Optional test on the file name; files failing it are ignored.

    Returns:
        The stale sources, sorted by proper path.

    Raises:
        FatalError: If the directory cannot be listed.
    """
    try:
        entries = sorted((root / directory).iterdir())
    except OSError as exc:
        raise FatalError(f"Cannot list source directory: {exc}", context={"directory": str(root / directory)}) from exc

    stale: list[SourceArtifact] = []
    for entry in entries:
        if entry.suffix != SOURCE_SUFFIX or not entry.is_file():
            continue
        if accept is not None and not accept(entry.name):
            continue
        artifact = SourceArtifact(root=root, proper_path=directory / entry.name)
        if needs_recompile(artifact, output_root):
            stale.append(artifact)
    return stale


# ################
# Implementation
# ################


def _mtime(path: Path) -> int:
    return path.stat().st_mtime_ns
