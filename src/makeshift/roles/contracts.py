# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""The two pluggable roles of a project build.

A *builder builder* compiles a project's building code; a *builder* then
builds the project to the level of a target.  For either role a project may
supply its own implementation in its internal building code, in place of the
default:

* ``builder_builder.py`` defining class ``BuilderBuilder``;
* ``builder.py`` defining class ``Builder``.

An implementation conforms structurally to the protocol below; it need not,
and should not, inherit from anything.  To reuse default behaviour, hold an
instance of the default implementation and delegate to it.  The constructor
takes either the construction context (the :class:`Project` for a builder
builder; the project and its :class:`TargetSet` for a builder) or no
arguments at all.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from makeshift.build.context import BuildContext

# ###############
# Public Interface
# ###############


@runtime_checkable
class BuilderBuilder(Protocol):
    """Compiles the building code of a project."""

    def added_building_code(self) -> frozenset[str]:
        """Packages of building code additional to the internal building code.

        All ``.py`` files of the equivalent directories, exclusive of their
        subdirectories, are compiled with the internal building code.
        """
        ...

    def external_building_code(self) -> frozenset[str]:
        """Proper packages of the projects whose building code must be built first."""
        ...

    def target_file(self, context: BuildContext) -> PurePosixPath:
        """Proper path of the file declaring the project's build targets."""
        ...

    def compile_building_code(self, context: BuildContext) -> None:
        """Compile the stale part of the project's own building code in one batch."""
        ...


@runtime_checkable
class Builder(Protocol):
    """Builds a project to the level of a target."""

    def build_to(self, target: str, context: BuildContext) -> None:
        """Build to the level of *target*, the full name of one of the project's targets."""
        ...
