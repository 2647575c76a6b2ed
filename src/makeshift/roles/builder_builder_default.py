# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Default implementation of a builder builder."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from makeshift.project.identity import Project, to_path, validate_code_package, validate_package
from makeshift.project.layout import TARGET_FILE_NAME, default_target_file, internal_building_code

if TYPE_CHECKING:
    from makeshift.build.context import BuildContext

# ###############
# Public Interface
# ###############


class BuilderBuilderDefault:
    """Compiles a project's building code following the workspace conventions.

    The building code is every ``.py`` file of the internal building code
    directory, unless that directory holds a ``build_target.py`` file, in which
    case only files whose names begin with ``build`` count.  The ``.py`` files
    of each added building-code package are compiled with it.

    Args:
        project: The owning project.
        added_building_code: Packages of additional building code.
        external_building_code: Proper packages of the projects whose
            building code this project's depends on.
    """

    def __init__(
        self,
        project: Project,
        *,
        added_building_code: Iterable[str] = (),
        external_building_code: Iterable[str] = (),
    ) -> None:
        self.project = project
        self._added = frozenset(added_building_code)
        self._external = frozenset(external_building_code)
        for package in self._added:
            validate_code_package(package)
        for package in self._external:
            validate_package(package)

    def added_building_code(self) -> frozenset[str]:
        return self._added

    def external_building_code(self) -> frozenset[str]:
        return self._external

    def target_file(self, context: BuildContext) -> PurePosixPath:
        return default_target_file(context.workspace_root, self.project.path)

    def compile_building_code(self, context: BuildContext) -> None:
        directory = internal_building_code(context.workspace_root, self.project.path)
        accept = _is_building_file if self.target_file(context).name == TARGET_FILE_NAME else None
        sources = context.stale_sources(directory, accept)
        for package in sorted(self._added):
            sources.extend(context.stale_sources(to_path(package)))
        context.compile(self.project.package, list(dict.fromkeys(sources)))


# ################
# Implementation
# ################


def _is_building_file(name: str) -> bool:
    return name.startswith("build")
