# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Default implementation of a software builder."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING

from makeshift.errors import FatalError, UserError
from makeshift.project.identity import Project, to_path, validate_code_package
from makeshift.project.targets import TargetSet
from makeshift.template.build_target import BuildTarget

if TYPE_CHECKING:
    from makeshift.build.context import BuildContext

# ###############
# Public Interface
# ###############


class BuilderDefault:
    """Builds the targets named in :class:`~makeshift.template.build_target.BuildTarget`.

    It refuses any target outside the project's own target set.

    Args:
        project: The owning project.
        targets: The project's build targets.
        code_packages: Packages of the project's code, exclusive of building
            code; defaults to the project's own package.
    """

    def __init__(
        self,
        project: Project,
        targets: TargetSet,
        *,
        code_packages: Iterable[str] | None = None,
    ) -> None:
        self.project = project
        self.targets = targets
        self._code_packages = frozenset(code_packages) if code_packages is not None else frozenset({project.package})
        for package in self._code_packages:
            validate_code_package(package)

    def code_packages(self) -> frozenset[str]:
        """Packages whose ``.py`` files, exclusive of subdirectories, make up the project's code.

        Only the ``bytecode`` target uses them.
        """
        return self._code_packages

    def build_to(self, target: str, context: BuildContext) -> None:
        """Build to the level of *target*.

        Raises:
            UserError: If *target* is not a target of the project, or the
                compiler reports an error in the code.
            FatalError: If this implementation does not support *target*.
        """
        if target not in self.targets:
            raise UserError(f"Undefined target in `{self.targets.type_name}`: {target}")
        steps: dict[str, Callable[[BuildContext], None]] = {
            BuildTarget.builder.name: self.build_builder,
            BuildTarget.bytecode.name: self.build_bytecode,
        }
        if target not in steps:
            raise FatalError(
                f"Target `{target}` is unsupported by the default builder",
                context={"project": self.project.package, "targets": self.targets.type_name},
            )
        steps[target](context)

    def build_builder(self, context: BuildContext) -> None:
        """Does nothing, the builder is already built."""

    def build_bytecode(self, context: BuildContext) -> None:
        sources = []
        for package in sorted(self._code_packages):
            sources.extend(context.stale_sources(to_path(package)))
        context.compile(self.project.package, sources)
