# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""A build run over one project and, transitively, its external building code.

Building a project's builder first builds the building code of every project
it declares as external, then compiles its own.  A session remembers each
project it has committed to building and never builds one twice: an external
project already built in the session is skipped, while re-entering a project
still on the current build chain is a dependency cycle and fails fatally.
"""

from __future__ import annotations

from makeshift.build.context import BuildContext
from makeshift.errors import FatalError
from makeshift.project.identity import Project
from makeshift.project.targets import TargetSet, match_target
from makeshift.resolution.resolver import OverrideResolver
from makeshift.roles.contracts import BuilderBuilder

# ###############
# Public Interface
# ###############


class BuildCycleError(FatalError):
    """Raised when a build re-enters a project already under build."""


class BuildSession:
    """Builds projects within one run, each at most once.

    Args:
        context: Surroundings of the run.
        resolver: Resolves role implementations; by default a fresh
            :class:`OverrideResolver` over *context*.
    """

    def __init__(self, context: BuildContext, resolver: OverrideResolver | None = None) -> None:
        self.context = context
        self.resolver = resolver if resolver is not None else OverrideResolver(context)
        self._under_build: set[str] = set()
        self._chain: list[str] = []

    @property
    def projects_under_build(self) -> frozenset[str]:
        """Proper packages of the projects whose build was started in this session."""
        return frozenset(self._under_build)

    def build(self, project: Project) -> BuilderBuilder:
        """Build the builder of *project*, after that of its external projects.

        Iteration over the external projects follows no particular order; each
        one is fully built before this project's own building code is compiled.

        Returns:
            The project's builder builder.

        Raises:
            BuildCycleError: If *project* is already under build in this session.
            UserError: If the compiler reports an error in the code.
            FatalError: On any other failure.
        """
        if project.package in self._under_build:
            raise BuildCycleError(
                f"Build of `{project}` re-entered",
                context={"chain": " -> ".join((*self._chain, project.package))},
            )
        self._under_build.add(project.package)
        self._chain.append(project.package)
        try:
            builder_builder = self.resolver.resolve_builder_builder(project)
            for external in builder_builder.external_building_code():
                if external in self._under_build and external not in self._chain:
                    continue
                self.build(Project.from_package(external))
            builder_builder.compile_building_code(self.context)
        finally:
            self._chain.pop()
        return builder_builder

    def targets(self, project: Project) -> TargetSet:
        """Build the builder of *project* and return its build targets."""
        builder_builder = self.build(project)
        return self.resolver.load_targets(project, builder_builder.target_file(self.context))

    def build_target(self, project: Project, query: str) -> str:
        """Build *project* to the level of the target that *query* abbreviates.

        Returns:
            The full name of the target built.

        Raises:
            UserError: If *query* does not match exactly one target, or the
                compiler reports an error in the code.
            FatalError: On any other failure.
        """
        targets = self.targets(project)
        target = match_target(query, targets)
        builder = self.resolver.resolve_builder(project, targets)
        builder.build_to(target, self.context)
        return target
