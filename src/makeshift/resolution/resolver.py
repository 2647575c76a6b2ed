# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution of the builder and builder builder of a project.

For each role, a project may put an override source file into its internal
building code (``builder_builder.py`` or ``builder.py``); otherwise the
role's default implementation from :mod:`makeshift.roles` is used.  Resolution
proceeds in three steps:

1. *Locate* the implementation source: override if present, else default.
2. *Register* a factory for it: compile whichever of {default, override} is
   stale (the default always takes part, since an override may delegate to
   it), load the compiled type, and decide once how it is constructed.
3. *Create* the instance through the factory and check it against the role's
   protocol.

Factories and instances are cached per (project, role) for the lifetime of the
resolver, which is one build run.
"""

from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from makeshift.compiler.staleness import SourceArtifact, needs_recompile
from makeshift.errors import ConfigurationError, FatalError, UserError
from makeshift.home import HOME_ROOT
from makeshift.project.identity import RESERVED_SEGMENT, Project
from makeshift.project.layout import internal_building_code
from makeshift.project.targets import TargetSet
from makeshift.resolution.loader import ModuleLoader
from makeshift.roles.contracts import Builder, BuilderBuilder

if TYPE_CHECKING:
    from makeshift.build.context import BuildContext

# ###############
# Public Interface
# ###############

class Role(enum.Enum):
    """A pluggable role of a project build."""

    BUILDER_BUILDER = "builder_builder"
    BUILDER = "builder"

    @property
    def override_file_name(self) -> str:
        """Name of the override source file in a project's internal building code."""
        return f"{self.value}.py"

    @property
    def default_proper_path(self) -> PurePosixPath:
        """Proper path of the default implementation under :data:`HOME_ROOT`."""
        return PurePosixPath("makeshift", "roles", f"{self.value}_default.py")

    @property
    def protocol(self) -> type:
        return BuilderBuilder if self is Role.BUILDER_BUILDER else Builder

    @property
    def context_arity(self) -> int:
        """Number of context arguments: the project, plus its targets for a builder."""
        return 1 if self is Role.BUILDER_BUILDER else 2


@dataclass(frozen=True)
class DefaultImplementation:
    """The role's default implementation is in effect."""

    source: SourceArtifact


@dataclass(frozen=True)
class OverrideImplementation:
    """A project-supplied override is in effect."""

    source: SourceArtifact


RoleImplementation = DefaultImplementation | OverrideImplementation


@dataclass(frozen=True)
class ContextConstruction:
    """The type is constructed with the role's context arguments."""


@dataclass(frozen=True)
class BareConstruction:
    """The type is constructed with no arguments."""


ConstructionShape = ContextConstruction | BareConstruction


@dataclass(frozen=True)
class RoleFactory:
    """A registered implementation of a role for one project.

    Attributes:
        role: The role implemented.
        implementation: Where the implementation comes from.
        implementation_type: The loaded class.
        shape: How the class is constructed.
    """

    role: Role
    implementation: RoleImplementation
    implementation_type: type
    shape: ConstructionShape

    def create(self, context_args: tuple[object, ...]) -> object:
        """Construct an instance, passing *context_args* only for a context construction.

        Raises:
            FatalError: If the constructor fails other than by a Makeshift error.
        """
        args = context_args if isinstance(self.shape, ContextConstruction) else ()
        try:
            return self.implementation_type(*args)
        except (UserError, FatalError):
            raise
        except Exception as exc:
            raise FatalError(
                f"Cannot construct `{self.implementation_type.__qualname__}`: {exc!r}",
                context={"source": str(self.implementation.source.source_file)},
            ) from exc


def construction_shape(implementation_type: type, arity: int) -> ConstructionShape:
    """Decide how *implementation_type* is constructed.

    A constructor accepting *arity* positional context arguments is preferred;
    failing that, a constructor taking no arguments.

    Raises:
        FatalError: If the constructor has neither shape.
    """
    try:
        signature = inspect.signature(implementation_type)
    except (TypeError, ValueError) as exc:
        raise FatalError(f"Cannot inspect the constructor of `{implementation_type.__qualname__}`") from exc

    positional = [
        p
        for p in signature.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    required = [p for p in positional if p.default is inspect.Parameter.empty]
    accepts_varargs = any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in signature.parameters.values())
    requires_keywords = any(
        p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
        for p in signature.parameters.values()
    )

    if not requires_keywords:
        if len(required) <= arity and (len(positional) >= arity or accepts_varargs):
            return ContextConstruction()
        if not required:
            return BareConstruction()
    raise FatalError(
        f"Constructor of `{implementation_type.__qualname__}` takes neither {arity} context argument(s) nor none",
        context={"signature": str(signature)},
    )


class OverrideResolver:
    """Resolves role implementations for the projects of one build run.

    Args:
        context: Surroundings of the build run.
        loader: Loads compiled types; by default one over the context's output root.
        home_root: Source root of the default implementations.
    """

    def __init__(
        self,
        context: BuildContext,
        loader: ModuleLoader | None = None,
        *,
        home_root: Path = HOME_ROOT,
    ) -> None:
        self._context = context
        self._loader = loader if loader is not None else ModuleLoader(context.output_root)
        self._home_root = home_root
        self._factories: dict[tuple[str, Role], RoleFactory] = {}
        self._instances: dict[tuple[str, Role], object] = {}
        self._targets: dict[PurePosixPath, TargetSet] = {}

    def default_source(self, role: Role) -> SourceArtifact:
        return SourceArtifact(root=self._home_root, proper_path=role.default_proper_path)

    def locate(self, project: Project, role: Role) -> RoleImplementation:
        """Return the implementation of *role* in effect for *project*."""
        directory = internal_building_code(self._context.workspace_root, project.path)
        override = SourceArtifact(root=self._context.workspace_root, proper_path=directory / role.override_file_name)
        if override.source_file.is_file():
            return OverrideImplementation(override)
        return DefaultImplementation(self.default_source(role))

    def register(self, project: Project, role: Role) -> RoleFactory:
        """Compile, load and register the implementation of *role* for *project*.

        Raises:
            ConfigurationError: If the default implementation's source is missing.
            UserError: If the compiler reports an error in the code.
            FatalError: If compiling or loading fails otherwise, or the type
                has no legal constructor.
        """
        key = (project.package, role)
        if key in self._factories:
            return self._factories[key]

        default = self.default_source(role)
        if not default.source_file.is_file():
            raise ConfigurationError(
                f"Default implementation of role `{role.value}` not found",
                context={"source": str(default.source_file)},
            )
        implementation = self.locate(project, role)
        sources = [default]
        if isinstance(implementation, OverrideImplementation):
            sources.append(implementation.source)
        stale = [source for source in sources if needs_recompile(source, self._context.output_root)]
        self._context.compile(None if role is Role.BUILDER_BUILDER else project.package, stale)

        implementation_type = self._loader.load_type(implementation.source)
        factory = RoleFactory(
            role=role,
            implementation=implementation,
            implementation_type=implementation_type,
            shape=construction_shape(implementation_type, role.context_arity),
        )
        self._factories[key] = factory
        return factory

    def resolve_role(self, project: Project, role: Role, *, targets: TargetSet | None = None) -> object:
        """Return the instance implementing *role* for *project*, creating it on first use.

        Args:
            project: The owning project.
            role: The role to resolve.
            targets: The project's build targets; required for the builder role.

        Raises:
            UserError: If the compiler reports an error in the code.
            FatalError: On any failure to compile, load or construct the
                implementation, or if the instance does not fulfil the role.
        """
        key = (project.package, role)
        if key in self._instances:
            return self._instances[key]
        if role is Role.BUILDER and targets is None:
            raise FatalError(f"Resolving the builder of `{project}` requires its targets")

        factory = self.register(project, role)
        context_args: tuple[object, ...] = (project,) if role is Role.BUILDER_BUILDER else (project, targets)
        instance = factory.create(context_args)
        if not isinstance(instance, role.protocol):
            raise FatalError(
                f"`{factory.implementation_type.__qualname__}` does not fulfil the {role.value} role",
                context={"source": str(factory.implementation.source.source_file)},
            )
        self._instances[key] = instance
        return instance

    def resolve_builder_builder(self, project: Project) -> BuilderBuilder:
        return self.resolve_role(project, Role.BUILDER_BUILDER)  # type: ignore[return-value]

    def resolve_builder(self, project: Project, targets: TargetSet) -> Builder:
        return self.resolve_role(project, Role.BUILDER, targets=targets)  # type: ignore[return-value]

    def load_targets(self, project: Project, target_file: PurePosixPath) -> TargetSet:
        """Load the build targets declared in *target_file*, compiling it if stale.

        Raises:
            FatalError: If the file lies outside the project's building code,
                is missing, or does not declare an enumeration with a
                ``builder`` target.
        """
        if target_file in self._targets:
            return self._targets[target_file]
        if target_file.parent not in (project.path, project.path / RESERVED_SEGMENT):
            raise ConfigurationError(
                f"Target file of `{project}` lies outside its building code",
                context={"target_file": str(target_file)},
            )
        artifact = SourceArtifact(root=self._context.workspace_root, proper_path=target_file)
        if not artifact.source_file.is_file():
            raise FatalError(
                f"Target file of `{project}` not found",
                context={"target_file": str(artifact.source_file)},
            )
        if needs_recompile(artifact, self._context.output_root):
            self._context.compile(project.package, [artifact])

        target_type = self._loader.load_type(artifact)
        if not issubclass(target_type, enum.Enum):
            raise FatalError(
                f"`{artifact.class_name}` in `{artifact.type_name}` is not an enumeration",
                context={"target_file": str(artifact.source_file)},
            )
        targets = TargetSet.from_enum(target_type, type_name=f"{artifact.type_name}.{artifact.class_name}")
        self._targets[target_file] = targets
        return targets
