# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Override resolution and loading of compiled role implementations."""

from makeshift.resolution.loader import LOADED_NAMESPACE, ModuleLoader
from makeshift.resolution.resolver import (
    HOME_ROOT,
    BareConstruction,
    ConstructionShape,
    ContextConstruction,
    DefaultImplementation,
    OverrideImplementation,
    OverrideResolver,
    Role,
    RoleFactory,
    RoleImplementation,
    construction_shape,
)

__all__ = [
    "BareConstruction",
    "ConstructionShape",
    "ContextConstruction",
    "DefaultImplementation",
    "HOME_ROOT",
    "LOADED_NAMESPACE",
    "ModuleLoader",
    "OverrideImplementation",
    "OverrideResolver",
    "Role",
    "RoleFactory",
    "RoleImplementation",
    "construction_shape",
]
