# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Role contracts of a project build and their default implementations."""

from makeshift.roles.builder_builder_default import BuilderBuilderDefault
from makeshift.roles.builder_default import BuilderDefault
from makeshift.roles.contracts import Builder, BuilderBuilder

__all__ = [
    "Builder",
    "BuilderBuilder",
    "BuilderBuilderDefault",
    "BuilderDefault",
]
