# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Template of a project's build target declaration."""

from makeshift.template.build_target import BuildTarget

__all__ = [
    "BuildTarget",
]
