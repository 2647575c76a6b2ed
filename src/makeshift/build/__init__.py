# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build sessions: external building code first, duplicate builds suppressed."""

from makeshift.build.context import BuildContext
from makeshift.build.session import BuildCycleError, BuildSession

__all__ = [
    "BuildContext",
    "BuildCycleError",
    "BuildSession",
]
