# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""The two kinds of error raised by Makeshift.

A :class:`UserError` describes something the user can fix by editing a target
query or their own source code; its message is shown verbatim.  Anything else
is a :class:`FatalError`, reported as an unexpected failure together with its
diagnostic context.

This module depends on the standard library alone because the bootstrap stage
compiles and uses it before any other machinery exists.
"""

from __future__ import annotations

from collections.abc import Mapping

# ###############
# Public Interface
# ###############


class UserError(Exception):
    """Raised on an anomaly the user is likely in a position to correct."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class FatalError(Exception):
    """Raised on any failure that is not the user's to correct.

    Attributes:
        context: Diagnostic details for the operator (offending path, command
            line and the like), rendered below the message.
    """

    context: Mapping[str, str]

    def __init__(self, message: str, *, context: Mapping[str, str] | None = None) -> None:
        super().__init__(message)
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        for key, value in self.context.items():
            if value:
                parts.append(f"  {key}: {value}")
        return "\n".join(parts)


class ConfigurationError(FatalError):
    """Raised when a project or workspace is configured inconsistently."""
