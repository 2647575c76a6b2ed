# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build targets of a project and abbreviated target matching.

A project declares its targets as an :class:`enum.Enum` in its target file.
The declaration is captured once, in order, as a :class:`TargetSet`; from then
on targets are plain names.  Every set includes the mandatory ``builder``
target, which stands for "the build tooling itself is ready".
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass

from makeshift.errors import ConfigurationError, UserError

# ###############
# Public Interface
# ###############

BUILDER_TARGET = "builder"


@dataclass(frozen=True)
class TargetSet:
    """The legal build targets of one project, in declaration order.

    Attributes:
        type_name: Name of the declaring type, used in error messages.
        names: Target names in declaration order.
    """

    type_name: str
    names: tuple[str, ...]

    def __post_init__(self) -> None:
        if BUILDER_TARGET not in self.names:
            raise ConfigurationError(f"Target set `{self.type_name}` lacks the mandatory `{BUILDER_TARGET}` target")

    @classmethod
    def from_enum(cls, target_type: type[enum.Enum], type_name: str | None = None) -> TargetSet:
        """Capture the members of *target_type* as a target set.

        Args:
            target_type: The enumeration declaring the targets.
            type_name: Name to report the set under; defaults to the
                qualified name of *target_type*.
        """
        if type_name is None:
            type_name = f"{target_type.__module__}.{target_type.__qualname__}"
        return cls(type_name=type_name, names=tuple(member.name for member in target_type))

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)


def match_target(query: str, targets: TargetSet) -> str:
    """Return the name of the one target that *query* abbreviates.

    Matching ignores letter case, treats each ``-`` of *query* as ``_``, and
    accepts *query* as any substring of the target name.  There is no
    preference among several matches.

    Args:
        query: The target name as given by the user, possibly abbreviated.
        targets: The legal targets of the project.

    Returns:
        The full name of the matching target.

    Raises:
        UserError: If *query* matches no target, or more than one.
    """
    sought = query.lower().replace("-", "_")
    found = [name for name in targets.names if sought in name.lower()]
    if not found:
        raise UserError(f"Unmatched target in `{targets.type_name}`: {query}")
    if len(found) > 1:
        raise UserError(f"Ambiguous target in `{targets.type_name}`: {query} (matches {', '.join(found)})")
    return found[0]
