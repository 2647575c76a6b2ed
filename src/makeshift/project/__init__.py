# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Project identity, layout conventions, and build targets."""

from makeshift.project.identity import (
    RESERVED_SEGMENT,
    Project,
    to_package,
    to_path,
    validate_code_package,
    validate_package,
    validate_pair,
    validate_path,
)
from makeshift.project.layout import (
    TARGET_FILE_FALLBACK_NAME,
    TARGET_FILE_NAME,
    default_target_file,
    internal_building_code,
)
from makeshift.project.targets import BUILDER_TARGET, TargetSet, match_target

__all__ = [
    "BUILDER_TARGET",
    "Project",
    "RESERVED_SEGMENT",
    "TARGET_FILE_FALLBACK_NAME",
    "TARGET_FILE_NAME",
    "TargetSet",
    "default_target_file",
    "internal_building_code",
    "match_target",
    "to_package",
    "to_path",
    "validate_code_package",
    "validate_package",
    "validate_pair",
    "validate_path",
]
