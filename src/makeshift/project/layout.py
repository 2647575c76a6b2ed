# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Where a project keeps its building code within the workspace."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from makeshift.project.identity import RESERVED_SEGMENT, validate_path

# ###############
# Public Interface
# ###############

TARGET_FILE_NAME = "build_target.py"
TARGET_FILE_FALLBACK_NAME = "target.py"


def internal_building_code(workspace_root: Path, project_path: PurePosixPath) -> PurePosixPath:
    """Return the proper path of the directory holding a project's building code.

    This is ``<project_path>/builder`` if such a directory exists, otherwise
    ``<project_path>`` itself.  Building code is kept in this directory alone,
    exclusive of subdirectories.
    """
    validate_path(project_path)
    candidate = project_path / RESERVED_SEGMENT
    if (workspace_root / candidate).is_dir():
        return candidate
    return project_path


def default_target_file(workspace_root: Path, project_path: PurePosixPath) -> PurePosixPath:
    """Return the proper path of the file defining a project's build targets.

    The file is ``build_target.py`` in the internal building code if one
    exists there, else ``target.py`` in the same directory.
    """
    directory = internal_building_code(workspace_root, project_path)
    candidate = directory / TARGET_FILE_NAME
    if (workspace_root / candidate).is_file():
        return candidate
    return directory / TARGET_FILE_FALLBACK_NAME
