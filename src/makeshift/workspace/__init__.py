# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration for Makeshift."""

from makeshift.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    default_output_root,
    find_workspace_config,
    load_workspace_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "default_output_root",
    "find_workspace_config",
    "load_workspace_config",
]
