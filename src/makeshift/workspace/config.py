# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML parser for the optional workspace configuration file."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from makeshift.errors import ConfigurationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".makeshift.yaml"


class WorkspaceConfigError(ConfigurationError):
    """Raised when a workspace configuration file is invalid or cannot be loaded."""


class WorkspaceConfig(BaseModel):
    """The parsed configuration of a Makeshift workspace.

    Attributes:
        output_directory: Root of the compiled output, relative to the
            workspace root or absolute.  Defaults to a directory under the
            system's temporary directory shared by every workspace run
            with the same interpreter version.
        argument_files: Compiler argument files, relative to the workspace
            root or absolute, passed after the fixed ones.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    output_directory: str | None = Field(alias="output-directory", default=None)
    argument_files: list[str] = Field(alias="argument-files", default_factory=list)

    def output_root(self, workspace_root: Path) -> Path:
        """Return the absolute root of the compiled output."""
        if self.output_directory is None:
            return default_output_root()
        return (workspace_root / self.output_directory).resolve()

    def argument_paths(self, workspace_root: Path) -> list[Path]:
        """Return the absolute paths of the configured argument files."""
        return [(workspace_root / name).resolve() for name in self.argument_files]


def default_output_root() -> Path:
    """Return the process-wide default root of the compiled output.

    Each interpreter version gets its own root, since bytecode compiled by one
    cannot be loaded by another.
    """
    return Path(tempfile.gettempdir()) / "makeshift" / sys.implementation.cache_tag


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and validate a workspace configuration file.

    An empty file is treated as an empty configuration.

    Args:
        path: Path to the ``.makeshift.yaml`` file.

    Returns:
        A validated WorkspaceConfig instance.

    Raises:
        WorkspaceConfigError: If the file cannot be read, contains invalid
            YAML, or does not conform to the expected schema.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Workspace config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read workspace config file '{path}': {exc}") from exc

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in '{path}': {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{path}: workspace config must be a YAML mapping")

    try:
        return WorkspaceConfig.model_validate(data)
    except ValidationError as exc:
        raise WorkspaceConfigError(f"Invalid workspace config '{path}': {exc}") from exc


def find_workspace_config(workspace_root: Path) -> WorkspaceConfig:
    """Return the configuration of the workspace at *workspace_root*.

    The defaults apply when the workspace has no configuration file.

    Raises:
        WorkspaceConfigError: If the configuration file exists but is invalid.
    """
    path = workspace_root / CONFIG_FILE_NAME
    if not path.exists():
        return WorkspaceConfig()
    return load_workspace_config(path)
