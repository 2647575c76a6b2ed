# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Everything a build step needs to know about its surroundings."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from makeshift.compiler.invoker import CompilerInvoker
from makeshift.compiler.staleness import SourceArtifact, compilable_sources

# ###############
# Public Interface
# ###############


@dataclass(frozen=True)
class BuildContext:
    """The surroundings of one build run, passed explicitly to every build step.

    Attributes:
        workspace_root: Directory that proper paths of projects are relative to.
        compiler: Compiles stale sources into the output root.
    """

    workspace_root: Path
    compiler: CompilerInvoker

    @property
    def output_root(self) -> Path:
        return self.compiler.output_root

    def stale_sources(
        self,
        directory: PurePosixPath,
        accept: Callable[[str], bool] | None = None,
    ) -> list[SourceArtifact]:
        """Return the stale ``.py`` files directly inside workspace directory *directory*."""
        return compilable_sources(self.workspace_root, directory, self.output_root, accept)

    def compile(self, project_package: str | None, sources: list[SourceArtifact]) -> None:
        """Compile *sources* in one batch, doing nothing if there are none.

        Import caches are invalidated afterwards so that the new output is
        importable at once.
        """
        if sources:
            self.compiler.compile(project_package, sources)
            importlib.invalidate_caches()
