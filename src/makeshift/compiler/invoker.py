# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Runs the compiler driver as a subprocess over a batch of source files.

The toolchain is the running interpreter itself (``sys.executable``) executing
:mod:`makeshift.compiler.driver` by path.  Its standard error is merged into
standard output, captured, and relayed through the progress reporter.
"""

from __future__ import annotations

import enum
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from makeshift.compiler.reporting import ProgressReporter
from makeshift.compiler.staleness import SourceArtifact
from makeshift.errors import FatalError, UserError
from makeshift.home import COMPILER_HOME

# ###############
# Public Interface
# ###############

DRIVER_FILE = COMPILER_HOME / "driver.py"
FIXED_ARGUMENTS_FILE = COMPILER_HOME / "arguments"


class CompileStatus(enum.Enum):
    """Classification of a compiler exit code."""

    SUCCESS = "success"
    USER_ERROR = "user-error"
    FATAL = "fatal"


def classify_exit(returncode: int) -> CompileStatus:
    """Classify a compiler exit code: 0 succeeded, 1 failed on the user's code, else fatal."""
    if returncode == 0:
        return CompileStatus.SUCCESS
    if returncode == 1:
        return CompileStatus.USER_ERROR
    return CompileStatus.FATAL


class CompilerInvoker:
    """Compiles batches of sources into an output root.

    Args:
        output_root: Root of the compiled output.
        argument_files: Argument files passed after the fixed one, e.g. from
            the workspace configuration.
        reporter: Receives progress lines and the captured compiler output.
        executable: The interpreter to run the driver with.
    """

    def __init__(
        self,
        output_root: Path,
        *,
        argument_files: Sequence[Path] = (),
        reporter: ProgressReporter | None = None,
        executable: str = sys.executable,
    ) -> None:
        self.output_root = output_root
        self.argument_files = tuple(argument_files)
        self.reporter = reporter if reporter is not None else ProgressReporter()
        self.executable = executable

    def command(self, source_root: Path, sources: Sequence[SourceArtifact]) -> list[str]:
        """Return the command line compiling *sources*, all relative to *source_root*."""
        return [
            self.executable,
            str(DRIVER_FILE),
            f"@{FIXED_ARGUMENTS_FILE}",
            *(f"@{path}" for path in self.argument_files),
            "--output-root",
            str(self.output_root),
            "--source-root",
            str(source_root),
            *(str(source.proper_path) for source in sources),
        ]

    def compile(self, project_package: str | None, sources: Sequence[SourceArtifact]) -> None:
        """Compile *sources*, blocking until the compiler exits.

        Sources sharing a root are compiled by a single compiler run; nothing
        is run for an empty batch.

        Args:
            project_package: Proper package of the project whose code is
                compiled, or None when compiling builder builders.
            sources: The source files to compile.

        Raises:
            UserError: If the compiler reports an error in the code; its
                diagnostics have already been relayed.
            FatalError: If the compiler cannot be run or exits abnormally.
        """
        batches: dict[Path, list[SourceArtifact]] = {}
        for source in sources:
            batches.setdefault(source.root, []).append(source)
        for source_root, batch in batches.items():
            self._run(project_package, source_root, batch)

    def _run(self, project_package: str | None, source_root: Path, batch: list[SourceArtifact]) -> None:
        cmd = self.command(source_root, batch)
        self.reporter.leader(project_package, "compile")
        captured = ""
        try:
            result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
            captured = result.stdout or ""
        except OSError as exc:
            raise FatalError(f"Cannot run the compiler: {exc}", context={"command": " ".join(cmd)}) from exc
        finally:
            self.reporter.finish(len(batch), captured)

        status = classify_exit(result.returncode)
        if status is CompileStatus.USER_ERROR:
            raise UserError("Stopped on compiler error")
        if status is CompileStatus.FATAL:
            raise FatalError(
                f"Exit status {result.returncode} from the compiler",
                context={"command": " ".join(cmd)},
            )
