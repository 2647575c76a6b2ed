# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Progress output of an incremental build.

Output is grouped by project: the project's proper package is printed once
whenever reporting moves to a different project, followed by one indented line
per compiler run::

    acme.app
        compile 3
"""

from __future__ import annotations

import sys
from typing import TextIO

from yachalk import chalk

# ###############
# Public Interface
# ###############

BOOTSTRAP_LABEL = "makeshift (bootstrap)"


class ProgressReporter:
    """Prints build progress to a text stream (standard output by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._showing: str | None = None

    def leader(self, project_package: str | None, kind: str) -> None:
        """Print the beginning of a progress line.

        Args:
            project_package: Proper package of the project being built, or
                None while builder builders are being compiled.
            kind: Short name of the kind of progress, e.g. ``compile``.
        """
        label = BOOTSTRAP_LABEL if project_package is None else project_package
        if label != self._showing:
            self._showing = label
            self._print(chalk.bold(label))
        self._print(f"    {kind} ", end="")

    def finish(self, count: int, captured: str = "") -> None:
        """Complete a progress line with *count* and relay any captured tool output.

        An ellipsis after the count marks that the tool had something to say,
        in which case *count* is the number attempted rather than achieved.
        """
        if captured:
            self._print(f"{count} …")
            self._print(captured, end="" if captured.endswith("\n") else "\n")
        else:
            self._print(str(count))

    def _print(self, text: str, *, end: str = "\n") -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        print(text, end=end, file=stream, flush=True)
