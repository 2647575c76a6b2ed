# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Location of Makeshift's own sources.

Machinery compiled by the bootstrap stage runs from the output root, where its
``__file__`` no longer points into the sources.  Such modules find the driver
and the default role implementations through these constants instead.  This
module itself is never compiled by the bootstrap stage.
"""

from pathlib import Path

HOME_ROOT = Path(__file__).resolve().parents[1]
"""Directory holding the ``makeshift`` package."""

COMPILER_HOME = HOME_ROOT / "makeshift" / "compiler"
"""Directory holding the compiler driver and its fixed argument file."""
