# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Build targets supported by the default builder.

A project declares its own targets in a file of the same form in its internal
building code, naming any subset of these that includes ``builder``.  A
target may be given on the command line by any substring that matches it
uniquely.
"""

import enum

# ###############
# Public Interface
# ###############


class BuildTarget(enum.Enum):
    """A build target of the present project."""

    # The software builder, compiled from source.  Every other target
    # includes it implicitly; nothing builds without first building a builder.
    builder = "builder"

    # Bytecode compiled from the project's Python code.
    bytecode = "bytecode"
