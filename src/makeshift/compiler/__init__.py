# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Staleness checks and compiler invocation."""

from makeshift.compiler.invoker import (
    DRIVER_FILE,
    FIXED_ARGUMENTS_FILE,
    CompilerInvoker,
    CompileStatus,
    classify_exit,
)
from makeshift.compiler.reporting import BOOTSTRAP_LABEL, ProgressReporter
from makeshift.compiler.staleness import (
    OUTPUT_SUFFIX,
    SOURCE_SUFFIX,
    SourceArtifact,
    class_name_of,
    compilable_sources,
    needs_recompile,
)

__all__ = [
    "BOOTSTRAP_LABEL",
    "CompileStatus",
    "CompilerInvoker",
    "DRIVER_FILE",
    "FIXED_ARGUMENTS_FILE",
    "OUTPUT_SUFFIX",
    "ProgressReporter",
    "SOURCE_SUFFIX",
    "SourceArtifact",
    "class_name_of",
    "classify_exit",
    "compilable_sources",
    "needs_recompile",
]
