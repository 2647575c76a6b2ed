# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Byte-compiler run as a separate process by Makeshift.

Usage::

    python driver.py @ARGUMENT_FILE... --output-root DIR [--source-root DIR] SOURCE...

Each SOURCE is a path relative to the source root; its bytecode is written to
the same relative location under the output root, with a ``.pyc`` extension.
Argument files hold one literal argument per line; blank lines and lines
starting with ``#`` are ignored.

Exit status:
    0  every source compiled;
    1  at least one source has an error in its code (diagnostics on stderr);
    2  the invocation itself is wrong (bad arguments, missing source file).

This script depends on the standard library alone and is run by path, without
importing the rest of the package.
"""

import argparse
import py_compile
import sys
from pathlib import Path

# ###############
# Public Interface
# ###############

EXIT_OK = 0
EXIT_CODE_ERROR = 1
EXIT_USAGE = 2


def main(argv: list[str] | None = None) -> int:
    """Compile the sources named in *argv* and return the exit status."""
    parser = _ArgumentParser(
        prog="makeshift-compile",
        description="Byte-compile Python sources into a mirrored output tree.",
        fromfile_prefix_chars="@",
    )
    parser.add_argument("--output-root", required=True, type=Path, help="Root of the compiled output")
    parser.add_argument(
        "--source-root",
        type=Path,
        default=Path.cwd(),
        help="Root the sources are relative to (default: current directory)",
    )
    parser.add_argument("--optimize", type=int, default=-1, help="Optimization level, as for py_compile")
    parser.add_argument(
        "--invalidation-mode",
        choices=sorted(_INVALIDATION_MODES),
        default="timestamp",
        help="Validation data recorded in each compiled file (default: timestamp)",
    )
    parser.add_argument("sources", nargs="+", metavar="SOURCE", help="Source file relative to the source root")
    args = parser.parse_args(argv)

    status = EXIT_OK
    for name in args.sources:
        relative = Path(name)
        if relative.is_absolute():
            print(f"error: source path is not relative: {name}", file=sys.stderr)
            return EXIT_USAGE
        source = args.source_root / relative
        if not source.is_file():
            print(f"error: file not found: {source}", file=sys.stderr)
            return EXIT_USAGE
        output = args.output_root / relative.parent / (relative.stem + ".pyc")
        try:
            py_compile.compile(
                str(source),
                cfile=str(output),
                doraise=True,
                optimize=args.optimize,
                invalidation_mode=_INVALIDATION_MODES[args.invalidation_mode],
            )
        except py_compile.PyCompileError as exc:
            print(exc.msg, file=sys.stderr)
            status = EXIT_CODE_ERROR
    return status


# ################
# Implementation
# ################

_INVALIDATION_MODES = {
    "timestamp": py_compile.PycInvalidationMode.TIMESTAMP,
    "checked-hash": py_compile.PycInvalidationMode.CHECKED_HASH,
    "unchecked-hash": py_compile.PycInvalidationMode.UNCHECKED_HASH,
}


class _ArgumentParser(argparse.ArgumentParser):
    def convert_arg_line_to_args(self, arg_line: str) -> list[str]:
        line = arg_line.strip()
        if not line or line.startswith("#"):
            return []
        return [line]


if __name__ == "__main__":
    sys.exit(main())
