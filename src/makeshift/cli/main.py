# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the Makeshift command-line interface."""

from __future__ import annotations

import argparse
import sys
import traceback
from pathlib import Path
from typing import TYPE_CHECKING

from yachalk import chalk

from makeshift.bootstrap import Bootstrap
from makeshift.errors import UserError
from makeshift.project import Project
from makeshift.workspace.config import find_workspace_config

if TYPE_CHECKING:
    from makeshift.build.session import BuildSession

# ###############
# Public Interface
# ###############

EXIT_OK = 0
EXIT_USER_ERROR = 1
EXIT_FATAL = 3


def main() -> None:
    """Run the Makeshift CLI."""
    parser = argparse.ArgumentParser(
        prog="makeshift",
        description="Makeshift: a self-hosting builder of software builders",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # build subcommand
    build_parser = subparsers.add_parser(
        "build",
        help="Build a project to the level of a target",
        description=(
            "Build a project to the level of a target. TARGET may be any substring that matches "
            "exactly one of the project's targets. Without a project, the target is one of "
            "Makeshift's own."
        ),
    )
    build_parser.add_argument("target", metavar="TARGET", help="Name of the target, or a unique substring of it")
    _add_project_arguments(build_parser, required=False)
    _add_workspace_argument(build_parser)

    # targets subcommand
    targets_parser = subparsers.add_parser(
        "targets",
        help="List the build targets of a project",
        description="Build the builder of a project and list its build targets in order of declaration.",
    )
    _add_project_arguments(targets_parser, required=True)
    _add_workspace_argument(targets_parser)

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _add_project_arguments(parser: argparse.ArgumentParser, *, required: bool) -> None:
    group = parser.add_mutually_exclusive_group(required=required)
    group.add_argument("--package", help="Proper package of the project, e.g. acme.app")
    group.add_argument("--path", help="Proper path of the project relative to the workspace, e.g. acme/app")


def _add_workspace_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workspace",
        default=".",
        help="Workspace root that project paths are relative to (default: current directory)",
    )


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the subcommand handler, reporting any error it raises."""
    try:
        if args.command == "build":
            return _cmd_build(args)
        if args.command == "targets":
            return _cmd_targets(args)
    except UserError as exc:
        print(chalk.red(f"Error: {exc}"), file=sys.stderr)
        return EXIT_USER_ERROR
    except Exception:
        print(chalk.red("Unexpected failure:"), file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        return EXIT_FATAL
    return EXIT_OK


def _cmd_build(args: argparse.Namespace) -> int:
    """Handle the build subcommand."""
    workspace = _workspace_root(args)
    if workspace is None:
        return EXIT_USER_ERROR

    bootstrap, session = _start(workspace)
    if args.package is None and args.path is None:
        bootstrap.build(args.target)
        return EXIT_OK

    session.build_target(_project(args), args.target)
    return EXIT_OK


def _cmd_targets(args: argparse.Namespace) -> int:
    """Handle the targets subcommand."""
    workspace = _workspace_root(args)
    if workspace is None:
        return EXIT_USER_ERROR

    _, session = _start(workspace)
    for name in session.targets(_project(args)):
        print(name)
    return EXIT_OK


def _workspace_root(args: argparse.Namespace) -> Path | None:
    directory = Path(args.workspace).resolve()
    if not directory.is_dir():
        print(f"Error: directory '{directory}' does not exist.", file=sys.stderr)
        return None
    return directory


def _start(workspace: Path) -> tuple[Bootstrap, BuildSession]:
    """Run the bootstrap stage, then open a build session over *workspace*.

    The session runs on the machinery the stage compiled, so nothing beyond
    the stage itself is imported before it.
    """
    config = find_workspace_config(workspace)
    output_root = config.output_root(workspace)
    bootstrap = Bootstrap(output_root)
    bootstrap.run()

    machinery = bootstrap.load_machinery()
    compiler = machinery.compiler_type(output_root, argument_files=config.argument_paths(workspace))
    context = machinery.context_type(workspace_root=workspace, compiler=compiler)
    return bootstrap, machinery.session_type(context)


def _project(args: argparse.Namespace) -> Project:
    if args.package is not None:
        return Project.from_package(args.package)
    return Project.from_path(args.path)
