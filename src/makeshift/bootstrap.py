# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""The earliest build stage: compiling Makeshift's own machinery.

Before any project can be resolved, the modules that do the resolving must be
compiled into the output root.  This stage does so with nothing but the
standard library: its own timestamp check and a direct run of the compiler
driver.  No role resolution, no overrides.  Beyond the standard library it
imports only :mod:`makeshift.home` and modules that it compiles itself.

Once compiled, the machinery is what runs: :meth:`Bootstrap.load_machinery`
puts a finder ahead of the source tree that serves the machinery modules from
the output root.  An edit to a machinery source takes effect only after the
stage has recompiled it.

Its target set is the single ``builder`` target: once it has run, the build
tooling is ready.
"""

from __future__ import annotations

import importlib
import importlib.abc
import importlib.util
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from importlib.machinery import ModuleSpec, SourcelessFileLoader
from pathlib import Path, PurePosixPath
from types import ModuleType
from typing import TYPE_CHECKING, TextIO

from makeshift.errors import FatalError, UserError
from makeshift.home import HOME_ROOT
from makeshift.project.targets import BUILDER_TARGET, TargetSet, match_target

if TYPE_CHECKING:
    from makeshift.build.context import BuildContext
    from makeshift.build.session import BuildSession
    from makeshift.compiler.invoker import CompilerInvoker

# ###############
# Public Interface
# ###############

MACHINERY: tuple[PurePosixPath, ...] = tuple(
    PurePosixPath("makeshift", *name.split("/"))
    for name in (
        "errors.py",
        "project/identity.py",
        "project/layout.py",
        "project/targets.py",
        "compiler/staleness.py",
        "compiler/reporting.py",
        "compiler/invoker.py",
        "resolution/loader.py",
        "resolution/resolver.py",
        "roles/contracts.py",
        "build/context.py",
        "build/session.py",
    )
)
"""Proper paths, under the home root, of the modules this stage compiles."""

BOOTSTRAP_TARGETS = TargetSet(type_name="makeshift.bootstrap", names=(BUILDER_TARGET,))


class MachineryFinder(importlib.abc.MetaPathFinder):
    """Serves the machinery modules from their compiled output under *output_root*."""

    def __init__(self, output_root: Path) -> None:
        self.output_root = output_root
        self._machinery = {".".join((*path.parent.parts, path.stem)): path for path in MACHINERY}

    def find_spec(
        self,
        fullname: str,
        path: Sequence[str] | None,
        target: ModuleType | None = None,
    ) -> ModuleSpec | None:
        proper_path = self._machinery.get(fullname)
        if proper_path is None:
            return None
        compiled = self.output_root / proper_path.parent / (proper_path.stem + ".pyc")
        if not compiled.is_file():
            return None
        return importlib.util.spec_from_file_location(
            fullname, compiled, loader=SourcelessFileLoader(fullname, str(compiled))
        )


@dataclass(frozen=True)
class Machinery:
    """The types a build run is made of, as loaded after the bootstrap stage."""

    session_type: type[BuildSession]
    context_type: type[BuildContext]
    compiler_type: type[CompilerInvoker]


class Bootstrap:
    """Compiles the machinery; each stage runs at most once.

    Args:
        output_root: Root of the compiled output.
        home_root: Directory holding the ``makeshift`` package.
        executable: The interpreter to run the compiler driver with.
        stream: Where progress is printed (standard output by default).
    """

    def __init__(
        self,
        output_root: Path,
        *,
        home_root: Path = HOME_ROOT,
        executable: str = sys.executable,
        stream: TextIO | None = None,
    ) -> None:
        self.output_root = output_root
        self.home_root = home_root
        self.executable = executable
        self._stream = stream
        self._has_run = False

    @property
    def has_run(self) -> bool:
        return self._has_run

    def stale_sources(self) -> list[PurePosixPath]:
        """Return the machinery modules whose compiled output is missing or out of date."""
        return [path for path in MACHINERY if self._is_stale(path)]

    def run(self) -> int:
        """Compile the stale machinery modules.

        Returns:
            The number of modules compiled.

        Raises:
            UserError: If the compiler reports an error in the machinery's code.
            FatalError: If this stage already ran, or compiling fails otherwise.
        """
        if self._has_run:
            raise FatalError("Bootstrap stage already ran")
        stale = self.stale_sources()
        if stale:
            self._compile(stale)
        self._has_run = True
        return len(stale)

    def build(self, query: str) -> str:
        """Build the bootstrap project to the level of the target *query* abbreviates.

        Raises:
            UserError: If *query* does not abbreviate ``builder``.
        """
        target = match_target(query, BOOTSTRAP_TARGETS)
        if not self._has_run:
            self.run()
        return target

    def load_machinery(self) -> Machinery:
        """Return the build machinery as this stage compiled it.

        Installs a :class:`MachineryFinder` at the front of :data:`sys.meta_path`,
        replacing that of any earlier stage, then imports the machinery.  A
        module imported before the finder was installed stays as it is.

        Raises:
            FatalError: If the stage has not run yet.
        """
        if not self._has_run:
            raise FatalError("Machinery loaded before the bootstrap stage ran")
        sys.meta_path[:] = [finder for finder in sys.meta_path if not isinstance(finder, MachineryFinder)]
        sys.meta_path.insert(0, MachineryFinder(self.output_root))

        session = importlib.import_module("makeshift.build.session")
        context = importlib.import_module("makeshift.build.context")
        invoker = importlib.import_module("makeshift.compiler.invoker")
        return Machinery(
            session_type=session.BuildSession,
            context_type=context.BuildContext,
            compiler_type=invoker.CompilerInvoker,
        )

    def _is_stale(self, proper_path: PurePosixPath) -> bool:
        source = self.home_root / proper_path
        output = self.output_root / proper_path.parent / (proper_path.stem + ".pyc")
        try:
            if not output.exists():
                return True
            return source.stat().st_mtime_ns >= output.stat().st_mtime_ns
        except OSError as exc:
            raise FatalError(f"Cannot examine machinery source: {exc}", context={"source": str(source)}) from exc

    def _compile(self, stale: list[PurePosixPath]) -> None:
        compiler_dir = self.home_root / "makeshift" / "compiler"
        cmd = [
            self.executable,
            str(compiler_dir / "driver.py"),
            f"@{compiler_dir / 'arguments'}",
            "--output-root",
            str(self.output_root),
            "--source-root",
            str(self.home_root),
            *(str(path) for path in stale),
        ]
        self._print("makeshift (bootstrap)")
        self._print("    compile ", end="")
        try:
            result = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
        except OSError as exc:
            self._print(str(len(stale)))
            raise FatalError(f"Cannot run the compiler: {exc}", context={"command": " ".join(cmd)}) from exc
        if result.stdout:
            self._print(f"{len(stale)} …")
            self._print(result.stdout, end="")
        else:
            self._print(str(len(stale)))

        if result.returncode == 1:
            raise UserError("Stopped on compiler error")
        if result.returncode != 0:
            raise FatalError(f"Exit status {result.returncode} from the compiler", context={"command": " ".join(cmd)})

    def _print(self, text: str, *, end: str = "\n") -> None:
        print(text, end=end, file=self._stream if self._stream is not None else sys.stdout, flush=True)
