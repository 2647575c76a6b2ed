# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the bootstrap stage that compiles Makeshift's own machinery."""

from __future__ import annotations

import importlib.util
import io
import os
import shutil
import sys
import time
from pathlib import Path
from types import ModuleType
from unittest.mock import MagicMock, patch

import pytest

from makeshift.bootstrap import BOOTSTRAP_TARGETS, HOME_ROOT, MACHINERY, Bootstrap, MachineryFinder
from makeshift.errors import FatalError, UserError

# ###############
# Helpers
# ###############


def _completed(returncode: int, stdout: str = "") -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    return result


def _home_copy(tmp_path: Path) -> Path:
    """Copy the makeshift package to a scratch home root whose sources can be edited."""
    home = tmp_path / "home"
    shutil.copytree(HOME_ROOT / "makeshift", home / "makeshift", ignore=shutil.ignore_patterns("__pycache__"))
    return home


# ###############
# Machinery
# ###############


class TestMachinery:
    def test_machinery_sources_exist(self) -> None:
        for proper_path in MACHINERY:
            assert (HOME_ROOT / proper_path).is_file(), proper_path

    def test_single_builder_target(self) -> None:
        assert BOOTSTRAP_TARGETS.names == ("builder",)


# ###############
# Run
# ###############


class TestRun:
    def test_compiles_all_machinery_on_first_run(self, tmp_path: Path) -> None:
        stream = io.StringIO()
        count = Bootstrap(tmp_path / "out", stream=stream).run()
        assert count == len(MACHINERY)
        for proper_path in MACHINERY:
            assert (tmp_path / "out" / proper_path.parent / (proper_path.stem + ".pyc")).is_file()
        assert stream.getvalue() == f"makeshift (bootstrap)\n    compile {len(MACHINERY)}\n"

    def test_nothing_stale_after_run(self, tmp_path: Path) -> None:
        Bootstrap(tmp_path / "out", stream=io.StringIO()).run()
        stream = io.StringIO()
        bootstrap = Bootstrap(tmp_path / "out", stream=stream)
        assert bootstrap.stale_sources() == []
        assert bootstrap.run() == 0
        assert stream.getvalue() == ""

    def test_runs_once_per_stage(self, tmp_path: Path) -> None:
        bootstrap = Bootstrap(tmp_path / "out", stream=io.StringIO())
        bootstrap.run()
        assert bootstrap.has_run
        with pytest.raises(FatalError, match="already ran"):
            bootstrap.run()

    def test_edited_machinery_recompiled(self, tmp_path: Path) -> None:
        home = _home_copy(tmp_path)
        Bootstrap(tmp_path / "out", home_root=home, stream=io.StringIO()).run()
        errors = home / "makeshift" / "errors.py"
        errors.write_text(errors.read_text(encoding="utf-8") + "\n", encoding="utf-8")
        stale = Bootstrap(tmp_path / "out", home_root=home, stream=io.StringIO()).stale_sources()
        assert [path.name for path in stale] == ["errors.py"]

    def test_code_error_is_user_error(self, tmp_path: Path) -> None:
        home = _home_copy(tmp_path)
        (home / "makeshift" / "errors.py").write_text("class UserError(:\n", encoding="utf-8")
        stream = io.StringIO()
        with pytest.raises(UserError, match="Stopped on compiler error"):
            Bootstrap(tmp_path / "out", home_root=home, stream=stream).run()
        assert "…" in stream.getvalue()

    def test_abnormal_exit_is_fatal(self, tmp_path: Path) -> None:
        with patch("subprocess.run", return_value=_completed(2, "usage")):
            with pytest.raises(FatalError, match="Exit status 2") as exc_info:
                Bootstrap(tmp_path / "out", stream=io.StringIO()).run()
        assert "driver.py" in exc_info.value.context["command"]

    def test_unrunnable_compiler_is_fatal(self, tmp_path: Path) -> None:
        bootstrap = Bootstrap(tmp_path / "out", executable=str(tmp_path / "no-such-python"), stream=io.StringIO())
        with pytest.raises(FatalError, match="Cannot run the compiler"):
            bootstrap.run()


# ###############
# Build
# ###############


class TestBuild:
    def test_builder_target_runs_stage(self, tmp_path: Path) -> None:
        bootstrap = Bootstrap(tmp_path / "out", stream=io.StringIO())
        assert bootstrap.build("bui") == "builder"
        assert bootstrap.has_run

    def test_build_after_run_does_not_rerun(self, tmp_path: Path) -> None:
        bootstrap = Bootstrap(tmp_path / "out", stream=io.StringIO())
        bootstrap.run()
        assert bootstrap.build("builder") == "builder"

    def test_unmatched_target_is_user_error(self, tmp_path: Path) -> None:
        bootstrap = Bootstrap(tmp_path / "out", stream=io.StringIO())
        with pytest.raises(UserError, match="Unmatched target"):
            bootstrap.build("bytecode")
        assert not bootstrap.has_run


# ###############
# Loading the machinery
# ###############


def _load_compiled(finder: MachineryFinder, fullname: str) -> ModuleType:
    """Execute the compiled module *fullname* without registering it in sys.modules."""
    spec = finder.find_spec(fullname, None)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestMachineryFinder:
    def test_serves_compiled_machinery(self, tmp_path: Path) -> None:
        Bootstrap(tmp_path / "out", stream=io.StringIO()).run()
        spec = MachineryFinder(tmp_path / "out").find_spec("makeshift.build.session", None)
        assert spec is not None
        assert spec.origin == str(tmp_path / "out" / "makeshift" / "build" / "session.pyc")

    @pytest.mark.parametrize("fullname", ["makeshift.build", "makeshift.bootstrap", "makeshift.cli.main", "acme.app"])
    def test_ignores_other_modules(self, tmp_path: Path, fullname: str) -> None:
        Bootstrap(tmp_path / "out", stream=io.StringIO()).run()
        assert MachineryFinder(tmp_path / "out").find_spec(fullname, None) is None

    def test_nothing_before_compiling(self, tmp_path: Path) -> None:
        assert MachineryFinder(tmp_path / "out").find_spec("makeshift.build.session", None) is None

    def test_edit_takes_effect_only_after_rebuild(self, tmp_path: Path) -> None:
        home = _home_copy(tmp_path)
        Bootstrap(tmp_path / "out", home_root=home, stream=io.StringIO()).run()
        session = home / "makeshift" / "build" / "session.py"
        session.write_text(session.read_text(encoding="utf-8") + "\nEDITION = 2\n", encoding="utf-8")
        future = time.time() + 5
        os.utime(session, (future, future))
        finder = MachineryFinder(tmp_path / "out")
        assert not hasattr(_load_compiled(finder, "makeshift.build.session"), "EDITION")

        Bootstrap(tmp_path / "out", home_root=home, stream=io.StringIO()).run()
        assert _load_compiled(finder, "makeshift.build.session").EDITION == 2


    def test_compiled_invoker_finds_driver_in_sources(self, tmp_path: Path) -> None:
        Bootstrap(tmp_path / "out", stream=io.StringIO()).run()
        invoker = _load_compiled(MachineryFinder(tmp_path / "out"), "makeshift.compiler.invoker")
        assert invoker.__file__ == str(tmp_path / "out" / "makeshift" / "compiler" / "invoker.pyc")
        assert invoker.DRIVER_FILE == HOME_ROOT / "makeshift" / "compiler" / "driver.py"
        assert invoker.DRIVER_FILE.is_file()


class TestLoadMachinery:
    def test_requires_run(self, tmp_path: Path) -> None:
        with pytest.raises(FatalError, match="before the bootstrap stage ran"):
            Bootstrap(tmp_path / "out", stream=io.StringIO()).load_machinery()

    def test_installs_single_finder_first(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "meta_path", list(sys.meta_path))
        for name in ("one", "two"):
            bootstrap = Bootstrap(tmp_path / name, stream=io.StringIO())
            bootstrap.run()
            bootstrap.load_machinery()
        finders = [finder for finder in sys.meta_path if isinstance(finder, MachineryFinder)]
        assert finders == [sys.meta_path[0]]
        assert sys.meta_path[0].output_root == tmp_path / "two"  # type: ignore[union-attr]

    def test_returns_build_types(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(sys, "meta_path", list(sys.meta_path))
        bootstrap = Bootstrap(tmp_path / "out", stream=io.StringIO())
        bootstrap.run()
        machinery = bootstrap.load_machinery()
        assert machinery.session_type.__name__ == "BuildSession"
        assert machinery.context_type.__name__ == "BuildContext"
        assert machinery.compiler_type.__name__ == "CompilerInvoker"
