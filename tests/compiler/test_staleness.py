# Copyright 2026 Makeshift Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the timestamp-based staleness check."""

from __future__ import annotations

import os
import time
from pathlib import Path, PurePosixPath

import pytest

from makeshift.compiler.driver import main as compile_main
from makeshift.compiler.staleness import SourceArtifact, class_name_of, compilable_sources, needs_recompile
from makeshift.errors import FatalError

# ###############
# Helpers
# ###############


def _write(path: Path, content: str = "", *, mtime_offset: float = -2.0) -> None:
    """Write *content* to *path* with an mtime *mtime_offset* seconds from now."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    t = time.time() + mtime_offset
    os.utime(path, (t, t))


def _set_mtime(path: Path, mtime_ns: int) -> None:
    os.utime(path, ns=(mtime_ns, mtime_ns))


# ###############
# SourceArtifact
# ###############


class TestSourceArtifact:
    def test_names(self, tmp_path: Path) -> None:
        artifact = SourceArtifact(root=tmp_path, proper_path=PurePosixPath("acme/app/builder/build_target.py"))
        assert artifact.source_file == tmp_path / "acme" / "app" / "builder" / "build_target.py"
        assert artifact.simple_type_name == "build_target"
        assert artifact.type_name == "acme.app.builder.build_target"
        assert artifact.class_name == "BuildTarget"

    def test_output_file_mirrors_source_layout(self, tmp_path: Path) -> None:
        artifact = SourceArtifact(root=tmp_path / "src", proper_path=PurePosixPath("a/b/some_name.py"))
        assert artifact.output_file(tmp_path / "out") == tmp_path / "out" / "a" / "b" / "some_name.pyc"

    @pytest.mark.parametrize(
        ("stem", "expected"),
        [
            ("builder_builder", "BuilderBuilder"),
            ("builder", "Builder"),
            ("build_target", "BuildTarget"),
            ("BuildHelp", "BuildHelp"),
        ],
    )
    def test_class_name_of(self, stem: str, expected: str) -> None:
        assert class_name_of(stem) == expected


# ###############
# needs_recompile
# ###############


class TestNeedsRecompile:
    def test_missing_output_is_stale(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "a" / "m.py")
        artifact = SourceArtifact(root=tmp_path / "src", proper_path=PurePosixPath("a/m.py"))
        assert needs_recompile(artifact, tmp_path / "out")

    def test_newer_output_is_current(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "a" / "m.py", mtime_offset=-10.0)
        _write(tmp_path / "out" / "a" / "m.pyc", mtime_offset=-5.0)
        artifact = SourceArtifact(root=tmp_path / "src", proper_path=PurePosixPath("a/m.py"))
        assert not needs_recompile(artifact, tmp_path / "out")

    def test_newer_source_is_stale(self, tmp_path: Path) -> None:
        _write(tmp_path / "src" / "a" / "m.py", mtime_offset=-5.0)
        _write(tmp_path / "out" / "a" / "m.pyc", mtime_offset=-10.0)
        artifact = SourceArtifact(root=tmp_path / "src", proper_path=PurePosixPath("a/m.py"))
        assert needs_recompile(artifact, tmp_path / "out")

    def test_equal_timestamps_are_stale(self, tmp_path: Path) -> None:
        source = tmp_path / "src" / "a" / "m.py"
        output = tmp_path / "out" / "a" / "m.pyc"
        _write(source)
        _write(output)
        stamp = 1_700_000_000_000_000_000
        _set_mtime(source, stamp)
        _set_mtime(output, stamp)
        artifact = SourceArtifact(root=tmp_path / "src", proper_path=PurePosixPath("a/m.py"))
        assert needs_recompile(artifact, tmp_path / "out")

    def test_missing_source_with_output_is_fatal(self, tmp_path: Path) -> None:
        _write(tmp_path / "out" / "a" / "m.pyc")
        artifact = SourceArtifact(root=tmp_path / "src", proper_path=PurePosixPath("a/m.py"))
        with pytest.raises(FatalError, match="modification times"):
            needs_recompile(artifact, tmp_path / "out")

    def test_current_after_compiling(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        out = tmp_path / "out"
        _write(src / "a" / "m.py", "X = 1\n")
        artifact = SourceArtifact(root=src, proper_path=PurePosixPath("a/m.py"))
        assert needs_recompile(artifact, out)
        assert compile_main(["--output-root", str(out), "--source-root", str(src), "a/m.py"]) == 0
        assert not needs_recompile(artifact, out)
        assert not needs_recompile(artifact, out)


# ###############
# compilable_sources
# ###############


class TestCompilableSources:
    def test_lists_stale_python_files_in_order(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        _write(src / "pkg" / "b.py")
        _write(src / "pkg" / "a.py")
        _write(src / "pkg" / "notes.txt")
        found = compilable_sources(src, PurePosixPath("pkg"), tmp_path / "out")
        assert [a.proper_path for a in found] == [PurePosixPath("pkg/a.py"), PurePosixPath("pkg/b.py")]

    def test_does_not_descend_into_subdirectories(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        _write(src / "pkg" / "a.py")
        _write(src / "pkg" / "sub" / "deep.py")
        found = compilable_sources(src, PurePosixPath("pkg"), tmp_path / "out")
        assert [a.proper_path.name for a in found] == ["a.py"]

    def test_skips_current_files(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        out = tmp_path / "out"
        _write(src / "pkg" / "a.py", mtime_offset=-10.0)
        _write(src / "pkg" / "b.py", mtime_offset=-10.0)
        _write(out / "pkg" / "a.pyc", mtime_offset=-5.0)
        found = compilable_sources(src, PurePosixPath("pkg"), out)
        assert [a.proper_path.name for a in found] == ["b.py"]

    def test_accept_filters_by_file_name(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        _write(src / "pkg" / "build_target.py")
        _write(src / "pkg" / "build_help.py")
        _write(src / "pkg" / "app.py")
        found = compilable_sources(src, PurePosixPath("pkg"), tmp_path / "out", lambda name: name.startswith("build"))
        assert [a.proper_path.name for a in found] == ["build_help.py", "build_target.py"]

    def test_empty_when_all_current(self, tmp_path: Path) -> None:
        src = tmp_path / "src"
        out = tmp_path / "out"
        _write(src / "pkg" / "a.py", mtime_offset=-10.0)
        _write(out / "pkg" / "a.pyc", mtime_offset=-5.0)
        assert compilable_sources(src, PurePosixPath("pkg"), out) == []

    def test_missing_directory_is_fatal(self, tmp_path: Path) -> None:
        with pytest.raises(FatalError, match="Cannot list") as exc_info:
            compilable_sources(tmp_path, PurePosixPath("absent"), tmp_path / "out")
        assert "absent" in str(exc_info.value)
