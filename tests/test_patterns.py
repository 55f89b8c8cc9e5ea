# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for include/exclude pattern selection."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

import pytest

from support import populate
from wscleanup.clean.patterns import compile_pattern, compile_rules, select_paths
from wscleanup.config import PatternRule
from wscleanup.errors import SelectionError


def _names(paths: list[PurePosixPath]) -> list[str]:
    return [path.as_posix() for path in paths]


@pytest.mark.parametrize(
    ("pattern", "matching", "other"),
    [
        ("bar.*", ["bar.txt", "bar."], ["foo.txt", "sub/bar.txt"]),
        ("*.log", ["a.log"], ["dir/a.log"]),
        ("**/*.log", ["a.log", "x/y/a.log"], ["a.log.txt"]),
        ("build/", ["build", "build/x", "build/x/y.o"], ["builds", "src/build"]),
        ("a/**/b", ["a/b", "a/x/b", "a/x/y/b"], ["b", "a/bb"]),
        ("a/**/**/b", ["a/b", "a/x/y/b"], ["a/c"]),
        ("./src/*.py", ["src/main.py"], ["src/pkg/main.py"]),
        ("file?.txt", ["file1.txt"], ["file10.txt", "file/.txt"]),
        ("**", ["a", "a/b/c"], []),
        ("$5 only!", ["$5 only!"], ["$5 only"]),
    ],
)
def test_compile_pattern_matches(pattern: str, matching: list[str], other: list[str]) -> None:
    compiled = compile_pattern(pattern)
    for candidate in matching:
        assert compiled.match(candidate), candidate
    for candidate in other:
        assert not compiled.match(candidate), candidate


@pytest.mark.parametrize(
    "pattern",
    ["", "   ", ".", "/etc/passwd", "C:/temp", "../outside", "a/../b", "a**b", "src/**.py", "bad\0name"],
)
def test_compile_pattern_rejects_invalid(pattern: str) -> None:
    with pytest.raises(SelectionError) as excinfo:
        compile_pattern(pattern)
    assert excinfo.value.pattern == pattern


def test_empty_rules_select_direct_children(workspace: Path) -> None:
    populate(workspace, "b.txt", "a/nested/deep.txt", ".hidden")

    selection = select_paths(workspace, [])

    assert _names(selection.paths) == [".hidden", "a", "b.txt"]


def test_include_keeps_unmatched_files(workspace: Path) -> None:
    populate(workspace, "foo.txt", "bar.txt", "sub/bar.log")

    selection = select_paths(workspace, [PatternRule.include("bar.*")])

    assert _names(selection.paths) == ["bar.txt"]


def test_exclude_only_rules_are_order_independent(workspace: Path) -> None:
    populate(workspace, "a.txt", "b.keep", "keep/c.txt", "sub/d.txt", "sub/e.keep")
    forward = [PatternRule.exclude("**/*.keep"), PatternRule.exclude("keep/**")]
    backward = list(reversed(forward))

    first = select_paths(workspace, forward)
    second = select_paths(workspace, backward)

    assert set(first.paths) == set(second.paths)
    assert _names(first.paths) == ["a.txt", "sub/d.txt"]


def test_exclude_wins_over_include(workspace: Path) -> None:
    populate(workspace, "out/a.o", "out/keep.o")
    rules = [PatternRule.exclude("out/keep.o"), PatternRule.include("out/*.o")]

    assert _names(select_paths(workspace, rules).paths) == ["out/a.o"]


def test_directories_selected_whole_only_with_delete_dirs(workspace: Path) -> None:
    populate(workspace, "build/x.o", "build/sub/y.o", "src/main.c")
    rules = [PatternRule.include("build/")]

    without_dirs = select_paths(workspace, rules)
    with_dirs = select_paths(workspace, rules, delete_dirs=True)

    assert sorted(_names(without_dirs.paths)) == ["build/sub/y.o", "build/x.o"]
    assert _names(with_dirs.paths) == ["build"]


def test_directory_with_excluded_descendant_is_descended(workspace: Path) -> None:
    populate(workspace, "build/out.o", "build/keep/notes.txt")
    rules = [PatternRule.include("build/**"), PatternRule.exclude("build/keep/notes.txt")]

    selection = select_paths(workspace, rules, delete_dirs=True)

    assert _names(selection.paths) == ["build/out.o"]


def test_selected_paths_never_nest(workspace: Path) -> None:
    populate(workspace, "a/b/c/d.txt", "a/e.txt", "f/g.txt")

    selection = select_paths(workspace, [PatternRule.exclude("f/g.txt")], delete_dirs=True)

    names = _names(selection.paths)
    assert names == ["a"]
    for path in selection.paths:
        for other in selection.paths:
            assert path == other or path not in other.parents


def test_invalid_pattern_raises_before_reading_root(tmp_path: Path) -> None:
    missing = tmp_path / "does-not-exist"

    with pytest.raises(SelectionError):
        select_paths(missing, [PatternRule.include("/absolute")])


def test_missing_root_selects_nothing(tmp_path: Path) -> None:
    selection = select_paths(tmp_path / "gone", [PatternRule.include("**")])

    assert selection.paths == []
    assert selection.unreadable == []


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_directory_symlinks_are_not_followed(workspace: Path, tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    populate(outside, "precious.txt")
    try:
        (workspace / "link").symlink_to(outside, target_is_directory=True)
    except OSError:
        pytest.skip("symlink creation not permitted")

    selection = select_paths(workspace, [PatternRule.include("**")])

    assert _names(selection.paths) == ["link"]


def test_compile_rules_splits_by_type() -> None:
    compiled = compile_rules([PatternRule.include("*.o"), PatternRule.exclude("keep.o")])

    assert compiled.selects("a.o")
    assert not compiled.selects("keep.o")
    assert not compiled.selects("a.c")
    assert not compiled.wipes_everything
    assert compile_rules([]).wipes_everything
