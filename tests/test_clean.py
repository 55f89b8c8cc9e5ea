# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""End-to-end tests for the cleanup engine."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from support import (
    RecordingRunner,
    listing,
    needs_executable,
    needs_posix_permissions,
    populate,
    undecodable_file,
)
from wscleanup import (
    BuildResult,
    CleanupRequest,
    LocalRun,
    PatternRule,
    ResultGate,
    SelectionError,
    Timing,
    plan_cleanup,
    run_cleanup,
)
from wscleanup.clean.reporting import DONE_MARKER, START_MARKER
from wscleanup.errors import ConfigError, WorkspaceError
from wscleanup.runtime.logsink import ConsoleLogSink, MemoryLogSink

CLEAN_LOG = f"{START_MARKER}{DONE_MARKER}\n"


def test_wipeout_empties_workspace(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "foo.txt", "src/main.c", "build/obj/a.o", ".git/config")

    result = run_cleanup(LocalRun(workspace), CleanupRequest(), sink=sink)

    assert workspace.is_dir()
    assert listing(workspace) == []
    assert result.succeeded
    assert not result.skipped
    assert not result.build_failed
    assert sink.text == CLEAN_LOG


def test_wipeout_before_and_after_build(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "stale.txt")
    run_cleanup(LocalRun(workspace), CleanupRequest(timing=Timing.PRE), sink=sink)
    assert listing(workspace) == []

    populate(workspace, "built.txt")
    run_cleanup(LocalRun(workspace), CleanupRequest(timing=Timing.POST), sink=sink)

    assert listing(workspace) == []
    assert sink.text == CLEAN_LOG * 2


def test_cleanup_is_idempotent(workspace: Path) -> None:
    populate(workspace, "a/b.txt")
    first = run_cleanup(LocalRun(workspace), CleanupRequest(), sink=MemoryLogSink())
    second_sink = MemoryLogSink()

    second = run_cleanup(LocalRun(workspace), CleanupRequest(), sink=second_sink)

    assert first.succeeded
    assert second.succeeded
    assert second.report.outcomes == []
    assert second_sink.text == CLEAN_LOG


def test_include_pattern_keeps_other_files(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "foo.txt", "bar.txt", "bar.log")
    request = CleanupRequest(patterns=(PatternRule.model_validate({"pattern": "bar.*", "type": "INCLUDE"}),))

    result = run_cleanup(LocalRun(workspace), request, sink=sink)

    assert listing(workspace) == ["foo.txt"]
    assert result.succeeded
    assert sink.text == CLEAN_LOG


def test_exclusions_survive_regardless_of_order(tmp_path: Path) -> None:
    rules = [PatternRule.exclude("*.keep"), PatternRule.exclude("keep/")]
    survivors = []
    for index, ordered in enumerate((rules, list(reversed(rules)))):
        root = tmp_path / f"ws{index}"
        populate(root, "a.txt", "b.keep", "keep/c.txt", "sub/d.txt")
        run_cleanup(LocalRun(root), CleanupRequest(patterns=tuple(ordered)), sink=MemoryLogSink())
        survivors.append(listing(root))

    assert survivors[0] == survivors[1]
    assert "b.keep" in survivors[0]
    assert "keep/c.txt" in survivors[0]
    assert "a.txt" not in survivors[0]
    assert "sub/d.txt" not in survivors[0]


def test_non_ascii_names_are_removed(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "a¶‱ﻷ.txt", "dir¶/ﻷ.bin")

    result = run_cleanup(LocalRun(workspace), CleanupRequest(), sink=sink)

    assert result.succeeded
    assert listing(workspace) == []
    assert "ERROR" not in sink.text


def test_undecodable_name_is_logged_to_a_utf8_console(workspace: Path) -> None:
    undecodable_file(workspace)
    buffer = io.BytesIO()
    stream = io.TextIOWrapper(buffer, encoding="utf-8", errors="strict")
    console = Console(file=stream, color_system=None, highlight=False, soft_wrap=True)

    result = run_cleanup(
        LocalRun(workspace),
        CleanupRequest(external_delete_command="shred -u %s", not_fail_build=True),
        sink=ConsoleLogSink(console),
        runner=RecordingRunner(exit_code=1),
    )
    stream.flush()
    log = buffer.getvalue().decode("utf-8")

    assert not result.build_failed
    assert f"ERROR: Cleanup command 'shred -u {workspace}/bad\\xffname' failed with code 1" in log
    assert log.endswith(f"{DONE_MARKER}\n")


def test_undecodable_name_is_removed_natively(workspace: Path, sink: MemoryLogSink) -> None:
    target = undecodable_file(workspace)

    result = run_cleanup(LocalRun(workspace), CleanupRequest(), sink=sink)

    assert result.succeeded
    assert not target.exists()
    assert sink.text == CLEAN_LOG


def test_deep_tree_is_removed(workspace: Path, sink: MemoryLogSink) -> None:
    deepest = workspace.joinpath(*(["level"] * 60))
    deepest.mkdir(parents=True)
    (deepest / "bottom.txt").write_text("bottom", encoding="utf-8")

    assert run_cleanup(LocalRun(workspace), CleanupRequest(), sink=sink).succeeded
    assert listing(workspace) == []


def test_gate_skip_leaves_workspace_untouched(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "foo.txt")
    request = CleanupRequest(result_gate=ResultGate(failure=False))

    result = run_cleanup(LocalRun(workspace, result=BuildResult.FAILURE), request, sink=sink)

    assert result.skipped
    assert result.skip_reason == "FAILURE"
    assert result.report.outcomes == []
    assert not result.build_failed
    assert listing(workspace) == ["foo.txt"]
    assert sink.text == "[WS-CLEANUP] Deleting project workspace...[WS-CLEANUP] Skipped based on build state FAILURE\n"


def test_pre_build_runs_whatever_the_gate(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "foo.txt")
    request = CleanupRequest(result_gate=ResultGate(failure=False), timing=Timing.PRE)

    result = run_cleanup(LocalRun(workspace, result=BuildResult.FAILURE), request, sink=sink)

    assert not result.skipped
    assert listing(workspace) == []


def test_fan_out_cleans_parent_and_children(tmp_path: Path, sink: MemoryLogSink) -> None:
    parent = tmp_path / "parent"
    children = [tmp_path / "child-1", tmp_path / "child-2"]
    for root in (parent, *children):
        populate(root, "artifact.txt")
    run = LocalRun(parent, children=children)

    result = run_cleanup(run, CleanupRequest(cleanup_parent_on_failure=True), sink=sink)

    assert result.succeeded
    assert len(result.report.roots) == 3
    for root in (parent, *children):
        assert listing(root) == []
    assert sink.text == CLEAN_LOG


def test_missing_workspace_is_nothing_to_do(tmp_path: Path, sink: MemoryLogSink) -> None:
    result = run_cleanup(LocalRun(tmp_path / "never-created"), CleanupRequest(), sink=sink)

    assert result.succeeded
    assert result.report.outcomes == []
    assert sink.text == CLEAN_LOG


def test_invalid_pattern_fails_before_any_deletion(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "foo.txt")
    request = CleanupRequest(patterns=(PatternRule.include("foo.txt"), PatternRule.include("../escape")))

    with pytest.raises(SelectionError):
        run_cleanup(LocalRun(workspace), request, sink=sink)

    assert listing(workspace) == ["foo.txt"]
    assert sink.text == ""


def test_unparsable_command_fails_before_any_deletion(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "foo.txt")

    with pytest.raises(ConfigError):
        run_cleanup(LocalRun(workspace), CleanupRequest(external_delete_command="rm '%s"), sink=sink)

    assert listing(workspace) == ["foo.txt"]


def test_unusable_root_raises_workspace_error(tmp_path: Path, sink: MemoryLogSink) -> None:
    populate(tmp_path, "plain-file")

    with pytest.raises(WorkspaceError) as excinfo:
        run_cleanup(LocalRun(tmp_path / "plain-file"), CleanupRequest(), sink=sink)

    assert sink.lines == [START_MARKER, f"ERROR: {excinfo.value}"]
    assert sink.text.endswith("\n")


def test_external_command_runs_once_per_selected_path(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "a.txt", "b/c.txt")
    runner = RecordingRunner()

    result = run_cleanup(
        LocalRun(workspace),
        CleanupRequest(external_delete_command="shred -u %s"),
        sink=sink,
        runner=runner,
    )

    assert result.succeeded
    assert runner.commands == [
        ["shred", "-u", str(workspace / "a.txt")],
        ["shred", "-u", str(workspace / "b")],
    ]


@needs_executable("rm")
def test_external_rm_with_special_characters(workspace: Path, sink: MemoryLogSink) -> None:
    name = "\\s! Dozen for $5 only!"
    populate(workspace, name)

    result = run_cleanup(LocalRun(workspace), CleanupRequest(external_delete_command="rm %s"), sink=sink)

    assert result.succeeded
    assert listing(workspace) == []
    assert sink.text == CLEAN_LOG


@needs_executable("mkdir")
def test_failing_external_command_is_reported(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "post-build", "pre-build")

    result = run_cleanup(LocalRun(workspace), CleanupRequest(external_delete_command="mkdir %s"), sink=sink)

    assert not result.succeeded
    assert result.build_failed
    assert len(result.report.failures) == 2
    assert f"ERROR: Cleanup command 'mkdir {workspace / 'pre-build'}' failed with code 1" in sink.lines
    assert f"ERROR: Cleanup command 'mkdir {workspace / 'post-build'}' failed with code 1" in sink.lines
    assert "File exists" in sink.text
    assert sink.lines[0] == START_MARKER
    assert sink.lines[-1] == DONE_MARKER


@needs_executable("rm")
@pytest.mark.parametrize(("not_fail_build", "expected_verdict"), [(False, True), (True, False)])
def test_partial_failure_continues_and_sets_verdict(
    workspace: Path,
    sink: MemoryLogSink,
    not_fail_build: bool,
    expected_verdict: bool,
) -> None:
    populate(workspace, "a_dir/inner.txt", "b.txt")
    request = CleanupRequest(external_delete_command="rm %s", not_fail_build=not_fail_build)

    result = run_cleanup(LocalRun(workspace), request, sink=sink)

    outcomes = {outcome.path.name: outcome for outcome in result.report.outcomes}
    assert not outcomes["a_dir"].succeeded
    assert outcomes["b.txt"].succeeded
    assert not result.report.overall_succeeded
    assert result.build_failed is expected_verdict
    assert listing(workspace) == ["a_dir", "a_dir/inner.txt"]


@needs_posix_permissions
def test_wipeout_succeeds_when_workspace_parent_is_read_only(tmp_path: Path, sink: MemoryLogSink) -> None:
    holder = tmp_path / "holder"
    workspace = holder / "workspace"
    populate(workspace, "foo.txt", "dir/bar.txt")
    holder.chmod(0o555)
    try:
        result = run_cleanup(LocalRun(workspace), CleanupRequest(), sink=sink)
    finally:
        holder.chmod(0o755)

    assert result.succeeded
    assert listing(workspace) == []


@needs_posix_permissions
def test_read_only_files_are_removed(workspace: Path, sink: MemoryLogSink) -> None:
    populate(workspace, "locked/a.txt", "locked/nested/b.txt")
    (workspace / "locked" / "nested").chmod(0o555)
    (workspace / "locked").chmod(0o555)

    result = run_cleanup(LocalRun(workspace), CleanupRequest(), sink=sink)

    assert result.succeeded, sink.text
    assert listing(workspace) == []


def test_plan_cleanup_touches_nothing(workspace: Path) -> None:
    populate(workspace, "keep.txt", "drop.log", "logs/more.log")
    request = CleanupRequest(patterns=(PatternRule.include("**/*.log"),))

    plan = plan_cleanup(LocalRun(workspace), request)

    assert plan.path_count == 2
    assert plan.decision is not None and plan.decision.proceed
    assert listing(workspace) == ["drop.log", "keep.txt", "logs", "logs/more.log"]


def test_plan_cleanup_reports_skip(workspace: Path) -> None:
    populate(workspace, "keep.txt")
    request = CleanupRequest(result_gate=ResultGate(aborted=False))

    plan = plan_cleanup(LocalRun(workspace, result=BuildResult.ABORTED), request)

    assert plan.entries == []
    assert plan.decision is not None
    assert plan.decision.reason == "ABORTED"
