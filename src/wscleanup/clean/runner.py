# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Entry points running one complete cleanup invocation."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..config.models import CleanupRequest
from ..errors import WorkspaceError
from ..interfaces import BuildRun, LogSink, ProcessRunner
from .aggregator import clean_roots, resolve_roots
from .deletion import DeletionStrategy
from .models import CleanupReport, CleanupResult, WorkspaceRoot
from .patterns import Selection, compile_rules, select_paths
from .policy import PolicyDecision, evaluate_policy
from .reporting import CleanupReporter, build_failed


def run_cleanup(
    run: BuildRun,
    request: CleanupRequest,
    *,
    sink: LogSink,
    runner: ProcessRunner | None = None,
    strategy: DeletionStrategy | None = None,
) -> CleanupResult:
    """Clean the workspaces of ``run`` according to ``request``.

    Patterns and the external command are validated first, then the policy
    decides whether to proceed, and only then are workspace roots resolved
    and paths removed. Per-path failures are reported, never raised.

    Args:
        run: Build supplying result, parameters and workspace roots.
        request: Validated cleanup configuration.
        sink: Build log receiving marker and error lines.
        runner: Process runner used by an external delete command.
        strategy: Deletion ladder overriding the one derived from ``request``.

    Returns:
        CleanupResult: Aggregated report, skip status and build verdict.

    Raises:
        SelectionError: If a pattern is invalid.
        ConfigError: If the external delete command cannot be parsed.
        WorkspaceError: If a workspace root is unusable.
    """

    rules = compile_rules(request.patterns)
    ladder = strategy or DeletionStrategy.for_request(request, runner=runner)
    reporter = CleanupReporter(sink)
    reporter.start()

    decision: PolicyDecision = evaluate_policy(request, run)
    if not decision.proceed:
        reporter.skipped(decision.reason or decision.result.value)
        return CleanupResult(report=CleanupReport(), skipped=True, skip_reason=decision.reason)

    try:
        roots = resolve_roots(run, request)
    except WorkspaceError as exc:
        reporter.line(f"ERROR: {exc}")
        raise
    report = clean_roots(roots, rules, ladder, delete_dirs=request.delete_dirs)
    reporter.finish(report)
    return CleanupResult(
        report=report,
        build_failed=build_failed(report, not_fail_build=request.not_fail_build),
    )


@dataclass(slots=True)
class CleanupPlan:
    """Paths a cleanup would remove, grouped by workspace root."""

    entries: list[tuple[WorkspaceRoot, Selection]] = field(default_factory=list)
    decision: PolicyDecision | None = None

    @property
    def path_count(self) -> int:
        return sum(len(selection.paths) for _root, selection in self.entries)


def plan_cleanup(run: BuildRun, request: CleanupRequest) -> CleanupPlan:
    """Resolve what :func:`run_cleanup` would delete without touching the filesystem.

    Raises:
        SelectionError: If a pattern is invalid.
        WorkspaceError: If a workspace root is unusable.
    """

    rules = compile_rules(request.patterns)
    decision = evaluate_policy(request, run)
    plan = CleanupPlan(decision=decision)
    if not decision.proceed:
        return plan
    for root in resolve_roots(run, request):
        plan.entries.append((root, select_paths(root.path, rules, delete_dirs=request.delete_dirs)))
    return plan


__all__ = ["CleanupPlan", "plan_cleanup", "run_cleanup"]
