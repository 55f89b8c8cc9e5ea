# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve and clean the primary workspace together with child workspaces."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from ..config.models import CleanupRequest
from ..errors import WorkspaceError
from ..interfaces import BuildRun
from .deletion import DeletionStrategy
from .models import CleanupReport, DeletionOutcome, RootRole, WorkspaceRoot
from .patterns import CompiledRules, select_paths


def _validated(path: Path, role: RootRole) -> WorkspaceRoot:
    """Return ``path`` as a workspace root after checking it is usable.

    Args:
        path: Workspace directory reported by the build.
        role: Whether the root is the primary workspace or a child.

    Returns:
        WorkspaceRoot: Root bound to ``role``.

    Raises:
        WorkspaceError: If ``path`` is relative or names something other than a directory.
    """

    if not path.is_absolute():
        raise WorkspaceError(f"{role.value.lower()} workspace {path} is not an absolute path")
    if path.exists() and not path.is_dir():
        raise WorkspaceError(f"{role.value.lower()} workspace {path} is not a directory")
    return WorkspaceRoot(path=path, role=role)


def resolve_roots(run: BuildRun, request: CleanupRequest) -> list[WorkspaceRoot]:
    """Return the workspace roots ``request`` should clean for ``run``.

    The primary workspace always participates when the run has one. Child
    workspaces are added when ``cleanup_parent_on_failure`` asks the parent to
    aggregate its sub-executions. A root that no longer exists is kept and
    simply yields nothing to delete.

    Args:
        run: Build exposing the primary and child workspaces.
        request: Cleanup configuration for this invocation.

    Returns:
        list[WorkspaceRoot]: Distinct roots, primary first.

    Raises:
        WorkspaceError: If a root is relative or names something other than a directory.
    """

    candidates: list[WorkspaceRoot] = []
    primary = run.workspace_root()
    if primary is not None:
        candidates.append(_validated(primary, RootRole.PRIMARY))
    if request.cleanup_parent_on_failure:
        candidates.extend(_validated(child, RootRole.CHILD) for child in run.child_workspace_roots())

    roots: list[WorkspaceRoot] = []
    seen: set[Path] = set()
    for candidate in candidates:
        key = candidate.path.resolve()
        if key in seen:
            continue
        seen.add(key)
        roots.append(candidate)
    return roots


def clean_root(
    root: WorkspaceRoot,
    rules: CompiledRules,
    strategy: DeletionStrategy,
    *,
    delete_dirs: bool = False,
) -> CleanupReport:
    """Select and delete paths under one root.

    Directories that could not be listed are recorded as failed outcomes.
    """

    report = CleanupReport(roots=[root])
    selection = select_paths(root.path, rules, delete_dirs=delete_dirs)
    for relative, detail in selection.unreadable:
        target = root.path.joinpath(*relative.parts)
        report.record(
            DeletionOutcome(path=target, succeeded=False, error_detail=detail, operation=f"scan {target}")
        )
    for relative in selection.paths:
        report.record(strategy.delete(root.path.joinpath(*relative.parts)))
    return report


def clean_roots(
    roots: Sequence[WorkspaceRoot],
    rules: CompiledRules,
    strategy: DeletionStrategy,
    *,
    delete_dirs: bool = False,
) -> CleanupReport:
    """Clean every root independently and combine the per-root reports."""

    return combine_reports(clean_root(root, rules, strategy, delete_dirs=delete_dirs) for root in roots)


def combine_reports(reports: Iterable[CleanupReport]) -> CleanupReport:
    """Return one report whose success is the AND of every outcome in ``reports``."""

    return CleanupReport.combine(reports)


__all__ = ["clean_root", "clean_roots", "combine_reports", "resolve_roots"]
