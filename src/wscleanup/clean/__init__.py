# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Workspace cleanup engine."""

from __future__ import annotations

from .aggregator import clean_root, clean_roots, combine_reports, resolve_roots
from .deletion import (
    DeletionStrategy,
    ExternalCommandDelete,
    NativeDelete,
    RenameThenDelete,
    build_command,
)
from .models import CleanupReport, CleanupResult, DeletionOutcome, RootRole, WorkspaceRoot
from .patterns import CompiledRules, Selection, compile_pattern, compile_rules, select_paths
from .policy import PolicyDecision, evaluate_policy
from .reporting import DONE_MARKER, SKIP_MARKER, START_MARKER, CleanupReporter, build_failed
from .runner import CleanupPlan, plan_cleanup, run_cleanup

__all__ = [
    "DONE_MARKER",
    "SKIP_MARKER",
    "START_MARKER",
    "CleanupPlan",
    "CleanupReport",
    "CleanupReporter",
    "CleanupResult",
    "CompiledRules",
    "DeletionOutcome",
    "DeletionStrategy",
    "ExternalCommandDelete",
    "NativeDelete",
    "PolicyDecision",
    "RenameThenDelete",
    "RootRole",
    "Selection",
    "WorkspaceRoot",
    "build_command",
    "build_failed",
    "clean_root",
    "clean_roots",
    "combine_reports",
    "compile_pattern",
    "compile_rules",
    "evaluate_policy",
    "plan_cleanup",
    "resolve_roots",
    "run_cleanup",
    "select_paths",
]
