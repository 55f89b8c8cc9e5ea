# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build-workspace cleanup with pattern selection, result gating and fan-out support."""

from __future__ import annotations

from .clean import CleanupReport, CleanupResult, DeletionOutcome, plan_cleanup, run_cleanup
from .config import BuildResult, CleanupRequest, CleanupStep, PatternRule, PatternType, ResultGate, Timing
from .errors import CleanupError, ConfigError, SelectionError, WorkspaceError
from .runs import LocalRun

__version__ = "0.1.0"

__all__ = [
    "BuildResult",
    "CleanupError",
    "CleanupReport",
    "CleanupRequest",
    "CleanupResult",
    "CleanupStep",
    "ConfigError",
    "DeletionOutcome",
    "LocalRun",
    "PatternRule",
    "PatternType",
    "ResultGate",
    "SelectionError",
    "Timing",
    "WorkspaceError",
    "__version__",
    "plan_cleanup",
    "run_cleanup",
]
