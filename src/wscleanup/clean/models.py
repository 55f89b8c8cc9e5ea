# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Value objects produced during a single cleanup invocation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class RootRole(str, Enum):
    """Relationship of a workspace root to the build being cleaned."""

    PRIMARY = "PRIMARY"
    CHILD = "CHILD"


@dataclass(slots=True, frozen=True)
class WorkspaceRoot:
    """Absolute workspace directory scheduled for cleanup."""

    path: Path
    role: RootRole = RootRole.PRIMARY


@dataclass(slots=True, frozen=True)
class DeletionOutcome:
    """Result of deleting one selected path.

    Attributes:
        path: Absolute path that was attempted.
        succeeded: ``True`` when the path no longer exists.
        error_detail: Failure description from the last attempted tier.
        operation: Literal command line or operation name last attempted.
        exit_code: Exit status when an external command was used.
        output: Raw stdout and stderr captured from an external command.
    """

    path: Path
    succeeded: bool
    error_detail: str | None = None
    operation: str = ""
    exit_code: int | None = None
    output: str = ""


@dataclass(slots=True)
class CleanupReport:
    """Ordered deletion outcomes for one or more workspace roots."""

    outcomes: list[DeletionOutcome] = field(default_factory=list)
    roots: list[WorkspaceRoot] = field(default_factory=list)

    @property
    def overall_succeeded(self) -> bool:
        """Return ``True`` when every attempted path was removed."""

        return all(outcome.succeeded for outcome in self.outcomes)

    @property
    def failures(self) -> list[DeletionOutcome]:
        """Return the outcomes that did not succeed, in attempt order."""

        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    def record(self, outcome: DeletionOutcome) -> None:
        """Append ``outcome`` to the report."""

        self.outcomes.append(outcome)

    @classmethod
    def combine(cls, reports: Iterable[CleanupReport]) -> CleanupReport:
        """Merge independently computed reports preserving their order."""

        combined = cls()
        for report in reports:
            combined.outcomes.extend(report.outcomes)
            combined.roots.extend(report.roots)
        return combined


@dataclass(slots=True, frozen=True)
class CleanupResult:
    """Final answer handed back to the caller of the cleanup engine.

    Attributes:
        report: Aggregated deletion outcomes (empty when skipped).
        skipped: ``True`` when the policy prevented any deletion.
        skip_reason: Outcome name or parameter explaining a skip.
        build_failed: ``True`` when the caller should mark the build failed.
    """

    report: CleanupReport
    skipped: bool = False
    skip_reason: str | None = None
    build_failed: bool = False

    @property
    def succeeded(self) -> bool:
        """Return ``True`` when no deletion failed."""

        return self.report.overall_succeeded


__all__ = [
    "CleanupReport",
    "CleanupResult",
    "DeletionOutcome",
    "RootRole",
    "WorkspaceRoot",
]
