# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate cleanup reports into build-log lines and a build verdict."""

from __future__ import annotations

from typing import Final

from ..interfaces import LogSink
from .models import CleanupReport, DeletionOutcome

# Byte-exact build-log markers.
START_MARKER: Final[str] = "[WS-CLEANUP] Deleting project workspace..."
DONE_MARKER: Final[str] = "[WS-CLEANUP] done"
SKIP_MARKER: Final[str] = "[WS-CLEANUP] Skipped based on build state {outcome}"


def format_failure(outcome: DeletionOutcome) -> str:
    """Return the error line describing a failed deletion."""

    if outcome.exit_code is not None:
        return f"ERROR: Cleanup command '{outcome.operation}' failed with code {outcome.exit_code}"
    return f"ERROR: Cleanup operation '{outcome.operation}' failed: {outcome.error_detail}"


def build_failed(report: CleanupReport, *, not_fail_build: bool) -> bool:
    """Return whether the caller should fail the build because of ``report``."""

    return not not_fail_build and not report.overall_succeeded


class CleanupReporter:
    """Write the marker lines and per-path errors of one invocation to a log sink.

    The start marker is left open so the closing marker lands on the same line
    when nothing else is logged in between.
    """

    def __init__(self, sink: LogSink) -> None:
        self._sink = sink
        self._line_open = False

    def start(self) -> None:
        self._sink.write(START_MARKER)
        self._line_open = True

    def line(self, text: str) -> None:
        """Write ``text`` on its own line."""

        if self._line_open:
            self._sink.write_line("")
            self._line_open = False
        self._sink.write_line(text)

    def skipped(self, reason: str) -> None:
        self._close(SKIP_MARKER.format(outcome=reason))

    def failure(self, outcome: DeletionOutcome) -> None:
        """Log one failed path followed by any captured process output, unmodified."""

        self.line(format_failure(outcome))
        if outcome.output:
            self._sink.write(outcome.output)
            if not outcome.output.endswith("\n"):
                self._sink.write_line("")

    def finish(self, report: CleanupReport) -> None:
        for outcome in report.failures:
            self.failure(outcome)
        self._close(DONE_MARKER)

    def _close(self, marker: str) -> None:
        self._sink.write_line(marker)
        self._line_open = False


__all__ = [
    "CleanupReporter",
    "DONE_MARKER",
    "SKIP_MARKER",
    "START_MARKER",
    "build_failed",
    "format_failure",
]
