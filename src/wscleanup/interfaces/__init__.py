# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Interfaces the cleanup engine expects from its host."""

# pylint: disable=too-few-public-methods

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..config.models import BuildResult
    from ..runtime.process import ProcessResult


@runtime_checkable
class LogSink(Protocol):
    """Destination for build-log output."""

    def write(self, text: str) -> None:
        """Append ``text`` without terminating the current line."""

        raise NotImplementedError

    def write_line(self, text: str) -> None:
        """Append ``text`` followed by a line break."""

        raise NotImplementedError


@runtime_checkable
class BuildRun(Protocol):
    """Read-only view of the build whose workspace is being cleaned."""

    def current_result(self) -> BuildResult:
        """Return the build's result as known at invocation time."""

        raise NotImplementedError

    def workspace_root(self) -> Path | None:
        """Return the primary workspace, or ``None`` when none is allocated."""

        raise NotImplementedError

    def child_workspace_roots(self) -> Sequence[Path]:
        """Return the workspaces of sub-executions; empty for plain builds."""

        raise NotImplementedError

    def parameters(self) -> Mapping[str, str]:
        """Return the build parameters keyed by name."""

        raise NotImplementedError


@runtime_checkable
class ProcessRunner(Protocol):
    """Run one external command synchronously and capture its output."""

    def run(self, command: Sequence[str]) -> ProcessResult:
        """Execute ``command`` and return once the process has exited.

        Raises:
            OSError: If the process cannot be launched.
        """

        raise NotImplementedError


__all__ = ["BuildRun", "LogSink", "ProcessRunner"]
