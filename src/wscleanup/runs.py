# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem-backed build run used when the engine is driven locally."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .config.models import BuildResult


@dataclass(slots=True)
class LocalRun:
    """Describe a build by its result and workspace directories.

    Attributes:
        workspace: Primary workspace, ``None`` when the build never had one.
        result: Outcome of the build so far.
        children: Workspaces of the build's sub-executions.
        params: Build parameters keyed by name.
    """

    workspace: Path | None
    result: BuildResult = BuildResult.SUCCESS
    children: Sequence[Path] = field(default_factory=tuple)
    params: Mapping[str, str] = field(default_factory=dict)

    def current_result(self) -> BuildResult:
        """Return the build result the cleanup policy is evaluated against."""

        return self.result

    def workspace_root(self) -> Path | None:
        """Return the primary workspace directory, if any."""

        return self.workspace

    def child_workspace_roots(self) -> Sequence[Path]:
        """Return the workspaces of sub-executions."""

        return tuple(self.children)

    def parameters(self) -> Mapping[str, str]:
        """Return a copy of the build parameters."""

        return dict(self.params)


__all__ = ["LocalRun"]
