# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from wscleanup.runtime.logsink import MemoryLogSink


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Return an empty primary workspace directory."""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def sink() -> MemoryLogSink:
    """Return a log sink capturing build-log output in memory."""
    return MemoryLogSink()
