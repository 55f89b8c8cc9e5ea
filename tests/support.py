# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers shared by the cleanup tests."""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Sequence
from pathlib import Path

import pytest

from wscleanup.runtime.process import ProcessResult

needs_posix_permissions = pytest.mark.skipif(
    sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
    reason="permission bits are not enforced for this user",
)


def needs_executable(name: str) -> pytest.MarkDecorator:
    return pytest.mark.skipif(shutil.which(name) is None or sys.platform == "win32", reason=f"{name} not available")


def populate(root: Path, *relative: str) -> None:
    """Create files (or directories, for names ending in ``/``) beneath ``root``."""

    for entry in relative:
        target = root / entry
        if entry.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(entry, encoding="utf-8")


def listing(root: Path) -> list[str]:
    """Return every path below ``root`` as sorted POSIX strings."""

    return sorted(path.relative_to(root).as_posix() for path in root.rglob("*"))


class RecordingRunner:
    """Process runner returning canned results and remembering each command."""

    def __init__(self, exit_code: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.commands: list[list[str]] = []
        self._exit_code = exit_code
        self._stdout = stdout
        self._stderr = stderr

    def run(self, command: Sequence[str]) -> ProcessResult:
        self.commands.append(list(command))
        return ProcessResult(
            args=tuple(command),
            exit_code=self._exit_code,
            stdout=self._stdout,
            stderr=self._stderr,
        )


class MissingExecutableRunner:
    def run(self, command: Sequence[str]) -> ProcessResult:
        raise FileNotFoundError(f"Executable '{command[0]}' was not found on PATH")


def undecodable_file(root: Path) -> Path:
    """Create a file whose name is not valid UTF-8, skipping where the filesystem refuses."""

    if sys.platform == "win32" or sys.getfilesystemencoding().lower() != "utf-8":
        pytest.skip("filesystem names are not raw bytes")
    target = root / os.fsdecode(b"bad\xffname")
    try:
        target.write_text("bytes", encoding="utf-8")
    except (OSError, UnicodeEncodeError):
        pytest.skip("filesystem rejects names that are not valid UTF-8")
    return target
