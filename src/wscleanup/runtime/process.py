# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import os
import shutil

# Bandit: commands run as argument lists without ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

TIMEOUT_EXIT_CODE: Final[int] = 124


@dataclass(slots=True, frozen=True)
class CommandOptions:
    """Immutable command execution options."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be non-negative")


@dataclass(slots=True, frozen=True)
class ProcessResult:
    """Exit status and captured output of one finished process."""

    args: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        """Return stdout followed by stderr, unmodified."""

        return f"{self.stdout}{self.stderr}"


def _ensure_text(value: str | bytes | None) -> str:
    """Return ``value`` decoded to text when supplied as ``bytes``.

    Args:
        value: Stream output captured from subprocess execution.

    Returns:
        str: Text output, empty when nothing was captured.
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return value.decode(errors="replace")


def _resolve_executable(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable replaced by its absolute path.

    Raises:
        ValueError: If ``args`` is empty.
        FileNotFoundError: If the executable is not found on ``PATH``.
    """

    if not args:
        raise ValueError("an external command needs at least one argument")
    executable = args[0]
    if not os.path.isabs(executable):
        located = shutil.which(executable)
        if located is None:
            raise FileNotFoundError(f"Executable '{executable}' was not found on PATH")
        executable = located
    return [executable, *args[1:]]


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> ProcessResult:
    """Execute ``args`` and capture its output without raising on exit status.

    The child is always waited for and its pipes closed before this returns.
    A timeout kills the child and is reported as exit code ``124``.

    Args:
        args: Command and argument sequence to execute.
        options: Working directory, environment and timeout settings.

    Returns:
        ProcessResult: Exit status together with stdout and stderr text.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
        OSError: If the operating system refuses to start the process.
    """

    argv = _resolve_executable(args)
    resolved_options = options or CommandOptions()
    try:
        completed = subprocess.run(  # nosec B603 - argument list, no shell
            argv,
            cwd=str(resolved_options.cwd) if resolved_options.cwd is not None else None,
            env=dict(resolved_options.env) if resolved_options.env is not None else None,
            check=False,
            capture_output=True,
            timeout=resolved_options.timeout,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {resolved_options.timeout:.1f}s"
        return ProcessResult(
            args=tuple(args),
            exit_code=TIMEOUT_EXIT_CODE,
            stdout=_ensure_text(exc.stdout),
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )

    return ProcessResult(
        args=tuple(args),
        exit_code=completed.returncode,
        stdout=_ensure_text(completed.stdout),
        stderr=_ensure_text(completed.stderr),
    )


class SubprocessRunner:
    """Default :class:`~wscleanup.interfaces.ProcessRunner` backed by ``subprocess``."""

    def __init__(self, options: CommandOptions | None = None) -> None:
        self._options = options or CommandOptions()

    def run(self, command: Sequence[str]) -> ProcessResult:
        """Run ``command`` to completion and return its captured result."""

        return run_command(command, options=self._options)


__all__ = [
    "CommandOptions",
    "ProcessResult",
    "SubprocessRunner",
    "TIMEOUT_EXIT_CODE",
    "run_command",
]
