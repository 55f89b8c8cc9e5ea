# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Deletion tiers and the fallback ladder that applies them to one path."""

from __future__ import annotations

import os
import secrets
import shlex
import stat
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol

from ..config.models import CleanupRequest
from ..errors import ConfigError
from ..interfaces import ProcessRunner
from ..runtime.process import SubprocessRunner
from .models import DeletionOutcome

PLACEHOLDER: Final[str] = "%s"
RENAME_MARKER: Final[str] = ".ws-cleanup-"


@dataclass(slots=True, frozen=True)
class Attempt:
    """Structured result of one deletion tier."""

    succeeded: bool
    operation: str
    error_detail: str | None = None
    exit_code: int | None = None
    output: str = ""


class DeletionTier(Protocol):
    """One way of removing a path; never raises for filesystem failures."""

    def attempt(self, path: Path) -> Attempt:
        raise NotImplementedError


def _make_writable(path: str) -> None:
    """Add owner write (and read/search for directories) permission to ``path``.

    Symlinks and paths that cannot be inspected or changed are left alone.
    """

    try:
        mode = os.lstat(path).st_mode
    except OSError:
        return
    if stat.S_ISLNK(mode):
        return
    wanted = stat.S_IWUSR | (stat.S_IRUSR | stat.S_IXUSR if stat.S_ISDIR(mode) else 0)
    if mode & wanted != wanted:
        try:
            os.chmod(path, stat.S_IMODE(mode) | wanted)
        except OSError:
            return


def _retry_permission(func: Callable[[str], object], path: str) -> None:
    """Call ``func(path)``; on a permission error unlock ``path`` and its parent once."""

    try:
        func(path)
    except PermissionError:
        _make_writable(os.path.dirname(path) or os.curdir)
        _make_writable(path)
        func(path)


def _list_directory(directory: str) -> list[os.DirEntry[str]]:
    """Return the entries of ``directory`` with the scandir handle closed."""

    with os.scandir(directory) as entries:
        return list(entries)


def _remove_tree(top: str) -> None:
    """Remove ``top`` bottom-up without recursion so depth is not limited by the stack."""

    stack: list[tuple[str, bool]] = [(top, False)]
    while stack:
        directory, emptied = stack.pop()
        if emptied:
            _retry_permission(os.rmdir, directory)
            continue
        stack.append((directory, True))
        try:
            entries = _list_directory(directory)
        except PermissionError:
            _make_writable(directory)
            entries = _list_directory(directory)
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                stack.append((entry.path, False))
            else:
                _retry_permission(os.unlink, entry.path)


def remove_path(path: Path) -> None:
    """Remove ``path``, recursing into real directories but never through symlinks.

    Raises:
        OSError: If any part of ``path`` survives.
    """

    target = os.fspath(path)
    if os.path.isdir(target) and not os.path.islink(target):
        _remove_tree(target)
    else:
        _retry_permission(os.unlink, target)


class NativeDelete:
    """Delete a path in place."""

    def attempt(self, path: Path) -> Attempt:
        operation = f"delete {path}"
        try:
            remove_path(path)
        except OSError as exc:
            if not os.path.lexists(path):
                return Attempt(succeeded=True, operation=operation)
            return Attempt(succeeded=False, operation=operation, error_detail=str(exc))
        return Attempt(succeeded=True, operation=operation)


class RenameThenDelete:
    """Move a path to a sibling temporary name, then delete the renamed copy.

    When the renamed copy cannot be deleted it is moved back, so a failed
    attempt leaves the original name in place.
    """

    def attempt(self, path: Path) -> Attempt:
        renamed = path.with_name(f"{path.name}{RENAME_MARKER}{secrets.token_hex(4)}")
        operation = f"rename {path} -> {renamed.name}"
        try:
            os.rename(path, renamed)
        except OSError as exc:
            if not os.path.lexists(path):
                return Attempt(succeeded=True, operation=operation)
            return Attempt(succeeded=False, operation=operation, error_detail=str(exc))
        deleted = NativeDelete().attempt(renamed)
        if deleted.succeeded:
            return Attempt(succeeded=True, operation=operation)
        try:
            os.rename(renamed, path)
        except OSError as exc:
            rollback = f"left behind as {renamed}: {exc}"
        else:
            rollback = f"restored {path.name}"
        return Attempt(
            succeeded=False,
            operation=deleted.operation,
            error_detail=f"{deleted.error_detail} ({rollback})",
        )


def _tokenize(template: str) -> list[str]:
    """Split an external command template into arguments.

    Args:
        template: Command line with an optional ``%s`` placeholder.

    Returns:
        list[str]: Shell-style tokens of ``template``.

    Raises:
        ConfigError: If the template is empty or has unbalanced quoting.
    """

    try:
        tokens = shlex.split(template)
    except ValueError as exc:
        raise ConfigError(f"Cannot parse external delete command {template!r}: {exc}") from exc
    if not tokens:
        raise ConfigError("External delete command must not be empty")
    return tokens


def build_command(template: str, path: Path) -> list[str]:
    """Return the argument vector for ``template`` applied to ``path``.

    The template is split with :mod:`shlex` before the path is inserted, and the
    ``%s`` placeholder is filled by plain string replacement, so the path
    always ends up as literal text inside its own argument. Templates without
    a placeholder receive the path as an extra trailing argument.

    Raises:
        ConfigError: If ``template`` is empty or cannot be tokenised.
    """

    tokens = _tokenize(template)
    target = os.fspath(path)
    if not any(PLACEHOLDER in token for token in tokens):
        return [*tokens, target]
    return [token.replace(PLACEHOLDER, target) for token in tokens]


def render_command(template: str, path: Path) -> str:
    """Return the command line as operators wrote it, with ``path`` filled in."""

    target = os.fspath(path)
    if PLACEHOLDER in template:
        return template.replace(PLACEHOLDER, target)
    return f"{template} {target}"


class ExternalCommandDelete:
    """Delete a path by running an operator-supplied command once for it."""

    def __init__(self, template: str, runner: ProcessRunner) -> None:
        _tokenize(template)
        self.template = template
        self._runner = runner

    def attempt(self, path: Path) -> Attempt:
        operation = render_command(self.template, path)
        try:
            result = self._runner.run(build_command(self.template, path))
        except OSError as exc:
            return Attempt(succeeded=False, operation=operation, error_detail=str(exc))
        if result.exit_code != 0:
            return Attempt(
                succeeded=False,
                operation=operation,
                error_detail=f"exit code {result.exit_code}",
                exit_code=result.exit_code,
                output=result.output,
            )
        return Attempt(succeeded=True, operation=operation, exit_code=0, output=result.output)


class DeletionStrategy:
    """Ordered ladder of deletion tiers tried until one succeeds."""

    def __init__(self, tiers: Sequence[DeletionTier]) -> None:
        if not tiers:
            raise ValueError("a deletion strategy needs at least one tier")
        self._tiers = tuple(tiers)

    @classmethod
    def for_request(
        cls,
        request: CleanupRequest,
        *,
        runner: ProcessRunner | None = None,
    ) -> DeletionStrategy:
        """Build the ladder implied by ``request``.

        A configured external command replaces the built-in tiers entirely.

        Raises:
            ConfigError: If the external command template cannot be parsed.
        """

        if request.external_delete_command is not None:
            return cls([ExternalCommandDelete(request.external_delete_command, runner or SubprocessRunner())])
        return cls([NativeDelete(), RenameThenDelete()])

    @property
    def tiers(self) -> tuple[DeletionTier, ...]:
        return self._tiers

    def describe(self) -> str:
        """Return a short description of the ladder for debug output."""

        names = []
        for tier in self._tiers:
            template = getattr(tier, "template", None)
            names.append(f"command '{template}'" if template else type(tier).__name__)
        return " -> ".join(names)

    def delete(self, path: Path) -> DeletionOutcome:
        """Remove ``path`` using the first tier that succeeds.

        Args:
            path: Absolute path selected for deletion.

        Returns:
            DeletionOutcome: Success, or the last tier's failure with every tier's detail.
        """

        failures: list[Attempt] = []
        for tier in self._tiers:
            attempt = tier.attempt(path)
            if attempt.succeeded:
                return DeletionOutcome(
                    path=path,
                    succeeded=True,
                    operation=attempt.operation,
                    exit_code=attempt.exit_code,
                    output=attempt.output,
                )
            failures.append(attempt)
        last = failures[-1]
        details = "; ".join(f"{attempt.operation}: {attempt.error_detail}" for attempt in failures[:-1])
        error_detail = f"{details}; {last.error_detail}" if details else last.error_detail
        return DeletionOutcome(
            path=path,
            succeeded=False,
            error_detail=error_detail,
            operation=last.operation,
            exit_code=last.exit_code,
            output=last.output,
        )


__all__ = [
    "Attempt",
    "DeletionStrategy",
    "DeletionTier",
    "ExternalCommandDelete",
    "NativeDelete",
    "PLACEHOLDER",
    "RenameThenDelete",
    "build_command",
    "remove_path",
    "render_command",
]
