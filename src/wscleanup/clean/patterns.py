# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Include/exclude glob selection of workspace paths."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Final

from ..config.models import PatternRule, PatternType
from ..errors import SelectionError

_RECURSIVE: Final[str] = "**"
_DRIVE_RE: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z]:")


def _translate_segment(segment: str) -> str:
    """Translate one path segment of a glob into a regular expression fragment.

    Args:
        segment: Pattern text between two slashes, never ``**``.

    Returns:
        str: Regex source matching the segment without crossing a separator.
    """

    pieces: list[str] = []
    for char in segment:
        if char == "*":
            pieces.append("[^/]*")
        elif char == "?":
            pieces.append("[^/]")
        else:
            pieces.append(re.escape(char))
    return "".join(pieces)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile ``pattern`` into a regex anchored at the workspace root.

    ``*`` and ``?`` never cross a ``/``; a ``**`` segment matches zero or more
    whole segments. A trailing ``/`` is shorthand for a trailing ``/**``.

    Args:
        pattern: Glob written with ``/`` separators.

    Returns:
        re.Pattern[str]: Regex matching relative POSIX paths.

    Raises:
        SelectionError: If the pattern is blank, absolute, escapes the root or
            combines ``**`` with other characters inside one segment.
    """

    if not pattern or not pattern.strip():
        raise SelectionError(pattern, "pattern must not be empty")
    if "\0" in pattern:
        raise SelectionError(pattern, "pattern must not contain NUL characters")
    if pattern.startswith("/") or _DRIVE_RE.match(pattern):
        raise SelectionError(pattern, "pattern must be relative to the workspace root")

    text = pattern[2:] if pattern.startswith("./") else pattern
    if text.endswith("/"):
        text = f"{text}{_RECURSIVE}"
    segments: list[str] = []
    for segment in text.split("/"):
        if not segment or segment == ".":
            continue
        if segment == _RECURSIVE and segments and segments[-1] == _RECURSIVE:
            continue
        segments.append(segment)
    if not segments:
        raise SelectionError(pattern, "pattern must name at least one path segment")

    regex = ""
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        if segment == "..":
            raise SelectionError(pattern, "'..' segments are not allowed")
        if segment == _RECURSIVE:
            if index < last:
                regex += "(?:[^/]+/)*"
            elif index == 0:
                regex = ".*"
            else:
                regex = f"{regex[:-1]}(?:/.*)?"
            continue
        if _RECURSIVE in segment:
            raise SelectionError(pattern, "'**' must be a whole path segment")
        regex += _translate_segment(segment)
        if index < last:
            regex += "/"
    return re.compile(rf"\A{regex}\Z", re.DOTALL)


@dataclass(slots=True, frozen=True)
class CompiledRules:
    """Compiled include and exclude matchers for one rule set."""

    includes: tuple[re.Pattern[str], ...] = ()
    excludes: tuple[re.Pattern[str], ...] = ()

    @property
    def wipes_everything(self) -> bool:
        """Return ``True`` when no rules were supplied at all."""

        return not self.includes and not self.excludes

    def excluded(self, relative: str) -> bool:
        """Return whether any exclude rule matches ``relative``."""

        return any(matcher.match(relative) for matcher in self.excludes)

    def selects(self, relative: str) -> bool:
        """Return whether ``relative`` is included and not excluded.

        Rule sets holding only excludes behave as if ``**`` were included.
        """

        if self.excluded(relative):
            return False
        if not self.includes:
            return True
        return any(matcher.match(relative) for matcher in self.includes)


def compile_rules(rules: Iterable[PatternRule]) -> CompiledRules:
    """Compile every rule, failing on the first invalid pattern.

    Raises:
        SelectionError: If any pattern is invalid.
    """

    includes: list[re.Pattern[str]] = []
    excludes: list[re.Pattern[str]] = []
    for rule in rules:
        compiled = compile_pattern(rule.pattern)
        if rule.type is PatternType.EXCLUDE:
            excludes.append(compiled)
        else:
            includes.append(compiled)
    return CompiledRules(includes=tuple(includes), excludes=tuple(excludes))


@dataclass(slots=True)
class Selection:
    """Relative paths chosen for deletion under one workspace root.

    Attributes:
        paths: Selected paths; none is an ancestor of another.
        unreadable: Directories that could not be listed, with the OS error text.
    """

    paths: list[PurePosixPath] = field(default_factory=list)
    unreadable: list[tuple[PurePosixPath, str]] = field(default_factory=list)


def _scan(directory: Path) -> list[os.DirEntry[str]]:
    """Return the entries of ``directory`` sorted by name.

    Raises:
        OSError: If the directory cannot be listed.
    """

    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def _has_excluded_descendant(directory: Path, relative: PurePosixPath, rules: CompiledRules) -> bool:
    """Return whether anything below ``directory`` matches an exclude rule.

    Args:
        directory: Directory on disk being considered for whole removal.
        relative: Workspace-relative path of ``directory``.
        rules: Compiled include and exclude rules.

    Returns:
        bool: ``True`` when removing the directory would take an excluded path with it.
    """

    if not rules.excludes:
        return False
    pending: list[tuple[Path, PurePosixPath]] = [(directory, relative)]
    while pending:
        current, current_rel = pending.pop()
        try:
            entries = _scan(current)
        except OSError:
            # An unlistable subtree cannot be proven free of excluded paths.
            return True
        for entry in entries:
            child_rel = current_rel / entry.name
            if rules.excluded(child_rel.as_posix()):
                return True
            if entry.is_dir(follow_symlinks=False):
                pending.append((Path(entry.path), child_rel))
    return False


def select_paths(
    root: Path,
    rules: Sequence[PatternRule] | CompiledRules,
    *,
    delete_dirs: bool = False,
) -> Selection:
    """Resolve the paths under ``root`` selected by ``rules``.

    With no rules every direct child of ``root`` is selected (a wipeout).
    Otherwise the tree is walked without following directory symlinks; files
    are selected when included and not excluded, and directories likewise
    when ``delete_dirs`` is set and nothing beneath them is excluded. A
    selected directory is listed alone, without its descendants.

    Args:
        root: Workspace directory to scan.
        rules: Pattern rules, or rules already compiled by :func:`compile_rules`.
        delete_dirs: Whether matching directories are themselves selected.

    Returns:
        Selection: Selected relative paths in walk order plus unlistable directories.

    Raises:
        SelectionError: If any pattern is invalid; raised before ``root`` is read.
    """

    compiled = rules if isinstance(rules, CompiledRules) else compile_rules(rules)
    selection = Selection()
    if not root.is_dir():
        return selection

    if compiled.wipes_everything:
        try:
            selection.paths.extend(PurePosixPath(entry.name) for entry in _scan(root))
        except OSError as exc:
            selection.unreadable.append((PurePosixPath("."), str(exc)))
        return selection

    pending: list[tuple[Path, PurePosixPath]] = [(root, PurePosixPath())]
    while pending:
        directory, prefix = pending.pop()
        try:
            entries = _scan(directory)
        except OSError as exc:
            selection.unreadable.append((prefix if prefix.parts else PurePosixPath("."), str(exc)))
            continue
        subdirectories: list[tuple[Path, PurePosixPath]] = []
        for entry in entries:
            relative = prefix / entry.name
            if not entry.is_dir(follow_symlinks=False):
                if compiled.selects(relative.as_posix()):
                    selection.paths.append(relative)
                continue
            entry_path = Path(entry.path)
            if (
                delete_dirs
                and compiled.selects(relative.as_posix())
                and not _has_excluded_descendant(entry_path, relative, compiled)
            ):
                selection.paths.append(relative)
                continue
            subdirectories.append((entry_path, relative))
        pending.extend(reversed(subdirectories))
    return selection


__all__ = [
    "CompiledRules",
    "Selection",
    "compile_pattern",
    "compile_rules",
    "select_paths",
]
