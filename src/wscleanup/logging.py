# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Operator-facing status messages with optional colour and emoji.

These helpers are for the command line only; build-log lines produced by
the cleanup engine go through a :class:`~wscleanup.interfaces.LogSink`.
"""

from __future__ import annotations

from enum import Enum
from typing import Final

from rich.rule import Rule
from rich.text import Text

from .runtime.console import detect_tty, get_console_manager, printable


class Status(str, Enum):
    """Kinds of status message the CLI prints."""

    INFO = "info"
    OK = "ok"
    WARN = "warn"
    FAIL = "fail"


_STATUS_STYLE: Final[dict[Status, tuple[str, str]]] = {
    Status.INFO: ("ℹ️ ", "cyan"),
    Status.OK: ("✅ ", "green"),
    Status.WARN: ("⚠️ ", "yellow"),
    Status.FAIL: ("❌ ", "bold red"),
}


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def status(kind: Status, msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print ``msg`` prefixed and styled according to ``kind``.

    Args:
        kind: Message category selecting the glyph and style.
        msg: Text printed verbatim (no markup is interpreted).
        use_emoji: Whether to prefix the category glyph.
        use_color: Explicit colour choice; ``None`` follows TTY detection.
    """

    glyph, style = _STATUS_STYLE[kind]
    colored = detect_tty() if use_color is None else use_color
    text = Text(f"{emoji(glyph, use_emoji)}{printable(msg)}")
    if colored:
        text.stylize(style)
    get_console_manager().get(color=colored, emoji=use_emoji).print(text)


def section(title: str, *, use_color: bool) -> None:
    """Print a header separating blocks of CLI output."""

    console = get_console_manager().get(color=use_color, emoji=False)
    if use_color:
        console.print()
        console.print(Rule(title))
        return
    console.print(Text(f"\n--- {title} ---"))


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print an informational message."""

    status(Status.INFO, msg, use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print a success message."""

    status(Status.OK, msg, use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print a warning."""

    status(Status.WARN, msg, use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print a failure."""

    status(Status.FAIL, msg, use_emoji=use_emoji, use_color=use_color)


__all__ = [
    "Status",
    "emoji",
    "fail",
    "info",
    "ok",
    "section",
    "status",
    "warn",
]
