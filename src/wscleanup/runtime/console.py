# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich console provisioning for status messages and build-log output."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import lru_cache
from typing import TextIO

from rich.console import Console


def detect_tty(stream: TextIO | None = None) -> bool:
    """Return whether ``stream`` (stdout by default) is attached to a terminal."""

    target = stream if stream is not None else sys.stdout
    try:
        return target.isatty()
    except (AttributeError, ValueError):
        return False


def printable(text: str) -> str:
    """Return ``text`` with undecodable filename bytes shown as ``\\xNN`` escapes.

    Names that are not valid UTF-8 reach Python as surrogate escapes, which a
    UTF-8 stream refuses to encode.

    Args:
        text: Message that may embed filesystem paths.

    Returns:
        str: Text every UTF-8 stream can write.
    """

    try:
        raw = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return text.encode("utf-8", "backslashreplace").decode("utf-8")
    return raw.decode("utf-8", "backslashreplace")


@dataclass(slots=True, frozen=True)
class ConsolePreferences:
    """Presentation settings a console is keyed by.

    Attributes:
        color: Whether ANSI colour may be emitted (only honoured on a terminal).
        emoji: Whether Rich may substitute ``:emoji:`` codes.
        terminal: Whether stdout was a terminal when the console was requested.
    """

    color: bool
    emoji: bool
    terminal: bool

    @property
    def colorful(self) -> bool:
        return self.color and self.terminal


class RichConsoleManager:
    """Hand out one Rich console per distinct set of :class:`ConsolePreferences`."""

    def __init__(self) -> None:
        self._consoles: dict[ConsolePreferences, Console] = {}

    def get(self, *, color: bool, emoji: bool) -> Console:
        """Return the console for ``color``/``emoji`` under the current terminal state.

        Consoles never highlight or wrap, so paths and captured process output
        are printed exactly as given.
        """

        preferences = ConsolePreferences(color=color, emoji=emoji, terminal=detect_tty())
        console = self._consoles.get(preferences)
        if console is None:
            console = Console(
                color_system="auto" if preferences.colorful else None,
                force_terminal=preferences.terminal,
                no_color=not preferences.colorful,
                emoji=preferences.emoji,
                highlight=False,
                soft_wrap=True,
            )
            self._consoles[preferences] = console
        return console

    def build_log(self, *, color: bool = False) -> Console:
        """Return the console used for build-log lines, which never renders emoji."""

        return self.get(color=color, emoji=False)


@lru_cache(maxsize=1)
def get_console_manager() -> RichConsoleManager:
    return RichConsoleManager()


__all__ = [
    "ConsolePreferences",
    "RichConsoleManager",
    "detect_tty",
    "get_console_manager",
    "printable",
]
