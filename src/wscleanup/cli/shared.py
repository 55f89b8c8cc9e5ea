# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors)."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from rich.console import Console
from rich.text import Text

from .. import logging as cli_log
from ..runtime.console import detect_tty, get_console_manager, printable

_SETTING_RE: Final[re.Pattern[str]] = re.compile(r"([\w-]+)=(\".*?\"|\S+)")
_COMMAND_KEYS: Final[frozenset[str]] = frozenset({"command", "ladder"})


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


def render_debug(message: str) -> Text:
    """Return ``message`` as a debug line with ``key=value`` settings highlighted."""

    text = Text("[debug] ", style="bold cyan")
    cursor = 0
    for match in _SETTING_RE.finditer(message):
        start, end = match.span()
        if start > cursor:
            text.append(message[cursor:start], style="dim")
        key, value = match.groups()
        text.append(key, style="bold magenta")
        text.append("=", style="dim")
        text.append(value, style="bold blue" if key in _COMMAND_KEYS else "bold green")
        cursor = end
    if cursor < len(message):
        text.append(message[cursor:], style="dim")
    return text


@dataclass(slots=True)
class CLILogger:
    """Status-message adapter honouring the CLI's emoji and debug switches."""

    console: Console
    use_emoji: bool
    debug_enabled: bool = False

    def fail(self, message: str) -> None:
        cli_log.fail(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        cli_log.warn(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        cli_log.ok(message, use_emoji=self.use_emoji)

    def info(self, message: str) -> None:
        cli_log.info(message, use_emoji=self.use_emoji)

    def debug(self, message: str) -> None:
        if self.debug_enabled:
            self.console.print(render_debug(printable(message)))


def build_cli_logger(*, emoji: bool, debug: bool = False) -> CLILogger:
    """Return a :class:`CLILogger` printing through the shared console manager.

    Args:
        emoji: Whether status lines may carry emoji glyphs.
        debug: Whether ``debug`` messages are printed.

    Returns:
        CLILogger: Logger bound to the console matching the current terminal.
    """

    console = get_console_manager().get(color=detect_tty(), emoji=emoji)
    return CLILogger(console=console, use_emoji=emoji, debug_enabled=debug)


__all__: Final = [
    "CLIError",
    "CLILogger",
    "build_cli_logger",
    "render_debug",
]
