# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build-log sinks receiving the cleanup engine's log output."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text

from .console import get_console_manager, printable

if TYPE_CHECKING:
    from ..interfaces import LogSink


class ConsoleLogSink:
    """Write build-log output to a Rich console without markup processing."""

    def __init__(self, console: Console | None = None, *, use_color: bool = False) -> None:
        self._console = console or get_console_manager().build_log(color=use_color)

    def write(self, text: str) -> None:
        self._console.print(Text(printable(text)), end="")

    def write_line(self, text: str) -> None:
        self._console.print(Text(printable(text)))


class MemoryLogSink:
    """Collect build-log output in memory."""

    def __init__(self) -> None:
        self._chunks: list[str] = []

    def write(self, text: str) -> None:
        self._chunks.append(text)

    def write_line(self, text: str) -> None:
        self._chunks.append(f"{text}\n")

    @property
    def text(self) -> str:
        """Return everything written so far as a single string."""

        return "".join(self._chunks)

    @property
    def lines(self) -> list[str]:
        """Return the written output split into lines."""

        return self.text.splitlines()


class TeeLogSink:
    """Fan each write out to several sinks in order."""

    def __init__(self, sinks: Iterable[LogSink]) -> None:
        self._sinks = tuple(sinks)

    def write(self, text: str) -> None:
        for sink in self._sinks:
            sink.write(text)

    def write_line(self, text: str) -> None:
        for sink in self._sinks:
            sink.write_line(text)


__all__ = ["ConsoleLogSink", "MemoryLogSink", "TeeLogSink"]
