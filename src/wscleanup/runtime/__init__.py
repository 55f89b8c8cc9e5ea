# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime services: console provisioning, log sinks and process execution."""

from .console import ConsolePreferences, RichConsoleManager, detect_tty, get_console_manager, printable
from .logsink import ConsoleLogSink, MemoryLogSink, TeeLogSink
from .process import CommandOptions, ProcessResult, SubprocessRunner, run_command

__all__ = [
    "CommandOptions",
    "ConsolePreferences",
    "ConsoleLogSink",
    "MemoryLogSink",
    "ProcessResult",
    "RichConsoleManager",
    "SubprocessRunner",
    "TeeLogSink",
    "detect_tty",
    "get_console_manager",
    "printable",
    "run_command",
]
