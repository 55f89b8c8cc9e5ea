# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised by the cleanup engine."""

from __future__ import annotations


class CleanupError(Exception):
    """Base class for failures that abort a cleanup invocation outright."""


class SelectionError(CleanupError):
    """Raised when an include/exclude pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str) -> None:
        """Initialise the error with the offending pattern.

        Args:
            pattern: Pattern text supplied by the operator.
            reason: Human-readable explanation of the problem.
        """

        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class WorkspaceError(CleanupError):
    """Raised when a workspace root cannot be resolved to a usable directory."""


class ConfigError(CleanupError):
    """Raised when configuration input is invalid."""


__all__ = [
    "CleanupError",
    "ConfigError",
    "SelectionError",
    "WorkspaceError",
]
