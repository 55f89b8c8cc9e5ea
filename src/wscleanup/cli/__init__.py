# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line interface for workspace cleanup."""

from .app import app

__all__ = ["app"]
