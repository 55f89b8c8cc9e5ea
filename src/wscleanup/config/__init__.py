# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cleanup configuration models and loaders."""

from __future__ import annotations

from ..errors import ConfigError
from .loader import (
    DEFAULT_CONFIG_FILENAME,
    ConfigSource,
    PyProjectConfigSource,
    TomlConfigSource,
    load_step,
    load_step_file,
    source_for_path,
)
from .models import (
    BuildResult,
    CleanupRequest,
    CleanupStep,
    PatternRule,
    PatternType,
    ResultGate,
    Timing,
)

__all__ = [
    "DEFAULT_CONFIG_FILENAME",
    "BuildResult",
    "CleanupRequest",
    "CleanupStep",
    "ConfigError",
    "ConfigSource",
    "PatternRule",
    "PatternType",
    "PyProjectConfigSource",
    "ResultGate",
    "Timing",
    "TomlConfigSource",
    "load_step",
    "load_step_file",
    "source_for_path",
]
