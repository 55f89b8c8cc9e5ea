# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared option declarations and request assembly for the cleanup CLI."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, Any, Final

import typer

from ..config import (
    DEFAULT_CONFIG_FILENAME,
    BuildResult,
    CleanupRequest,
    ConfigSource,
    PatternRule,
    Timing,
    load_step,
    source_for_path,
)
from ..errors import ConfigError
from ..runs import LocalRun

ROOT_ARGUMENT = Annotated[
    Path,
    typer.Argument(help="Primary workspace directory to clean."),
]
INCLUDE_OPTION = Annotated[
    list[str] | None,
    typer.Option("--include", "-i", help="Glob selecting paths to delete (repeatable)."),
]
EXCLUDE_OPTION = Annotated[
    list[str] | None,
    typer.Option("--exclude", "-e", help="Glob protecting paths from deletion (repeatable)."),
]
DELETE_DIRS_OPTION = Annotated[
    bool,
    typer.Option("--delete-dirs", help="Apply patterns to directories as well as files."),
]
EXTERNAL_DELETE_OPTION = Annotated[
    str | None,
    typer.Option("--external-delete", help="Command used instead of built-in deletion; %s is the path."),
]
TIMING_OPTION = Annotated[
    Timing,
    typer.Option("--timing", case_sensitive=False, help="Run as a pre-build or post-build cleanup."),
]
RESULT_OPTION = Annotated[
    BuildResult,
    typer.Option("--result", case_sensitive=False, help="Current result of the build."),
]
CHILD_OPTION = Annotated[
    list[Path] | None,
    typer.Option("--child", help="Workspace of a sub-execution (repeatable)."),
]
PARAM_OPTION = Annotated[
    list[str] | None,
    typer.Option("--param", help="Build parameter as NAME=VALUE (repeatable)."),
]
SKIP_WHEN_OPTION = Annotated[
    list[BuildResult] | None,
    typer.Option("--skip-when", case_sensitive=False, help="Build result that disables cleanup (repeatable)."),
]
NOT_FAIL_BUILD_OPTION = Annotated[
    bool,
    typer.Option("--not-fail-build", help="Report deletion failures without failing."),
]
MATRIX_PARENT_OPTION = Annotated[
    bool,
    typer.Option("--cleanup-matrix-parent", help="Also clean the workspaces given with --child."),
]
CLEANUP_PARAMETER_OPTION = Annotated[
    str | None,
    typer.Option("--cleanup-parameter", help="Only clean when this build parameter is true."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help=f"TOML step file or pyproject.toml (default: ./{DEFAULT_CONFIG_FILENAME})."),
]
TIMEOUT_OPTION = Annotated[
    float | None,
    typer.Option("--timeout", min=0, help="Seconds an external delete command may run (default: no limit)."),
]
DRY_RUN_OPTION = Annotated[
    bool,
    typer.Option("--dry-run", help="Show what would be removed."),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Print debug details."),
]

_GATE_KEYS: Final[dict[BuildResult, str]] = {
    BuildResult.SUCCESS: "cleanWhenSuccess",
    BuildResult.UNSTABLE: "cleanWhenUnstable",
    BuildResult.FAILURE: "cleanWhenFailure",
    BuildResult.NOT_BUILT: "cleanWhenNotBuilt",
    BuildResult.ABORTED: "cleanWhenAborted",
}


def normalize_cli_values(values: Sequence[str] | None) -> tuple[str, ...]:
    """Return sanitized CLI values preserving order."""

    if not values:
        return ()
    cleaned_values: list[str] = []
    for entry in values:
        if not entry:
            continue
        stripped = entry.strip()
        if stripped:
            cleaned_values.append(stripped)
    return tuple(cleaned_values)


def parse_parameters(values: Sequence[str] | None) -> dict[str, str]:
    """Parse ``NAME=VALUE`` pairs into a mapping.

    Raises:
        ConfigError: If an entry lacks ``=`` or a name.
    """

    parameters: dict[str, str] = {}
    for entry in normalize_cli_values(values):
        name, sep, value = entry.partition("=")
        if not sep or not name.strip():
            raise ConfigError(f"Build parameter {entry!r} must look like NAME=VALUE")
        parameters[name.strip()] = value
    return parameters


@dataclass(slots=True)
class CleanCLIOptions:
    """Capture CLI values supplied to the cleanup commands."""

    root: Path
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    delete_dirs: bool = False
    external_delete: str | None = None
    timing: Timing = Timing.POST
    result: BuildResult = BuildResult.SUCCESS
    children: tuple[Path, ...] = ()
    params: tuple[str, ...] = ()
    skip_when: tuple[BuildResult, ...] = ()
    not_fail_build: bool = False
    cleanup_matrix_parent: bool = False
    cleanup_parameter: str | None = None
    config: Path | None = None
    emoji: bool = True
    debug: bool = False
    cwd: Path = field(default_factory=Path.cwd)

    def overrides(self) -> dict[str, Any]:
        """Return step keys set explicitly on the command line."""

        overrides: dict[str, Any] = {}
        if self.includes or self.excludes:
            rules = [PatternRule.include(pattern) for pattern in self.includes]
            rules.extend(PatternRule.exclude(pattern) for pattern in self.excludes)
            overrides["patterns"] = [rule.model_dump(mode="json") for rule in rules]
        if self.delete_dirs:
            overrides["deleteDirs"] = True
        if self.external_delete is not None:
            overrides["externalDelete"] = self.external_delete
        if self.not_fail_build:
            overrides["notFailBuild"] = True
        if self.cleanup_matrix_parent:
            overrides["cleanupMatrixParent"] = True
        if self.cleanup_parameter is not None:
            overrides["cleanupParameter"] = self.cleanup_parameter
        for result in self.skip_when:
            overrides[_GATE_KEYS[result]] = False
        return overrides

    def config_sources(self, env: Mapping[str, str] | None = None) -> list[ConfigSource]:
        """Return the configuration sources to merge beneath CLI overrides.

        Raises:
            ConfigError: If an explicitly requested file does not exist.
        """

        if self.config is not None:
            if not self.config.is_file():
                raise ConfigError(f"Configuration file {self.config} does not exist")
            return [source_for_path(self.config, env=env)]
        default = self.cwd / DEFAULT_CONFIG_FILENAME
        return [source_for_path(default, env=env)] if default.is_file() else []

    def build_request(self) -> CleanupRequest:
        """Merge configuration files with CLI overrides into a request.

        Raises:
            ConfigError: If configuration is missing or invalid.
        """

        step = load_step(self.config_sources(), overrides=self.overrides())
        return step.to_request(self.timing)

    def build_run(self) -> LocalRun:
        """Return the :class:`LocalRun` described by the CLI values.

        Raises:
            ConfigError: If a build parameter is malformed.
        """

        return LocalRun(
            workspace=self.root,
            result=self.result,
            children=self.children,
            params=parse_parameters(self.params),
        )


__all__ = [
    "CHILD_OPTION",
    "CLEANUP_PARAMETER_OPTION",
    "CONFIG_OPTION",
    "DEBUG_OPTION",
    "DELETE_DIRS_OPTION",
    "DRY_RUN_OPTION",
    "EMOJI_OPTION",
    "EXCLUDE_OPTION",
    "EXTERNAL_DELETE_OPTION",
    "INCLUDE_OPTION",
    "MATRIX_PARENT_OPTION",
    "NOT_FAIL_BUILD_OPTION",
    "PARAM_OPTION",
    "RESULT_OPTION",
    "ROOT_ARGUMENT",
    "SKIP_WHEN_OPTION",
    "TIMEOUT_OPTION",
    "TIMING_OPTION",
    "CleanCLIOptions",
    "normalize_cli_values",
    "parse_parameters",
]
