# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Pydantic models describing cleanup configuration."""

from __future__ import annotations

from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildResult(str, Enum):
    """Enumerate the build outcomes a cleanup can be gated on."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"


class Timing(str, Enum):
    """Enumerate when, relative to the build's main work, cleanup executes."""

    PRE = "PRE"
    POST = "POST"


class PatternType(str, Enum):
    """Enumerate the roles a pattern rule can play."""

    INCLUDE = "INCLUDE"
    EXCLUDE = "EXCLUDE"


class PatternRule(BaseModel):
    """A single include or exclude glob evaluated relative to a workspace root."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    type: PatternType = PatternType.INCLUDE

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @classmethod
    def include(cls, pattern: str) -> PatternRule:
        """Return an ``INCLUDE`` rule for ``pattern``."""

        return cls(pattern=pattern, type=PatternType.INCLUDE)

    @classmethod
    def exclude(cls, pattern: str) -> PatternRule:
        """Return an ``EXCLUDE`` rule for ``pattern``."""

        return cls(pattern=pattern, type=PatternType.EXCLUDE)


_GATE_FIELDS: Final[dict[BuildResult, str]] = {
    BuildResult.SUCCESS: "success",
    BuildResult.UNSTABLE: "unstable",
    BuildResult.FAILURE: "failure",
    BuildResult.NOT_BUILT: "not_built",
    BuildResult.ABORTED: "aborted",
}


class ResultGate(BaseModel):
    """Build outcomes for which cleanup is permitted to run."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    unstable: bool = True
    failure: bool = True
    not_built: bool = True
    aborted: bool = True

    def permits(self, result: BuildResult) -> bool:
        """Return whether cleanup may run for a build that ended in ``result``.

        Args:
            result: Outcome reported by the build.

        Returns:
            bool: ``True`` when the gate is open for ``result``.
        """

        return bool(getattr(self, _GATE_FIELDS[result]))

    def closed(self, *results: BuildResult) -> ResultGate:
        """Return a copy of the gate with ``results`` switched off."""

        return self.model_copy(update={_GATE_FIELDS[result]: False for result in results})


class CleanupRequest(BaseModel):
    """Validated, immutable description of one cleanup invocation."""

    model_config = ConfigDict(frozen=True)

    patterns: tuple[PatternRule, ...] = ()
    delete_dirs: bool = False
    external_delete_command: str | None = None
    skip_when_failed: bool = False
    cleanup_parent_on_failure: bool = False
    result_gate: ResultGate = Field(default_factory=ResultGate)
    timing: Timing = Timing.POST
    not_fail_build: bool = False
    cleanup_parameter: str | None = None

    @field_validator("external_delete_command", "cleanup_parameter", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CleanupStep(BaseModel):
    """Declarative step payload as written in pipeline or TOML configuration.

    Field names follow the camelCase keys used by job configuration; the
    snake_case attribute names are accepted too.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    patterns: list[PatternRule] = Field(default_factory=list)
    delete_dirs: bool = Field(default=False, alias="deleteDirs")
    external_delete: str | None = Field(default=None, alias="externalDelete")
    clean_when_success: bool = Field(default=True, alias="cleanWhenSuccess")
    clean_when_unstable: bool = Field(default=True, alias="cleanWhenUnstable")
    clean_when_failure: bool = Field(default=True, alias="cleanWhenFailure")
    clean_when_not_built: bool = Field(default=True, alias="cleanWhenNotBuilt")
    clean_when_aborted: bool = Field(default=True, alias="cleanWhenAborted")
    not_fail_build: bool = Field(default=False, alias="notFailBuild")
    cleanup_matrix_parent: bool = Field(default=False, alias="cleanupMatrixParent")
    skip_when_failed: bool = Field(default=False, alias="skipWhenFailed")
    cleanup_parameter: str | None = Field(default=None, alias="cleanupParameter")

    def result_gate(self) -> ResultGate:
        """Return the :class:`ResultGate` assembled from the ``cleanWhen*`` toggles."""

        return ResultGate(
            success=self.clean_when_success,
            unstable=self.clean_when_unstable,
            failure=self.clean_when_failure,
            not_built=self.clean_when_not_built,
            aborted=self.clean_when_aborted,
        )

    def to_request(self, timing: Timing = Timing.POST) -> CleanupRequest:
        """Build the immutable :class:`CleanupRequest` for ``timing``.

        Args:
            timing: Whether the request runs before or after the build's work.

        Returns:
            CleanupRequest: Request consumed by the cleanup engine.
        """

        return CleanupRequest(
            patterns=tuple(self.patterns),
            delete_dirs=self.delete_dirs,
            external_delete_command=self.external_delete,
            skip_when_failed=self.skip_when_failed,
            cleanup_parent_on_failure=self.cleanup_matrix_parent,
            result_gate=self.result_gate(),
            timing=timing,
            not_fail_build=self.not_fail_build,
            cleanup_parameter=self.cleanup_parameter,
        )


__all__ = [
    "BuildResult",
    "CleanupRequest",
    "CleanupStep",
    "PatternRule",
    "PatternType",
    "ResultGate",
    "Timing",
]
