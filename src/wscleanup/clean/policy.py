# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decide whether a cleanup invocation runs for the build's outcome and timing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from ..config.models import BuildResult, CleanupRequest, ResultGate, Timing
from ..interfaces import BuildRun

TRUTHY_PARAMETER_VALUES: Final[frozenset[str]] = frozenset({"true", "1", "yes", "on"})


@dataclass(slots=True, frozen=True)
class PolicyDecision:
    """Outcome of evaluating the cleanup policy for one build.

    Attributes:
        proceed: ``True`` when cleanup should run.
        result: Build result the decision was based on.
        reason: Text placed after the skip marker when ``proceed`` is false.
    """

    proceed: bool
    result: BuildResult
    reason: str | None = None


def effective_gate(request: CleanupRequest) -> ResultGate:
    """Return the request's gate with the legacy ``skip_when_failed`` flag folded in."""

    if request.skip_when_failed:
        return request.result_gate.closed(BuildResult.FAILURE)
    return request.result_gate


def parameter_enabled(run: BuildRun, name: str) -> bool:
    """Return whether the build parameter ``name`` holds a truthy value."""

    value = run.parameters().get(name)
    return value is not None and value.strip().lower() in TRUTHY_PARAMETER_VALUES


def evaluate_policy(request: CleanupRequest, run: BuildRun) -> PolicyDecision:
    """Evaluate gating rules for ``run``.

    Pre-build cleanup ignores the result gate since no result exists yet;
    post-build cleanup requires the gate to permit the current result. A
    configured ``cleanup_parameter`` must additionally be truthy.

    Args:
        request: Cleanup configuration for this invocation.
        run: Build supplying its result and parameters.

    Returns:
        PolicyDecision: Whether to proceed, with the skip reason otherwise.
    """

    result = run.current_result()
    if request.timing is Timing.POST and not effective_gate(request).permits(result):
        return PolicyDecision(proceed=False, result=result, reason=result.value)
    if request.cleanup_parameter is not None and not parameter_enabled(run, request.cleanup_parameter):
        return PolicyDecision(
            proceed=False,
            result=result,
            reason=f"{result.value} (parameter {request.cleanup_parameter} is not set)",
        )
    return PolicyDecision(proceed=True, result=result)


__all__ = [
    "PolicyDecision",
    "TRUTHY_PARAMETER_VALUES",
    "effective_gate",
    "evaluate_policy",
    "parameter_enabled",
]
