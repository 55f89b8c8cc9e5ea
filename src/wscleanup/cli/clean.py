# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command cleaning a build workspace."""

from __future__ import annotations

import typer

from ..clean import CleanupPlan, CleanupResult, DeletionStrategy, plan_cleanup, run_cleanup
from ..config import BuildResult, CleanupRequest, Timing
from ..errors import CleanupError
from ..logging import section
from ..runs import LocalRun
from ..runtime.logsink import ConsoleLogSink
from ..runtime.process import CommandOptions, SubprocessRunner
from ._clean_cli_models import (
    CHILD_OPTION,
    CLEANUP_PARAMETER_OPTION,
    CONFIG_OPTION,
    DEBUG_OPTION,
    DELETE_DIRS_OPTION,
    DRY_RUN_OPTION,
    EMOJI_OPTION,
    EXCLUDE_OPTION,
    EXTERNAL_DELETE_OPTION,
    INCLUDE_OPTION,
    MATRIX_PARENT_OPTION,
    NOT_FAIL_BUILD_OPTION,
    PARAM_OPTION,
    RESULT_OPTION,
    ROOT_ARGUMENT,
    SKIP_WHEN_OPTION,
    TIMEOUT_OPTION,
    TIMING_OPTION,
    CleanCLIOptions,
    normalize_cli_values,
)
from .shared import CLIError, CLILogger, build_cli_logger

EXIT_BUILD_FAILED = 1
EXIT_INVALID_CONFIG = 2


def _prepare(options: CleanCLIOptions, *, logger: CLILogger) -> tuple[CleanupRequest, LocalRun]:
    """Return the request and run described by ``options``.

    Raises:
        CLIError: If configuration or build parameters are invalid.
    """

    try:
        request = options.build_request()
        run = options.build_run()
        ladder = DeletionStrategy.for_request(request).describe()
    except CleanupError as exc:
        logger.fail(f"Configuration invalid: {exc}")
        raise CLIError(str(exc), exit_code=EXIT_INVALID_CONFIG) from exc
    logger.debug(
        f"timing={request.timing.value} result={run.result.value} patterns={len(request.patterns)} "
        f"delete_dirs={request.delete_dirs} children={len(run.children)}"
    )
    if request.external_delete_command is not None:
        logger.debug(f'command="{request.external_delete_command}"')
    logger.debug(f'ladder="{ladder}"')
    return request, run


def _emit_plan(plan: CleanupPlan, *, logger: CLILogger) -> None:
    if plan.decision is not None and not plan.decision.proceed:
        logger.warn(f"Cleanup would be skipped based on build state {plan.decision.reason}")
        return
    section("Cleanup plan", use_color=False)
    for root, selection in plan.entries:
        logger.info(f"{root.role.value.lower()} workspace {root.path}")
        for relative in selection.paths:
            logger.warn(f"DRY RUN: would remove {root.path.joinpath(*relative.parts)}")
        for relative, detail in selection.unreadable:
            logger.warn(f"Cannot list {root.path.joinpath(*relative.parts)}: {detail}")
    logger.ok(f"Dry run complete; {plan.path_count} paths would be removed")


def _emit_summary(result: CleanupResult, *, logger: CLILogger) -> None:
    report = result.report
    if result.skipped:
        logger.warn(f"Cleanup skipped based on build state {result.skip_reason}")
        return
    if report.overall_succeeded:
        logger.ok(f"Removed {len(report.outcomes)} paths from {len(report.roots)} workspace(s)")
        return
    message = f"{len(report.failures)} of {len(report.outcomes)} paths could not be removed"
    if result.build_failed:
        logger.fail(message)
    else:
        logger.warn(f"{message}; not failing the build")


def clean_command(
    root: ROOT_ARGUMENT,
    include: INCLUDE_OPTION = None,
    exclude: EXCLUDE_OPTION = None,
    delete_dirs: DELETE_DIRS_OPTION = False,
    external_delete: EXTERNAL_DELETE_OPTION = None,
    timing: TIMING_OPTION = Timing.POST,
    result: RESULT_OPTION = BuildResult.SUCCESS,
    child: CHILD_OPTION = None,
    param: PARAM_OPTION = None,
    skip_when: SKIP_WHEN_OPTION = None,
    not_fail_build: NOT_FAIL_BUILD_OPTION = False,
    cleanup_matrix_parent: MATRIX_PARENT_OPTION = False,
    cleanup_parameter: CLEANUP_PARAMETER_OPTION = None,
    config: CONFIG_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    dry_run: DRY_RUN_OPTION = False,
    emoji: EMOJI_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Delete workspace contents according to patterns and build state."""

    options = CleanCLIOptions(
        root=root.resolve(),
        includes=normalize_cli_values(include),
        excludes=normalize_cli_values(exclude),
        delete_dirs=delete_dirs,
        external_delete=external_delete,
        timing=timing,
        result=result,
        children=tuple(path.resolve() for path in child or ()),
        params=normalize_cli_values(param),
        skip_when=tuple(skip_when or ()),
        not_fail_build=not_fail_build,
        cleanup_matrix_parent=cleanup_matrix_parent,
        cleanup_parameter=cleanup_parameter,
        config=config,
        emoji=emoji,
        debug=debug,
    )
    logger = build_cli_logger(emoji=options.emoji, debug=options.debug)
    try:
        request, run = _prepare(options, logger=logger)
        if dry_run:
            _emit_plan(plan_cleanup(run, request), logger=logger)
            raise typer.Exit(code=0)
        outcome = run_cleanup(
            run,
            request,
            sink=ConsoleLogSink(),
            runner=SubprocessRunner(CommandOptions(timeout=timeout)),
        )
    except CLIError as exc:
        raise typer.Exit(code=exc.exit_code) from exc
    except CleanupError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_INVALID_CONFIG) from exc

    _emit_summary(outcome, logger=logger)
    raise typer.Exit(code=EXIT_BUILD_FAILED if outcome.build_failed else 0)


__all__ = ["EXIT_BUILD_FAILED", "EXIT_INVALID_CONFIG", "clean_command"]
