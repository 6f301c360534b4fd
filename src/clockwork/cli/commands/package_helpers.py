"""Shared helpers for the package lifecycle commands."""

from typing import NoReturn

from clockwork.cli.constants import ExitCode
from clockwork.cli.ensure import exit_code_for, exit_with_error
from clockwork.core.context import ClockworkContext
from clockwork.core.package_ops import AddResult, SyncReport, add_package, sync_dependencies
from clockwork.errors import (
    AbortedError,
    ClockworkError,
    ExecutionError,
    NetworkError,
    NotFoundError,
    ParseError,
)

PACKAGE_ERROR_EXIT_CODES: list[tuple[type[ClockworkError], ExitCode]] = [
    (AbortedError, ExitCode.FAILURE),
    (NetworkError, ExitCode.REGISTRY_LOOKUP_FAILED),
    (NotFoundError, ExitCode.REGISTRY_LOOKUP_FAILED),
    (ExecutionError, ExitCode.INSTALL_FAILED),
]


def exit_for_package_error(ctx: ClockworkContext, error: ClockworkError) -> NoReturn:
    """Exit with the code matching a failed add/install."""
    if isinstance(error, ParseError) and error.source == ctx.config.registry_url:
        exit_with_error(error, ExitCode.REGISTRY_LOOKUP_FAILED)
    exit_with_error(error, exit_code_for(error, PACKAGE_ERROR_EXIT_CODES))


def run_add(ctx: ClockworkContext, ref: str) -> AddResult:
    """Add one package with progress reporting, exiting on failure."""
    ctx.progress.begin(f"Installing {ref}...")
    try:
        result = add_package(ctx, ref)
    except ClockworkError as e:
        ctx.progress.end(success=False, message=f"Failed to install {ref}.")
        exit_for_package_error(ctx, e)
    ctx.progress.end(
        success=True,
        message=f"Package {result.name} added successfully ({result.dependency.version}).",
    )
    return result


def run_sync(ctx: ClockworkContext, *, upgrade: bool) -> SyncReport:
    """Sync all dependencies and print a summary.

    Raises:
        SystemExit: With INSTALL_FAILED after the summary if any package failed
    """
    ctx.progress.begin("Upgrading packages..." if upgrade else "Updating packages...")
    try:
        report = sync_dependencies(ctx, upgrade=upgrade)
    except ClockworkError as e:
        ctx.progress.end(success=False)
        exit_with_error(e, ExitCode.FAILURE)

    if report.failed:
        ctx.progress.end(success=False, message=f"{len(report.failed)} package(s) failed to update.")
    else:
        ctx.progress.end(success=True, message="Packages up to date.")

    for name in report.installed:
        ctx.feedback.info(f"Installed {name}")
    for name, old, new in report.updated:
        ctx.feedback.info(f"Updated {name} {old} -> {new}")
    if report.upgradable and not upgrade:
        ctx.feedback.info(
            f"Packages up to date, {len(report.upgradable)} can be upgraded "
            "with clockwork upgrade."
        )

    if report.failed:
        raise SystemExit(ExitCode.INSTALL_FAILED)
    return report
