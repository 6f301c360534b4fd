"""CLI error handling utilities with styled output.

This module provides the Ensure class for asserting invariants in CLI commands
and exit_with_error() for turning a ClockworkError into a styled message and
an exit code. All errors use a red "Error:" prefix for visual consistency.
"""

from typing import TYPE_CHECKING, NoReturn

import click

from clockwork.cli.constants import ExitCode
from clockwork.cli.output import user_output
from clockwork.core.manifest import MANIFEST_NAME
from clockwork.errors import ClockworkError

if TYPE_CHECKING:
    from clockwork.core.context import ClockworkContext


def exit_with_error(error: ClockworkError, exit_code: ExitCode) -> NoReturn:
    """Print a ClockworkError (and its hint) and exit.

    Raises:
        SystemExit: Always, with the given exit code
    """
    user_output(click.style("Error: ", fg="red") + error.message)
    if error.hint:
        user_output(error.hint)
    raise SystemExit(exit_code)


def exit_code_for(
    error: ClockworkError,
    mapping: list[tuple[type[ClockworkError], ExitCode]],
    default: ExitCode = ExitCode.FAILURE,
) -> ExitCode:
    """Find the exit code of the first mapping entry matching the error type."""
    for error_type, exit_code in mapping:
        if isinstance(error, error_type):
            return exit_code
    return default


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(
        condition: bool, error_message: str, exit_code: ExitCode = ExitCode.FAILURE
    ) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Args:
            condition: Boolean condition to check
            error_message: Error message to display if condition is false.
                          "Error: " prefix will be added automatically in red.
            exit_code: Exit code used when the condition is false

        Raises:
            SystemExit: If condition is false
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(exit_code)

    @staticmethod
    def manifest_exists(ctx: "ClockworkContext") -> None:
        """Ensure the current directory holds a clockwork project.

        Raises:
            SystemExit: If no manifest is found (exit code 4)
        """
        if not ctx.manifest_store.exists():
            user_output(
                click.style("Error: ", fg="red")
                + f"No {MANIFEST_NAME} found in {ctx.cwd}. Is this a clockwork project?"
            )
            user_output("Run 'clockwork init' to create one.")
            raise SystemExit(ExitCode.MANIFEST_NOT_FOUND)
