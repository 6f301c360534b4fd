"""Output utilities for CLI commands with clear intent.

user_output() is for humans (stderr), machine_output() is for data other
programs may consume (stdout).
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a diagnostic message for the user to stderr."""
    click.echo(message, nl=nl, err=True)


def machine_output(message: Any = "", nl: bool = True) -> None:
    """Write structured or scriptable output to stdout."""
    click.echo(message, nl=nl)
