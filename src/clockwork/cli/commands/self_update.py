import click

from clockwork.cli.constants import ExitCode
from clockwork.cli.ensure import exit_with_error
from clockwork.core.context import ClockworkContext
from clockwork.core.updater import self_update
from clockwork.errors import ClockworkError
from clockwork.version import __version__


@click.command("self-update")
@click.pass_obj
def self_update_cmd(ctx: ClockworkContext) -> None:
    """Download and install the latest clockwork release."""
    try:
        installed = self_update(ctx, __version__)
    except ClockworkError as e:
        exit_with_error(e, ExitCode.SELF_UPDATE_FAILED)

    if installed is not None:
        ctx.feedback.success(f"Installed clockwork {installed}. Restart clockwork to use it.")
