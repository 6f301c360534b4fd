import click

from clockwork.cli.commands.package_helpers import run_sync
from clockwork.cli.ensure import Ensure
from clockwork.core.context import ClockworkContext


@click.command("update")
@click.pass_obj
def update_cmd(ctx: ClockworkContext) -> None:
    """Update packages to their newest minor or patch release."""
    Ensure.manifest_exists(ctx)
    run_sync(ctx, upgrade=False)


@click.command("upgrade")
@click.pass_obj
def upgrade_cmd(ctx: ClockworkContext) -> None:
    """Upgrade packages to their newest release, including major versions."""
    Ensure.manifest_exists(ctx)
    run_sync(ctx, upgrade=True)
