import click

from clockwork.cli.alias import alias
from clockwork.cli.commands.package_helpers import run_add, run_sync
from clockwork.cli.ensure import Ensure
from clockwork.core.context import ClockworkContext


@alias("i")
@click.command("install")
@click.argument("ref", metavar="[PACKAGE]", required=False)
@click.pass_obj
def install_cmd(ctx: ClockworkContext, ref: str | None) -> None:
    """Install all dependencies, adding PACKAGE first if given.

    Missing packages are cloned and installed ones move to the newest
    minor or patch release. Use 'clockwork upgrade' for major releases.
    """
    Ensure.manifest_exists(ctx)
    if ref is not None:
        run_add(ctx, ref)
    run_sync(ctx, upgrade=False)
