import click

from clockwork.cli.commands.package_helpers import run_add
from clockwork.cli.ensure import Ensure
from clockwork.core.context import ClockworkContext


@click.command("add")
@click.argument("ref", metavar="PACKAGE")
@click.pass_obj
def add_cmd(ctx: ClockworkContext, ref: str) -> None:
    """Add a package and install it.

    PACKAGE is a git URL or a registry name, optionally followed by
    @VERSION (for example xml-preprocessor@1.2.0).
    """
    Ensure.manifest_exists(ctx)
    run_add(ctx, ref)
