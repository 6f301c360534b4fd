import click

from clockwork.cli.alias import alias
from clockwork.cli.constants import ExitCode
from clockwork.cli.ensure import Ensure, exit_with_error
from clockwork.core.context import ClockworkContext
from clockwork.core.package_ops import uninstall_package
from clockwork.errors import ClockworkError


@alias("remove")
@click.command("uninstall")
@click.argument("name", metavar="NAME")
@click.pass_obj
def uninstall_cmd(ctx: ClockworkContext, name: str) -> None:
    """Remove a package and its working copy."""
    Ensure.manifest_exists(ctx)
    ctx.progress.begin(f"Uninstalling {name}...")
    try:
        uninstall_package(ctx, name)
    except ClockworkError as e:
        ctx.progress.end(success=False, message=f"Failed to uninstall {name}.")
        exit_with_error(e, ExitCode.FAILURE)
    ctx.progress.end(success=True, message=f"Package {name} uninstalled successfully.")
