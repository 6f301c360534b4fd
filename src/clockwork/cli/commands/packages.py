import click

from clockwork.cli.constants import ExitCode
from clockwork.cli.ensure import Ensure, exit_with_error
from clockwork.cli.output import machine_output
from clockwork.core.context import ClockworkContext
from clockwork.core.package_ops import list_dependencies
from clockwork.errors import ClockworkError


@click.command("packages")
@click.pass_obj
def packages_cmd(ctx: ClockworkContext) -> None:
    """List installed packages with their versions."""
    Ensure.manifest_exists(ctx)
    try:
        dependencies = list_dependencies(ctx)
    except ClockworkError as e:
        exit_with_error(e, ExitCode.FAILURE)

    if not dependencies:
        ctx.feedback.info("No packages installed.")
        return

    ctx.feedback.info("Installed packages:")
    for name, dependency in dependencies:
        machine_output(f"  • {name}@{dependency.version}")
