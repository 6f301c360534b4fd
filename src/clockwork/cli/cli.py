import logging

import click

from clockwork.cli.alias import register_with_aliases
from clockwork.cli.commands.add import add_cmd
from clockwork.cli.commands.config import config_group
from clockwork.cli.commands.init import init_cmd
from clockwork.cli.commands.install import install_cmd
from clockwork.cli.commands.packages import packages_cmd
from clockwork.cli.commands.self_update import self_update_cmd
from clockwork.cli.commands.uninstall import uninstall_cmd
from clockwork.cli.commands.update import update_cmd, upgrade_cmd
from clockwork.cli.help_formatter import GroupedCommandGroup
from clockwork.core.context import create_context
from clockwork.version import __version__

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(cls=GroupedCommandGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="clockwork")
@click.option("--debug", is_flag=True, help="Show debug logging of git calls and decisions.")
@click.option(
    "--non-interactive",
    is_flag=True,
    help="Answer every prompt with its default and hide the spinner.",
)
@click.option("--quiet", "-q", is_flag=True, help="Only show warnings and errors.")
@click.pass_context
def cli(ctx: click.Context, debug: bool, non_interactive: bool, quiet: bool) -> None:
    """Package manager for Watch Face Format projects."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(non_interactive=non_interactive, quiet=quiet)


# Register all commands
# Commands with @alias decorators use register_with_aliases() to auto-register aliases
register_with_aliases(cli, install_cmd)  # Has @alias("i")
cli.add_command(add_cmd)
cli.add_command(update_cmd)
cli.add_command(upgrade_cmd)
register_with_aliases(cli, uninstall_cmd)  # Has @alias("remove")
cli.add_command(packages_cmd)
register_with_aliases(cli, init_cmd)  # Has @alias("initialize")
cli.add_command(config_group)
cli.add_command(self_update_cmd)


def main() -> None:
    """CLI entry point used by the `clockwork` console script."""
    cli()
