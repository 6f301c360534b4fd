import click

from clockwork.cli.alias import alias
from clockwork.cli.constants import ExitCode
from clockwork.cli.ensure import Ensure, exit_with_error
from clockwork.core.context import ClockworkContext
from clockwork.core.manifest import FORMAT_VERSIONS, MANIFEST_NAME
from clockwork.core.package_ops import init_project
from clockwork.errors import ClockworkError


@alias("initialize")
@click.command("init")
@click.option("--name", help="Project name (defaults to the directory name).")
@click.option(
    "--format-version",
    type=click.Choice(list(FORMAT_VERSIONS)),
    help="Watch Face Format version the project targets.",
)
@click.option("--force", is_flag=True, help=f"Overwrite an existing {MANIFEST_NAME}.")
@click.pass_obj
def init_cmd(
    ctx: ClockworkContext, name: str | None, format_version: str | None, force: bool
) -> None:
    """Initialize a clockwork project in the current directory."""
    Ensure.invariant(
        force or not ctx.manifest_store.exists(),
        f"{MANIFEST_NAME} already exists. Use --force to overwrite it.",
    )
    if name is None:
        name = ctx.prompter.text("Enter the project name:", default=ctx.cwd.name)
    if format_version is None:
        format_version = ctx.prompter.choose(
            "Watch Face Format version:", list(FORMAT_VERSIONS), default=FORMAT_VERSIONS[0]
        )

    ctx.progress.begin(f"Initializing {MANIFEST_NAME}...")
    try:
        path = init_project(ctx, name=name, format_version=format_version, force=force)
    except ClockworkError as e:
        ctx.progress.end(success=False, message=f"Failed to initialize {MANIFEST_NAME}.")
        exit_with_error(e, ExitCode.FAILURE)
    ctx.progress.end(success=True, message=f"Created {path.name}.")
