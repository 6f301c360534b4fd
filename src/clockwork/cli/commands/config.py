import click

from clockwork.cli.constants import ExitCode
from clockwork.cli.ensure import Ensure
from clockwork.cli.output import machine_output, user_output
from clockwork.core.config_store import DEFAULT_SETTINGS, HOME_ENV_VAR
from clockwork.core.context import ClockworkContext


def _effective_settings(ctx: ClockworkContext) -> dict[str, str]:
    return {
        "registry_url": ctx.config.registry_url,
        "packages_dir": ctx.config.packages_dir,
    }


@click.group("config")
def config_group() -> None:
    """Manage clockwork configuration."""


@config_group.command("list")
@click.pass_obj
def config_list(ctx: ClockworkContext) -> None:
    """Print a list of configuration keys and values."""
    user_output(click.style("Configuration:", bold=True))
    machine_output(f"  {HOME_ENV_VAR}={ctx.config.home}")
    for key, value in _effective_settings(ctx).items():
        machine_output(f"  {key}={value}")
    if not ctx.config_store.exists():
        user_output(f"  (defaults - no file at {ctx.config_store.path()})")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: ClockworkContext, key: str) -> None:
    """Print the value of a given configuration key."""
    settings = _effective_settings(ctx)
    Ensure.invariant(key in settings, f"Invalid key: {key}")
    machine_output(settings[key])


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: ClockworkContext, key: str, value: str) -> None:
    """Update configuration with a value for the given key."""
    Ensure.invariant(
        key in DEFAULT_SETTINGS,
        f"Invalid key: {key} (expected one of {', '.join(DEFAULT_SETTINGS)})",
    )
    Ensure.invariant(bool(value.strip()), f"Value for {key} cannot be empty")
    try:
        ctx.config_store.set_value(key, value)
    except OSError as e:
        user_output(click.style("Error: ", fg="red") + f"Failed to write config: {e}")
        raise SystemExit(ExitCode.ENVIRONMENT_NOT_CONFIGURED) from e
    user_output(f"Set {key}={value}")
