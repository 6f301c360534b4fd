"""Command aliases that show up in grouped help output."""

from collections.abc import Callable

import click

_ALIASES_ATTR = "clockwork_aliases"


def alias(*names: str) -> Callable[[click.Command], click.Command]:
    """Attach alternative names to a command.

    Apply above @click.command so it receives the built Command. The aliases
    take effect when the command is registered with register_with_aliases().

    Example:
        >>> @alias("i")
        ... @click.command("install")
        ... def install_cmd() -> None: ...
    """

    def decorator(cmd: click.Command) -> click.Command:
        setattr(cmd, _ALIASES_ATTR, (*get_aliases(cmd), *names))
        return cmd

    return decorator


def get_aliases(cmd: click.Command) -> tuple[str, ...]:
    return getattr(cmd, _ALIASES_ATTR, ())


def register_with_aliases(group: click.Group, cmd: click.Command, name: str | None = None) -> None:
    """Add a command to a group under its name and every alias."""
    group.add_command(cmd, name=name)
    for alias_name in get_aliases(cmd):
        group.add_command(cmd, name=alias_name)
