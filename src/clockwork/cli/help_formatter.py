"""Custom Click help formatter for organized command display."""

import click

from clockwork.cli.alias import get_aliases


class GroupedCommandGroup(click.Group):
    """Click Group that organizes commands into logical sections in help output.

    Commands are organized into sections based on their usage patterns:
    - Packages: Dependency lifecycle commands
    - Project: Manifest creation
    - Maintenance: Configuration and self-update
    - Quick Access: Short aliases of the commands above
    """

    def format_commands(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Format commands into organized sections."""
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd))

        if not commands:
            return

        # Define command organization
        package_commands = ["install", "add", "update", "upgrade", "uninstall", "packages"]
        project_commands = ["init"]
        maintenance_commands = ["config", "self-update"]

        # Categorize commands
        package_cmds = []
        project_cmds = []
        maintenance_cmds = []
        alias_cmds = []

        for name, cmd in commands:
            if name in package_commands:
                package_cmds.append((name, cmd))
            elif name in project_commands:
                project_cmds.append((name, cmd))
            elif name in maintenance_commands:
                maintenance_cmds.append((name, cmd))
            elif name in get_aliases(cmd):
                alias_cmds.append((name, cmd))
            else:
                maintenance_cmds.append((name, cmd))

        # Format sections
        if package_cmds:
            with formatter.section("Packages"):
                self._format_command_list(ctx, formatter, package_cmds)

        if project_cmds:
            with formatter.section("Project"):
                self._format_command_list(ctx, formatter, project_cmds)

        if maintenance_cmds:
            with formatter.section("Maintenance"):
                self._format_command_list(ctx, formatter, maintenance_cmds)

        if alias_cmds:
            with formatter.section("Quick Access (Aliases)"):
                self._format_command_list(ctx, formatter, alias_cmds)

    def _format_command_list(
        self,
        ctx: click.Context,
        formatter: click.HelpFormatter,
        commands: list[tuple[str, click.Command]],
    ) -> None:
        """Format a list of commands with their help text."""
        rows = []
        for name, cmd in commands:
            help_text = cmd.get_short_help_str(limit=formatter.width)
            rows.append((name, help_text))

        if rows:
            formatter.write_dl(rows)
