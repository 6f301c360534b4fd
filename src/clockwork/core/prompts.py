"""Interactive prompts behind a capability interface.

Commands ask questions through ctx.prompter so that non-interactive runs
(CI, --non-interactive) and tests can answer them without a terminal.
"""

from abc import ABC, abstractmethod

import click


class Prompter(ABC):
    """Abstract interface for asking the user questions."""

    @abstractmethod
    def confirm(self, message: str, *, default: bool) -> bool:
        """Ask a yes/no question."""
        ...

    @abstractmethod
    def text(self, message: str, *, default: str) -> str:
        """Ask for a free-form answer."""
        ...

    @abstractmethod
    def choose(self, message: str, choices: list[str], *, default: str) -> str:
        """Ask the user to pick one of several choices."""
        ...


class InteractivePrompter(Prompter):
    """Prompts on the terminal using click."""

    def confirm(self, message: str, *, default: bool) -> bool:
        return click.confirm(message, default=default, err=True)

    def text(self, message: str, *, default: str) -> str:
        return click.prompt(message, default=default, err=True)

    def choose(self, message: str, choices: list[str], *, default: str) -> str:
        return click.prompt(
            message,
            type=click.Choice(choices),
            default=default,
            show_choices=True,
            err=True,
        )


class NonInteractivePrompter(Prompter):
    """Answers every question with its default, never touching the terminal."""

    def confirm(self, message: str, *, default: bool) -> bool:
        return default

    def text(self, message: str, *, default: str) -> str:
        return default

    def choose(self, message: str, choices: list[str], *, default: str) -> str:
        return default
