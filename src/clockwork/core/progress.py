"""Progress reporting as an event sink.

Long operations emit begin/update/end events; how (or whether) they are
rendered is up to the implementation. Nothing in the package lifecycle
depends on the spinner, it only observes.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.status import Status


class Progress(ABC):
    """Abstract progress sink."""

    @abstractmethod
    def begin(self, message: str) -> None:
        """Start reporting a task."""
        ...

    @abstractmethod
    def update(self, message: str) -> None:
        """Replace the message of the running task."""
        ...

    @abstractmethod
    def end(self, *, success: bool, message: str | None = None) -> None:
        """Finish the running task, optionally with a final message."""
        ...

    @abstractmethod
    def suspend(self) -> None:
        """Temporarily hide the indicator (e.g. while prompting)."""
        ...

    @abstractmethod
    def resume(self) -> None:
        """Show the indicator again after suspend()."""
        ...

    @contextmanager
    def paused(self) -> Iterator[None]:
        """Suspend the indicator for the duration of the block."""
        self.suspend()
        try:
            yield
        finally:
            self.resume()


class RichProgress(Progress):
    """Renders the running task as a rich spinner on stderr."""

    def __init__(self, console: Console | None = None) -> None:
        self._console = console if console is not None else Console(stderr=True)
        self._status: Status | None = None
        self._message = ""
        self._suspended = False

    def begin(self, message: str) -> None:
        if self._status is not None:
            self.end(success=True)
        self._message = message
        self._status = self._console.status(message, spinner="dots")
        self._status.start()

    def update(self, message: str) -> None:
        if self._status is None:
            self.begin(message)
            return
        self._message = message
        self._status.update(message)

    def end(self, *, success: bool, message: str | None = None) -> None:
        if self._status is None:
            return
        self._status.stop()
        self._status = None
        self._suspended = False
        final = message if message is not None else self._message
        if success:
            self._console.print(f"[green]✓[/green] {final}")
        else:
            self._console.print(f"[red]✘[/red] {final}")

    def suspend(self) -> None:
        if self._status is not None and not self._suspended:
            self._status.stop()
            self._suspended = True

    def resume(self) -> None:
        if self._status is not None and self._suspended:
            self._status.start()
            self._suspended = False


class SilentProgress(Progress):
    """Drops all progress events (non-interactive runs)."""

    def begin(self, message: str) -> None:
        pass

    def update(self, message: str) -> None:
        pass

    def end(self, *, success: bool, message: str | None = None) -> None:
        pass

    def suspend(self) -> None:
        pass

    def resume(self) -> None:
        pass
