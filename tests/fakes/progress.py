"""Fake progress sink that records events."""

from clockwork.core.progress import Progress


class FakeProgress(Progress):
    """Records every progress event as a (kind, message) tuple.

    Examples:
        >>> progress = FakeProgress()
        >>> progress.begin("Installing...")
        >>> progress.end(success=True)
        >>> progress.events
        [('begin', 'Installing...'), ('end', 'success')]
    """

    def __init__(self) -> None:
        self._events: list[tuple[str, str | None]] = []
        self._suspended = False

    def begin(self, message: str) -> None:
        self._events.append(("begin", message))

    def update(self, message: str) -> None:
        self._events.append(("update", message))

    def end(self, *, success: bool, message: str | None = None) -> None:
        self._events.append(("end", "success" if success else "failure"))
        if message is not None:
            self._events.append(("final", message))

    def suspend(self) -> None:
        self._suspended = True
        self._events.append(("suspend", None))

    def resume(self) -> None:
        self._suspended = False
        self._events.append(("resume", None))

    @property
    def events(self) -> list[tuple[str, str | None]]:
        return list(self._events)

    @property
    def messages(self) -> list[str]:
        """All begin/update/final messages, in order."""
        return [message for kind, message in self._events if message is not None]

    @property
    def suspended(self) -> bool:
        return self._suspended
