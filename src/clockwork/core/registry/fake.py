"""Fake registry for testing."""

from clockwork.core.registry.abc import REGISTRY_HINT, Registry
from clockwork.core.registry.types import RegistryEntry
from clockwork.errors import NetworkError, NotFoundError


class FakeRegistry(Registry):
    """In-memory registry configured through the constructor."""

    def __init__(
        self,
        *,
        entries: dict[str, RegistryEntry] | None = None,
        offline: bool = False,
    ) -> None:
        """Create FakeRegistry.

        Args:
            entries: Mapping of short name -> RegistryEntry
            offline: Simulate a fetch failure on every lookup
        """
        self._entries = entries or {}
        self._offline = offline
        self._lookups: list[str] = []

    @property
    def lookups(self) -> list[str]:
        """Names passed to lookup(), for test assertions."""
        return self._lookups

    def lookup(self, name: str) -> RegistryEntry:
        self._lookups.append(name)
        if self._offline:
            raise NetworkError("Failed to fetch registry: connection refused", hint=REGISTRY_HINT)
        entry = self._entries.get(name)
        if entry is None:
            raise NotFoundError(f"Package {name} not found in the registry.", hint=REGISTRY_HINT)
        return entry
