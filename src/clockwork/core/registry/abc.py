"""Abstract interface for the package registry."""

from abc import ABC, abstractmethod

from clockwork.core.registry.types import RegistryEntry

REGISTRY_HINT = (
    "Check the package name, or use a git URL starting with https:// instead.\n"
    "See https://clockwork-pkg.pages.dev/guides/packages#packages-in-the-registry"
)


class Registry(ABC):
    """Read-only lookup of short package names."""

    @abstractmethod
    def lookup(self, name: str) -> RegistryEntry:
        """Resolve a short package name.

        Raises:
            NetworkError: If the registry document cannot be fetched
            ParseError: If the registry document is malformed
            NotFoundError: If the name is not in the registry
        """
        ...
