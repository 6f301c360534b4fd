"""Package registry subpackage."""

from clockwork.core.registry.abc import Registry
from clockwork.core.registry.real import DEFAULT_REGISTRY_URL, HttpRegistry
from clockwork.core.registry.types import RegistryEntry, parse_registry

__all__ = [
    "DEFAULT_REGISTRY_URL",
    "HttpRegistry",
    "Registry",
    "RegistryEntry",
    "parse_registry",
]
