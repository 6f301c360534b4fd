"""Registry backed by a remote YAML document fetched over HTTP."""

import logging

import httpx

from clockwork.core.registry.abc import REGISTRY_HINT, Registry
from clockwork.core.registry.types import RegistryEntry, parse_registry
from clockwork.errors import NetworkError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = (
    "https://raw.githubusercontent.com/Turtlepaw/clockwork/refs/heads/main/registry.yml"
)


class HttpRegistry(Registry):
    """Production registry that downloads the registry document once per process."""

    def __init__(self, url: str = DEFAULT_REGISTRY_URL, *, client: httpx.Client | None = None):
        self._url = url
        self._client = client
        self._entries: dict[str, RegistryEntry] | None = None

    def _fetch(self) -> str:
        logger.debug("Fetching registry %s", self._url)
        try:
            if self._client is not None:
                response = self._client.get(self._url, follow_redirects=True)
            else:
                response = httpx.get(self._url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to fetch registry: {e}", hint=REGISTRY_HINT) from e
        return response.text

    def entries(self) -> dict[str, RegistryEntry]:
        if self._entries is None:
            self._entries = parse_registry(self._fetch(), self._url)
        return self._entries

    def lookup(self, name: str) -> RegistryEntry:
        entry = self.entries().get(name)
        if entry is None:
            raise NotFoundError(f"Package {name} not found in the registry.", hint=REGISTRY_HINT)
        return entry
