"""Registry data types and document parsing."""

from dataclasses import dataclass
from typing import Any

import yaml

from clockwork.errors import ParseError


@dataclass(frozen=True)
class RegistryEntry:
    """A short package name mapped to its git URL and optional pinned version."""

    name: str
    url: str
    version: str | None = None


def parse_registry(text: str, source: str) -> dict[str, RegistryEntry]:
    """Parse a registry YAML document.

    The document maps short names to {url, version?}:

        xml-preprocessor:
          url: https://github.com/Turtlepaw/xml-preprocessor.git

    Raises:
        ParseError: If the document is not valid YAML or an entry has no url
    """
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(source, str(e)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(source, "expected a mapping of package name to {url, version}")

    entries: dict[str, RegistryEntry] = {}
    for name, entry in data.items():
        if not isinstance(entry, dict) or not entry.get("url"):
            raise ParseError(source, f"registry entry '{name}' must have a 'url'")
        version = entry.get("version")
        entries[str(name)] = RegistryEntry(
            name=str(name),
            url=str(entry["url"]),
            version=str(version) if version is not None else None,
        )
    return entries
