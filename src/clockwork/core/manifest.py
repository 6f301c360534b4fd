"""Project manifest data structures and persistence.

The manifest (clockwork.yml) describes a watch face project and its
dependencies:

    name: my-watchface
    version: 1.0.0
    description: ""
    watchFaceFormatVersion: "2"
    dependencies:
      xml-preprocessor:
        url: https://github.com/Turtlepaw/xml-preprocessor.git
        version: 1.2.0
    scripts:
      postinstall: python setup.py
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from clockwork.core.versions import LATEST
from clockwork.errors import NotFoundError, ParseError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "clockwork.yml"
MANIFEST_NAMES = (MANIFEST_NAME, "clockwork.yaml")
FORMAT_VERSIONS = ("1", "2")

_KNOWN_KEYS = {"name", "version", "description", "watchFaceFormatVersion", "dependencies", "scripts"}


@dataclass(frozen=True)
class Dependency:
    """One package reference inside a manifest."""

    url: str
    version: str = LATEST


@dataclass
class Manifest:
    """Persisted project descriptor.

    Unknown top-level keys are kept in `extra` so they survive a
    read/write cycle.
    """

    name: str = ""
    version: str = ""
    description: str = ""
    watch_face_format_version: str | None = None
    dependencies: dict[str, Dependency] = field(default_factory=dict)
    scripts: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "description": self.description,
        }
        if self.watch_face_format_version is not None:
            data["watchFaceFormatVersion"] = self.watch_face_format_version
        data["dependencies"] = {
            name: {"url": dep.url, "version": dep.version}
            for name, dep in self.dependencies.items()
        }
        if self.scripts:
            data["scripts"] = dict(self.scripts)
        data.update(self.extra)
        return data


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def manifest_from_dict(data: Any, source: str | Path) -> Manifest:
    """Build a Manifest from a parsed YAML document.

    Raises:
        ParseError: If the document does not have the expected shape
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError(source, "expected a mapping at the top level")

    format_version = data.get("watchFaceFormatVersion")
    if format_version is not None:
        format_version = str(format_version)
        if format_version not in FORMAT_VERSIONS:
            raise ParseError(
                source,
                f"watchFaceFormatVersion must be one of {', '.join(FORMAT_VERSIONS)}, "
                f"got {format_version!r}",
            )

    raw_dependencies = data.get("dependencies") or {}
    if not isinstance(raw_dependencies, dict):
        raise ParseError(source, "'dependencies' must be a mapping of name to {url, version}")

    dependencies: dict[str, Dependency] = {}
    for name, entry in raw_dependencies.items():
        if not isinstance(entry, dict) or not entry.get("url"):
            raise ParseError(source, f"dependency '{name}' must have a 'url'")
        version = entry.get("version")
        if isinstance(version, float):
            # YAML reads 1.10 as the number 1.1, losing the intended tag
            raise ParseError(
                source,
                f"version of dependency '{name}' was read as the number {version}",
                hint=f'Quote the version in the manifest, e.g. version: "{version}"',
            )
        dependencies[str(name)] = Dependency(
            url=str(entry["url"]),
            version=str(version) if version is not None else LATEST,
        )

    raw_scripts = data.get("scripts") or {}
    if not isinstance(raw_scripts, dict):
        raise ParseError(source, "'scripts' must be a mapping of event to command")

    return Manifest(
        name=_as_str(data.get("name")),
        version=_as_str(data.get("version")),
        description=_as_str(data.get("description")),
        watch_face_format_version=format_version,
        dependencies=dependencies,
        scripts={str(event): str(command) for event, command in raw_scripts.items()},
        extra={key: value for key, value in data.items() if key not in _KNOWN_KEYS},
    )


class ManifestStore:
    """Reads and writes the manifest of one directory.

    The first existing file among MANIFEST_NAMES is the manifest. The store
    never creates a manifest on write; only create() (used by init) does.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def path(self) -> Path | None:
        """Get the existing manifest path, or None if there is none."""
        for name in MANIFEST_NAMES:
            candidate = self.root / name
            if candidate.is_file():
                return candidate
        return None

    def exists(self) -> bool:
        return self.path() is not None

    def _require_path(self) -> Path:
        manifest_path = self.path()
        if manifest_path is None:
            raise NotFoundError(
                f"No {MANIFEST_NAME} found in {self.root}",
                hint="Run 'clockwork init' to create one.",
            )
        return manifest_path

    def read(self) -> Manifest:
        """Read and parse the manifest.

        Raises:
            NotFoundError: If no accepted manifest file exists
            ParseError: If the file is not valid YAML or has the wrong shape
        """
        manifest_path = self._require_path()
        try:
            data = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ParseError(manifest_path.name, str(e)) from e
        return manifest_from_dict(data, manifest_path.name)

    def write(self, manifest: Manifest) -> Path:
        """Write the manifest to the existing manifest file.

        Raises:
            NotFoundError: If no accepted manifest file exists
        """
        manifest_path = self._require_path()
        self._dump(manifest_path, manifest)
        return manifest_path

    def create(self, manifest: Manifest) -> Path:
        """Create clockwork.yml with the given content (overwrites it if present)."""
        manifest_path = self.root / MANIFEST_NAME
        self._dump(manifest_path, manifest)
        return manifest_path

    def _dump(self, manifest_path: Path, manifest: Manifest) -> None:
        logger.debug("Writing manifest %s", manifest_path)
        content = yaml.safe_dump(
            manifest.to_dict(), sort_keys=False, default_flow_style=False, allow_unicode=True
        )
        manifest_path.write_text(content, encoding="utf-8")
