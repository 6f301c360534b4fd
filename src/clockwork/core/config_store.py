"""Clockwork configuration data structures and loading.

Configuration comes from three places, later ones winning:
1. Built-in defaults
2. $CLOCKWORK_HOME/config.toml
3. Environment variables (CLOCKWORK_REGISTRY_URL)

CLOCKWORK_HOME itself is required: it is the installation root used for
self-update staging and holds the config file.
"""

import os
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import tomlkit

from clockwork.core.registry.real import DEFAULT_REGISTRY_URL
from clockwork.errors import NotFoundError, ParseError

HOME_ENV_VAR = "CLOCKWORK_HOME"
REGISTRY_ENV_VAR = "CLOCKWORK_REGISTRY_URL"
CONFIG_FILE_NAME = "config.toml"

DEFAULT_SETTINGS: dict[str, str] = {
    "registry_url": DEFAULT_REGISTRY_URL,
    "packages_dir": "packages",
}


@dataclass(frozen=True)
class ClockworkConfig:
    """Immutable configuration.

    Loaded once at CLI entry point and stored in ClockworkContext.
    """

    home: Path
    registry_url: str = DEFAULT_REGISTRY_URL
    packages_dir: str = "packages"


class ConfigStore(ABC):
    """Abstract interface for the settings file.

    Provides dependency injection for config access, enabling in-memory
    implementations for tests without touching the filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if the settings file exists."""
        ...

    @abstractmethod
    def load(self) -> dict[str, str]:
        """Load stored settings (only keys present in the file).

        Raises:
            ParseError: If the file is not valid TOML
        """
        ...

    @abstractmethod
    def set_value(self, key: str, value: str) -> None:
        """Store one setting, keeping the rest of the file intact."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the settings file (for messages)."""
        ...


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads/writes $CLOCKWORK_HOME/config.toml."""

    def __init__(self, home: Path) -> None:
        self._home = home

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> dict[str, str]:
        if not self.exists():
            return {}
        try:
            data = tomllib.loads(self.path().read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ParseError(self.path(), str(e)) from e
        return {key: str(value) for key, value in data.items() if key in DEFAULT_SETTINGS}

    def set_value(self, key: str, value: str) -> None:
        config_path = self.path()

        # Load existing document to preserve comments and formatting
        if config_path.exists():
            with config_path.open("r", encoding="utf-8") as f:
                doc = tomlkit.load(f)
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("Clockwork configuration"))

        doc[key] = value

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)

    def path(self) -> Path:
        return self._home / CONFIG_FILE_NAME


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores settings in memory."""

    def __init__(self, settings: dict[str, str] | None = None) -> None:
        self._settings = dict(settings) if settings is not None else None

    def exists(self) -> bool:
        return self._settings is not None

    def load(self) -> dict[str, str]:
        return dict(self._settings or {})

    def set_value(self, key: str, value: str) -> None:
        if self._settings is None:
            self._settings = {}
        self._settings[key] = value

    def path(self) -> Path:
        return Path("/fake/clockwork/config.toml")


def resolve_home(env: Mapping[str, str] | None = None) -> Path:
    """Get the installation root from CLOCKWORK_HOME.

    Raises:
        NotFoundError: If the variable is unset or empty
    """
    if env is None:
        env = os.environ
    home = env.get(HOME_ENV_VAR)
    if not home:
        raise NotFoundError(
            f"Environment variable {HOME_ENV_VAR} is not set.",
            hint=f"Set {HOME_ENV_VAR} to the clockwork installation directory "
            "(the installer does this for you).",
        )
    return Path(home).expanduser()


def load_config(home: Path, store: ConfigStore, env: Mapping[str, str]) -> ClockworkConfig:
    """Merge defaults, the settings file and environment overrides."""
    settings = dict(DEFAULT_SETTINGS)
    settings.update(store.load())

    registry_override = env.get(REGISTRY_ENV_VAR)
    if registry_override:
        settings["registry_url"] = registry_override

    return ClockworkConfig(
        home=home,
        registry_url=settings["registry_url"],
        packages_dir=settings["packages_dir"],
    )
