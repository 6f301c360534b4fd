"""Self-update of the clockwork binary from GitHub releases.

The update is a small transaction:
1. Stage the downloaded asset in $CLOCKWORK_HOME/.downloads
2. Rename the active binary to a backup
3. Rename the staged file to the active binary
4. On any failure, reverse the completed steps
"""

import logging
import os
import stat
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from clockwork.errors import ExecutionError, NetworkError, NotFoundError, ParseError

if TYPE_CHECKING:
    from clockwork.core.context import ClockworkContext

logger = logging.getLogger(__name__)

RELEASES_API_URL = "https://api.github.com/repos/Turtlepaw/clockwork/releases/latest"
USER_AGENT = "clockwork-cli"
STAGING_DIR_NAME = ".downloads"

# Substring identifying the release asset built for each platform
_ASSET_MARKERS: dict[str, str] = {
    "win32": "clockwork-win",
    "linux": "clockwork-linux",
    "darwin": "clockwork-macos",
}


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    download_url: str


@dataclass(frozen=True)
class Release:
    version: str
    assets: list[ReleaseAsset]


class ReleaseSource(ABC):
    """Abstract access to published clockwork releases."""

    @abstractmethod
    def latest_release(self) -> Release:
        """Fetch metadata of the latest release.

        Raises:
            NetworkError: If the release metadata cannot be fetched
            ParseError: If the response is not a release document
        """
        ...

    @abstractmethod
    def download(self, url: str, dest: Path) -> None:
        """Download a release asset to dest.

        Raises:
            NetworkError: If the download fails (dest is removed)
        """
        ...


def parse_release(data: Any) -> Release:
    """Build a Release from a GitHub release API payload."""
    if not isinstance(data, dict) or "tag_name" not in data:
        raise ParseError(RELEASES_API_URL, "response is not a release document")
    assets = [
        ReleaseAsset(name=asset["name"], download_url=asset["browser_download_url"])
        for asset in data.get("assets") or []
        if "name" in asset and "browser_download_url" in asset
    ]
    return Release(version=str(data["tag_name"]), assets=assets)


class GitHubReleaseSource(ReleaseSource):
    """Production implementation using the GitHub REST API over httpx."""

    def __init__(self, api_url: str = RELEASES_API_URL, *, client: httpx.Client | None = None):
        self._api_url = api_url
        self._client = client if client is not None else httpx.Client(
            headers={"User-Agent": USER_AGENT}, follow_redirects=True
        )

    def latest_release(self) -> Release:
        logger.debug("Fetching latest release from %s", self._api_url)
        try:
            response = self._client.get(self._api_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise NetworkError(f"Failed to fetch release info: {e}") from e
        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(self._api_url, str(e)) from e
        return parse_release(payload)

    def download(self, url: str, dest: Path) -> None:
        logger.debug("Downloading %s to %s", url, dest)
        try:
            with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with dest.open("wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
        except httpx.HTTPError as e:
            # Never leave a partial download behind
            dest.unlink(missing_ok=True)
            raise NetworkError(f"Failed to download {url}: {e}") from e


def normalize_version(version: str) -> str:
    return version[1:] if version.startswith("v") else version


def is_newer(latest: str, current: str) -> bool:
    """Check whether the latest release differs from the running version."""
    return normalize_version(latest) != normalize_version(current)


def select_asset(release: Release, platform: str) -> ReleaseAsset:
    """Pick the release asset built for a platform.

    Raises:
        NotFoundError: If the platform is unsupported or has no asset
    """
    marker = _ASSET_MARKERS.get(platform)
    if marker is not None:
        for asset in release.assets:
            if marker in asset.name:
                return asset
    raise NotFoundError(f"No compatible asset found in release {release.version} for {platform}.")


def binary_path(home: Path, platform: str) -> Path:
    """Location of the installed clockwork binary inside CLOCKWORK_HOME."""
    return home / ("clockwork.exe" if platform == "win32" else "clockwork")


def cleanup_staging(staging_dir: Path) -> int:
    """Delete leftover *.tmp downloads, returning how many were removed."""
    if not staging_dir.is_dir():
        return 0
    removed = 0
    for tmp_file in staging_dir.glob("*.tmp"):
        tmp_file.unlink()
        removed += 1
    return removed


def replace_binary(active: Path, staged: Path) -> None:
    """Swap the staged binary into place, rolling back on failure.

    Raises:
        ExecutionError: If the swap fails; the previous binary is restored
    """
    backup = active.with_name(active.name + ".bak")
    moved_to_backup = False
    try:
        if active.exists():
            backup.unlink(missing_ok=True)
            os.replace(active, backup)
            moved_to_backup = True
        os.replace(staged, active)
    except OSError as e:
        if moved_to_backup and not active.exists():
            os.replace(backup, active)
        raise ExecutionError(f"Failed to replace {active}: {e}") from e

    if moved_to_backup:
        try:
            backup.unlink()
        except OSError as e:
            # A running binary cannot be deleted on Windows
            logger.debug("Leaving backup %s in place: %s", backup, e)


def self_update(ctx: "ClockworkContext", current_version: str) -> str | None:
    """Check for a newer release and install it after confirmation.

    Args:
        ctx: Clockwork context
        current_version: Version of the running binary

    Returns:
        The version installed, or None if nothing was installed
    """
    ctx.progress.begin("Checking for updates...")
    try:
        release = ctx.releases.latest_release()
    except (NetworkError, ParseError):
        ctx.progress.end(success=False, message="Failed to check for updates.")
        raise

    if not is_newer(release.version, current_version):
        ctx.progress.end(success=True, message="No updates available.")
        return None
    ctx.progress.end(success=True, message=f"Version {release.version} is available.")

    with ctx.progress.paused():
        accepted = ctx.prompter.confirm(
            f"A newer version ({release.version}) is available. Download the latest release?",
            default=False,
        )
    if not accepted:
        return None

    asset = select_asset(release, ctx.platform)
    staging_dir = ctx.config.home / STAGING_DIR_NAME
    staging_dir.mkdir(parents=True, exist_ok=True)
    removed = cleanup_staging(staging_dir)
    if removed:
        logger.debug("Removed %d stale downloads from %s", removed, staging_dir)

    staged = staging_dir / f"{asset.name}.tmp"
    ctx.progress.begin(f"Downloading {asset.name}...")
    try:
        ctx.releases.download(asset.download_url, staged)
        if ctx.platform != "win32":
            staged.chmod(staged.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        replace_binary(binary_path(ctx.config.home, ctx.platform), staged)
    except (NetworkError, ExecutionError):
        ctx.progress.end(success=False)
        raise
    ctx.progress.end(success=True, message=f"Updated clockwork to {release.version}.")
    return release.version
