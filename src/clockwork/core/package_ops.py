"""Package lifecycle: add, sync (update/upgrade), uninstall.

Each dependency is a git repository cloned into <project>/packages/<name>
and recorded in the manifest as {url, version}. A package moves through
three states:

    absent --add/install--> installed --update/upgrade--> installed
    installed --uninstall--> absent

All operations run serially in a single process; nothing guards against
two clockwork processes working on the same project.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from clockwork.core.context import ClockworkContext
from clockwork.core.manifest import (
    MANIFEST_NAME,
    Dependency,
    Manifest,
    ManifestStore,
)
from clockwork.core.versions import LATEST, is_major_upgrade, pick_update, resolve_version
from clockwork.errors import (
    AbortedError,
    ClockworkError,
    ExecutionError,
    NotFoundError,
    ParseError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GIT_URL_PREFIXES = ("https://", "http://", "ssh://", "git@", "file://")

POSTINSTALL = "postinstall"
POSTUPDATE = "postupdate"


@dataclass(frozen=True)
class PackageReference:
    """A package as typed on the command line.

    Attributes:
        name: Registry short name, or repository name for git URLs
        url: Git URL, or None when the name must be looked up in the registry
        version: Requested tag or branch ("latest" when not given)
    """

    name: str
    url: str | None
    version: str


@dataclass(frozen=True)
class AddResult:
    """Outcome of adding one package."""

    name: str
    dependency: Dependency
    path: Path


@dataclass
class SyncReport:
    """What happened to each dependency during a sync."""

    installed: list[str] = field(default_factory=list)
    updated: list[tuple[str, str, str]] = field(default_factory=list)
    upgradable: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)


def is_git_url(ref: str) -> bool:
    return ref.startswith(GIT_URL_PREFIXES)


def repo_name_from_url(url: str) -> str:
    """Derive the package name from a git URL.

    "https://github.com/owner/xml-preprocessor.git" -> "xml-preprocessor"
    "git@github.com:owner/repo.git" -> "repo"
    """
    last_segment = url.rstrip("/").replace(":", "/").rsplit("/", 1)[-1]
    if last_segment.endswith(".git"):
        last_segment = last_segment[: -len(".git")]
    return last_segment


def parse_package_reference(ref: str) -> PackageReference:
    """Parse "<url>[@version]" or "<name>[@version]".

    For git URLs the version suffix is only recognised after the last path
    segment, so "git@host:owner/repo.git" keeps its user part.
    """
    ref = ref.strip()
    if is_git_url(ref):
        head, sep, tail = ref.rpartition("@")
        if sep and tail and "/" not in tail and ":" not in tail and is_git_url(head):
            return PackageReference(name=repo_name_from_url(head), url=head, version=tail)
        return PackageReference(name=repo_name_from_url(ref), url=ref, version=LATEST)

    name, _, version = ref.partition("@")
    return PackageReference(name=name, url=None, version=version or LATEST)


def package_path(ctx: ClockworkContext, name: str) -> Path:
    return ctx.packages_dir / name


def install_working_copy(ctx: ClockworkContext, url: str, name: str, version: str) -> Path:
    """Clone a package at a version, replacing any existing working copy.

    An existing directory is removed completely before cloning; there is no
    merge with a previous checkout.

    Returns:
        Path of the fresh working copy
    """
    path = package_path(ctx, name)
    if path.exists():
        logger.debug("Removing existing working copy %s", path)
        shutil.rmtree(path)

    ctx.packages_dir.mkdir(parents=True, exist_ok=True)
    ctx.progress.update(f"Cloning {url}...")
    ctx.git.clone(url, path, branch=version)
    return path


def resolve_initial_version(ctx: ClockworkContext, url: str, pinned: str | None) -> str:
    """Pick the version for a first install of a package.

    A version pinned by the registry wins. Otherwise the newest tag is used;
    when the remote has no tags the user is asked whether to install the
    default branch instead.

    Raises:
        ExecutionError: If the remote tags cannot be listed (fatal here)
        AbortedError: If the user declines installing the default branch
    """
    if pinned is not None:
        return pinned

    tags = ctx.git.list_tags(url)
    if tags:
        return tags[0]

    with ctx.progress.paused():
        use_default_branch = ctx.prompter.confirm(
            "No tags for this package. Install default branch instead?", default=False
        )
    if not use_default_branch:
        raise AbortedError("Installation aborted. No tags available.")
    return ctx.git.default_branch(url)


def validate_compatibility(root: Manifest, package: Manifest, name: str) -> None:
    """Check that a package targets the project's watch face format version.

    Raises:
        ValidationError: If the format versions differ
    """
    if package.watch_face_format_version != root.watch_face_format_version:
        raise ValidationError(
            f"Package {name} isn't compatible with this watch face format version "
            f"(package: {package.watch_face_format_version or 'unset'}, "
            f"project: {root.watch_face_format_version or 'unset'})."
        )


def read_package_manifest(
    ctx: ClockworkContext, root: Manifest, name: str, path: Path
) -> Manifest | None:
    """Read a package's own manifest and warn about incompatibilities.

    Never blocks installation: problems are reported as warnings.
    """
    store = ManifestStore(path)
    if not store.exists():
        ctx.feedback.warning(
            f"Package {name} has no {MANIFEST_NAME}. Are you sure it's compatible with Clockwork?"
        )
        return None

    try:
        package_manifest = store.read()
    except ParseError as e:
        ctx.feedback.warning(f"Failed to read {name}'s package file: {e.message}")
        return None

    try:
        validate_compatibility(root, package_manifest, name)
    except ValidationError as e:
        ctx.feedback.warning(e.message)

    return package_manifest


def run_lifecycle_script(
    ctx: ClockworkContext, manifest: Manifest, event: str, path: Path, name: str
) -> None:
    """Run a package's script for a lifecycle event, if it declares one.

    Script failures are reported but never abort the surrounding operation.
    """
    command = manifest.scripts.get(event)
    if not command:
        return

    ctx.progress.update(f"Running {event} script for {name}...")
    with ctx.progress.paused():
        try:
            exit_code = ctx.shell.run_script(command, path)
        except ExecutionError as e:
            logger.debug("%s script for %s could not start: %s", event, name, e)
            ctx.feedback.warning(f"{event} script for {name} failed: {e.message}")
            return

    if exit_code != 0:
        logger.debug("%s script for %s exited with %d", event, name, exit_code)
        ctx.feedback.warning(f"{event} script for {name} exited with code {exit_code}.")


def add_package(ctx: ClockworkContext, ref: str) -> AddResult:
    """Install a package and record it in the manifest.

    Args:
        ctx: Clockwork context
        ref: Git URL or registry short name, optionally suffixed with @version

    Returns:
        AddResult with the package name, recorded dependency and working copy

    Raises:
        NotFoundError: If the manifest is missing or the name is not in the registry
        NetworkError: If the registry cannot be fetched
        ExecutionError: If listing tags or cloning fails
        AbortedError: If the user declines installing the default branch
    """
    reference = parse_package_reference(ref)
    store = ctx.manifest_store
    root = store.read()

    url = reference.url
    pinned: str | None = None
    if url is None:
        ctx.progress.update(f"Looking up {reference.name} in the registry...")
        entry = ctx.registry.lookup(reference.name)
        url = entry.url
        pinned = entry.version

    if reference.version == LATEST:
        latest = resolve_initial_version(ctx, url, pinned)
    else:
        latest = reference.version
    version = resolve_version(reference.version, latest)

    name = repo_name_from_url(url)
    path = install_working_copy(ctx, url, name, version)

    ctx.progress.update(f"Adding package to {MANIFEST_NAME}...")
    dependency = Dependency(url=url, version=version)
    root.dependencies[name] = dependency
    store.write(root)

    package_manifest = read_package_manifest(ctx, root, name, path)
    if package_manifest is not None:
        run_lifecycle_script(ctx, package_manifest, POSTINSTALL, path, name)

    return AddResult(name=name, dependency=dependency, path=path)


def _latest_or_default_branch(ctx: ClockworkContext, url: str) -> str:
    tags = ctx.git.list_tags(url)
    if tags:
        return tags[0]
    return ctx.git.default_branch(url)


def _reinstall(
    ctx: ClockworkContext, root: Manifest, name: str, dependency: Dependency, report: SyncReport
) -> None:
    version = dependency.version
    if version == LATEST:
        version = resolve_version(LATEST, _latest_or_default_branch(ctx, dependency.url))

    path = install_working_copy(ctx, dependency.url, name, version)
    root.dependencies[name] = Dependency(url=dependency.url, version=version)
    report.installed.append(name)

    package_manifest = read_package_manifest(ctx, root, name, path)
    if package_manifest is not None:
        run_lifecycle_script(ctx, package_manifest, POSTINSTALL, path, name)


def _sync_dependency(
    ctx: ClockworkContext,
    root: Manifest,
    name: str,
    dependency: Dependency,
    report: SyncReport,
    *,
    upgrade: bool,
) -> None:
    path = package_path(ctx, name)

    if not path.exists():
        _reinstall(ctx, root, name, dependency, report)
        return

    if ctx.git.get_remote_url(path) != dependency.url:
        ctx.progress.update(f"URL changed for {name}, reinstalling...")
        _reinstall(ctx, root, name, dependency, report)
        return

    try:
        ctx.git.fetch_all(path)
    except ExecutionError as e:
        logger.debug("Fetch of %s failed: %s", name, e)
        ctx.feedback.warning(f"Could not fetch {name}, using local state.")

    tags: list[str] | None
    try:
        tags = ctx.git.list_tags(dependency.url)
    except ExecutionError as e:
        logger.debug("Listing tags of %s failed: %s", dependency.url, e)
        ctx.feedback.warning(f"Could not list versions of {name}, keeping current version.")
        if dependency.version == LATEST:
            # Resolved on the next sync that can reach the remote
            _finish_sync(ctx, root, name, path)
            return
        tags = None
    default_branch = ctx.git.default_branch(dependency.url)

    version = dependency.version
    if version == LATEST:
        version = tags[0] if tags else default_branch
        root.dependencies[name] = Dependency(url=dependency.url, version=version)

    try:
        ctx.git.checkout(path, version)
        ctx.git.pull(path, version)
    except ExecutionError as e:
        logger.debug("Checkout of %s@%s failed: %s", name, version, e)
        ctx.feedback.warning(
            f"Could not checkout version {version} for {name}, using current version."
        )

    if tags and version != default_branch:
        plan = pick_update(version, tags, allow_major=upgrade)
        if plan.target is not None:
            try:
                ctx.git.checkout(path, plan.target)
            except ExecutionError as e:
                logger.debug("Checkout of %s@%s failed: %s", name, plan.target, e)
                ctx.feedback.warning(f"Could not upgrade {name} to {plan.target}.")
                if is_major_upgrade(version, plan.target):
                    report.upgradable.append(name)
            else:
                root.dependencies[name] = Dependency(url=dependency.url, version=plan.target)
                report.updated.append((name, version, plan.target))
                ctx.progress.update(f"Updated {name} to {plan.target}")
        if plan.major_available is not None:
            report.upgradable.append(name)

    _finish_sync(ctx, root, name, path)


def _finish_sync(ctx: ClockworkContext, root: Manifest, name: str, path: Path) -> None:
    package_manifest = read_package_manifest(ctx, root, name, path)
    if package_manifest is not None:
        run_lifecycle_script(ctx, package_manifest, POSTUPDATE, path, name)


def sync_dependencies(ctx: ClockworkContext, *, upgrade: bool) -> SyncReport:
    """Bring every dependency in the manifest up to date.

    Missing working copies are installed, working copies whose origin URL
    changed are reinstalled, and installed packages move to the newest
    permitted tag. Major upgrades are applied only when upgrade is True;
    otherwise they are reported in SyncReport.upgradable.

    A failing dependency is reported and skipped; the others still sync.
    The manifest is written once, after all dependencies were processed.

    Raises:
        NotFoundError: If the manifest is missing
        ParseError: If the manifest is malformed
    """
    store = ctx.manifest_store
    root = store.read()
    report = SyncReport()

    for name, dependency in list(root.dependencies.items()):
        ctx.progress.update(f"Updating {name}...")
        try:
            _sync_dependency(ctx, root, name, dependency, report, upgrade=upgrade)
        except ClockworkError as e:
            logger.debug("Sync of %s failed: %s", name, e)
            ctx.feedback.warning(f"Failed to update {name}: {e.message}")
            report.failed.append((name, e.message))

    store.write(root)
    return report


def uninstall_package(ctx: ClockworkContext, name: str) -> None:
    """Remove a package's working copy and its manifest entry.

    Raises:
        NotFoundError: If the manifest is missing or has no such dependency
    """
    store = ctx.manifest_store
    root = store.read()
    if name not in root.dependencies:
        raise NotFoundError(
            f"Package {name} is not installed.",
            hint="Run 'clockwork packages' to list installed packages.",
        )

    path = package_path(ctx, name)
    if path.exists():
        shutil.rmtree(path)

    del root.dependencies[name]
    store.write(root)


def list_dependencies(ctx: ClockworkContext) -> list[tuple[str, Dependency]]:
    """Dependencies recorded in the manifest, in manifest order."""
    return list(ctx.manifest_store.read().dependencies.items())


def init_project(
    ctx: ClockworkContext, *, name: str, format_version: str | None, force: bool
) -> Path:
    """Create a new manifest with no dependencies.

    Raises:
        ClockworkError: If a manifest already exists and force is False
    """
    store = ctx.manifest_store
    existing = store.path()
    if existing is not None:
        if not force:
            raise ClockworkError(
                f"{existing.name} already exists.", hint="Use --force to overwrite it."
            )
        existing.unlink()

    manifest = Manifest(
        name=name,
        version="1.0.0",
        description="",
        watch_face_format_version=format_version,
    )
    return store.create(manifest)
