"""Fake Git operations for testing.

FakeGit is an in-memory stand-in for remote repositories. Clones create real
directories (the lifecycle manager works on the filesystem), populated with
the files configured for the remote.
"""

from pathlib import Path

from clockwork.core.git.abc import Git
from clockwork.core.versions import FALLBACK_BRANCH, sort_tags
from clockwork.errors import ExecutionError


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty dicts).
    """

    def __init__(
        self,
        *,
        remote_tags: dict[str, list[str]] | None = None,
        default_branches: dict[str, str] | None = None,
        remote_files: dict[str, dict[str, str]] | None = None,
        remote_urls: dict[Path, str] | None = None,
        unreachable_urls: set[str] | None = None,
        failing_refs: set[str] | None = None,
    ) -> None:
        """Create FakeGit with pre-configured remotes.

        Args:
            remote_tags: Mapping of remote URL -> tag names (any order)
            default_branches: Mapping of remote URL -> default branch (default "main")
            remote_files: Mapping of remote URL -> {relative path: content} written on clone
            remote_urls: Mapping of existing working copy path -> origin URL
            unreachable_urls: Remotes for which listing, cloning and fetching fail
            failing_refs: Refs for which checkout and pull fail
        """
        self._remote_tags = remote_tags or {}
        self._default_branches = default_branches or {}
        self._remote_files = remote_files or {}
        self._remote_urls = dict(remote_urls or {})
        self._unreachable_urls = unreachable_urls or set()
        self._failing_refs = failing_refs or set()
        self._cloned: list[tuple[str, Path, str]] = []
        self._checkouts: list[tuple[Path, str]] = []
        self._pulls: list[tuple[Path, str]] = []
        self._fetches: list[Path] = []

    @property
    def cloned(self) -> list[tuple[str, Path, str]]:
        """Read-only access to clone() calls as (url, dest, branch) tuples."""
        return self._cloned

    @property
    def checkouts(self) -> list[tuple[Path, str]]:
        """Read-only access to checkout() calls as (repo_path, ref) tuples."""
        return self._checkouts

    @property
    def pulls(self) -> list[tuple[Path, str]]:
        """Read-only access to pull() calls as (repo_path, ref) tuples."""
        return self._pulls

    @property
    def fetches(self) -> list[Path]:
        """Read-only access to fetch_all() calls."""
        return self._fetches

    def _ensure_reachable(self, url: str) -> None:
        if url in self._unreachable_urls:
            raise ExecutionError(f"Failed to reach {url}\nstderr: fatal: repository not found")

    def _known_refs(self, url: str) -> set[str]:
        refs = set(self._remote_tags.get(url, []))
        refs.add(self.default_branch(url))
        return refs

    def list_tags(self, url: str) -> list[str] | None:
        self._ensure_reachable(url)
        tags = self._remote_tags.get(url)
        if not tags:
            return None
        return sort_tags(tags)

    def default_branch(self, url: str) -> str:
        if url in self._unreachable_urls:
            return FALLBACK_BRANCH
        return self._default_branches.get(url, FALLBACK_BRANCH)

    def clone(self, url: str, dest: Path, *, branch: str) -> None:
        self._ensure_reachable(url)
        if branch not in self._known_refs(url):
            raise ExecutionError(
                f"Failed to clone {url} at {branch}\n"
                f"stderr: fatal: Remote branch {branch} not found in upstream origin"
            )
        if dest.exists():
            raise ExecutionError(f"fatal: destination path '{dest}' already exists")

        dest.mkdir(parents=True)
        for relative, content in self._remote_files.get(url, {}).items():
            file_path = dest / relative
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content, encoding="utf-8")

        self._remote_urls[dest] = url
        self._cloned.append((url, dest, branch))

    def get_remote_url(self, repo_path: Path) -> str | None:
        return self._remote_urls.get(repo_path)

    def fetch_all(self, repo_path: Path) -> None:
        url = self._remote_urls.get(repo_path)
        if url is not None:
            self._ensure_reachable(url)
        self._fetches.append(repo_path)

    def checkout(self, repo_path: Path, ref: str) -> None:
        url = self._remote_urls.get(repo_path)
        if ref in self._failing_refs or (url is not None and ref not in self._known_refs(url)):
            raise ExecutionError(f"Failed to checkout {ref}\nstderr: error: pathspec '{ref}'")
        self._checkouts.append((repo_path, ref))

    def pull(self, repo_path: Path, ref: str) -> None:
        if ref in self._failing_refs:
            raise ExecutionError(f"Failed to pull {ref}")
        self._pulls.append((repo_path, ref))
