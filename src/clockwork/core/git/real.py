"""Production Git implementation using subprocess.

This module provides the real Git implementation that executes actual git
commands via subprocess.
"""

import logging
import subprocess
from collections.abc import Mapping
from pathlib import Path

from clockwork.core.git.abc import Git
from clockwork.core.subprocess import find_executable, run_subprocess_with_context
from clockwork.core.versions import FALLBACK_BRANCH, sort_tags
from clockwork.errors import ExecutionError

logger = logging.getLogger(__name__)

_TAG_PREFIX = "refs/tags/"
_HEAD_PREFIX = "ref: refs/heads/"


class RealGit(Git):
    """Production implementation using subprocess.

    The git binary is located lazily on first use, so commands that never
    touch git (e.g. listing packages) work on machines without it.
    """

    def __init__(self, *, executable: str | None = None, env: Mapping[str, str] | None = None):
        self._executable = executable
        self._env = env

    def _git(self) -> str:
        if self._executable is None:
            self._executable = find_executable("git", env=self._env)
        return self._executable

    def list_tags(self, url: str) -> list[str] | None:
        """List the tags of a remote repository, newest first."""
        result = run_subprocess_with_context(
            [self._git(), "ls-remote", "--tags", "--refs", url],
            operation_context=f"list tags of {url}",
            env=self._env,
        )

        tags: list[str] = []
        for line in result.stdout.splitlines():
            parts = line.strip().split("\t")
            if len(parts) != 2:
                continue
            ref = parts[1]
            if ref.startswith(_TAG_PREFIX):
                tags.append(ref[len(_TAG_PREFIX) :])

        if not tags:
            return None
        return sort_tags(tags)

    def default_branch(self, url: str) -> str:
        """Get the default branch of a remote repository, falling back to main."""
        try:
            result = run_subprocess_with_context(
                [self._git(), "ls-remote", "--symref", url, "HEAD"],
                operation_context=f"resolve default branch of {url}",
                env=self._env,
            )
        except ExecutionError as e:
            logger.debug("Default branch lookup failed, using %s: %s", FALLBACK_BRANCH, e)
            return FALLBACK_BRANCH

        # Parse "ref: refs/heads/main\tHEAD" -> "main"
        for line in result.stdout.splitlines():
            if line.startswith(_HEAD_PREFIX):
                return line[len(_HEAD_PREFIX) :].split("\t")[0].strip()

        return FALLBACK_BRANCH

    def clone(self, url: str, dest: Path, *, branch: str) -> None:
        """Clone a repository at a tag or branch into dest."""
        run_subprocess_with_context(
            [self._git(), "clone", "--branch", branch, url, str(dest)],
            operation_context=f"clone {url} at {branch}",
            env=self._env,
        )

    def get_remote_url(self, repo_path: Path) -> str | None:
        """Get the URL of the 'origin' remote of a working copy."""
        logger.debug("Reading origin URL of %s", repo_path)
        result = subprocess.run(
            [self._git(), "config", "--get", "remote.origin.url"],
            cwd=repo_path,
            env=dict(self._env) if self._env is not None else None,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            logger.debug("No origin URL for %s (exit code %d)", repo_path, result.returncode)
            return None
        return result.stdout.strip() or None

    def fetch_all(self, repo_path: Path) -> None:
        """Fetch all remotes and tags into a working copy."""
        run_subprocess_with_context(
            [self._git(), "fetch", "--all", "--tags"],
            operation_context="fetch remotes and tags",
            cwd=repo_path,
            env=self._env,
        )

    def checkout(self, repo_path: Path, ref: str) -> None:
        """Checkout a tag or branch in a working copy."""
        run_subprocess_with_context(
            [self._git(), "checkout", ref],
            operation_context=f"checkout {ref}",
            cwd=repo_path,
            env=self._env,
        )

    def pull(self, repo_path: Path, ref: str) -> None:
        """Pull ref from 'origin' into a working copy."""
        run_subprocess_with_context(
            [self._git(), "pull", "origin", ref],
            operation_context=f"pull {ref}",
            cwd=repo_path,
            env=self._env,
        )
