"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
package lifecycle testable without network access or a git binary.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation for tests
"""

from abc import ABC, abstractmethod
from pathlib import Path


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    This interface contains ONLY runtime operations - no test setup methods.
    """

    @abstractmethod
    def list_tags(self, url: str) -> list[str] | None:
        """List the tags of a remote repository, newest first.

        Args:
            url: Git remote URL

        Returns:
            Tag names ordered by sort_tags, or None if the remote has no tags

        Raises:
            ExecutionError: If git is missing or the remote cannot be listed
        """
        ...

    @abstractmethod
    def default_branch(self, url: str) -> str:
        """Get the default branch of a remote repository.

        Parsed from the remote's symbolic HEAD. Never raises: any failure
        falls back to "main".
        """
        ...

    @abstractmethod
    def clone(self, url: str, dest: Path, *, branch: str) -> None:
        """Clone a repository at a tag or branch into dest.

        Raises:
            ExecutionError: If the clone fails
        """
        ...

    @abstractmethod
    def get_remote_url(self, repo_path: Path) -> str | None:
        """Get the URL of the 'origin' remote of a working copy, if configured."""
        ...

    @abstractmethod
    def fetch_all(self, repo_path: Path) -> None:
        """Fetch all remotes and tags into a working copy."""
        ...

    @abstractmethod
    def checkout(self, repo_path: Path, ref: str) -> None:
        """Checkout a tag or branch in a working copy."""
        ...

    @abstractmethod
    def pull(self, repo_path: Path, ref: str) -> None:
        """Pull ref from 'origin' into a working copy."""
        ...
