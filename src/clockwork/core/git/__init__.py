"""Git operations subpackage.

This subpackage provides abstractions over git operations with support for
testing via fakes.
"""

from clockwork.core.git.abc import Git
from clockwork.core.git.real import RealGit

__all__ = [
    "Git",
    "RealGit",
]
