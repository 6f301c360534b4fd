"""Shell operations for running package lifecycle scripts."""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from clockwork.errors import ExecutionError

logger = logging.getLogger(__name__)


class Shell(ABC):
    """Abstract interface for running commands through the platform shell."""

    @abstractmethod
    def run_script(self, command: str, cwd: Path) -> int:
        """Run a command string through the platform shell.

        Standard streams are inherited so script output reaches the user
        directly.

        Args:
            command: Shell command line (e.g. "python setup.py")
            cwd: Working directory to run in

        Returns:
            Exit code of the command

        Raises:
            ExecutionError: If the shell itself cannot be started
        """
        ...


class RealShell(Shell):
    """Production implementation using /bin/sh (POSIX) or cmd.exe (Windows)."""

    def run_script(self, command: str, cwd: Path) -> int:
        logger.debug("Running script %r in %s", command, cwd)
        try:
            result = subprocess.run(command, shell=True, cwd=cwd, check=False)
        except OSError as e:
            raise ExecutionError(f"Failed to start script '{command}': {e}") from e
        return result.returncode
