"""Fake implementation of Shell for testing.

This fake enables testing lifecycle scripts without spawning a shell.
"""

from pathlib import Path

from clockwork.core.shell import Shell
from clockwork.errors import ExecutionError


class FakeShell(Shell):
    """In-memory fake implementation of script execution.

    Constructor Injection:
    - All state is provided via constructor parameters
    - Calls are tracked for assertions via read-only properties

    Examples:
        # Scripts succeed by default
        >>> shell = FakeShell()
        >>> shell.run_script("make", Path("/pkg"))
        0

        # Simulate a failing script
        >>> shell = FakeShell(exit_codes={"make": 2})
        >>> shell.run_script("make", Path("/pkg"))
        2
    """

    def __init__(
        self,
        *,
        exit_codes: dict[str, int] | None = None,
        unstartable: set[str] | None = None,
    ) -> None:
        """Initialize fake with predetermined script results.

        Args:
            exit_codes: Mapping of command to exit code (others exit 0)
            unstartable: Commands that raise ExecutionError as if the shell
                could not be started
        """
        self._exit_codes = exit_codes or {}
        self._unstartable = unstartable or set()
        self._script_calls: list[tuple[str, Path]] = []

    def run_script(self, command: str, cwd: Path) -> int:
        """Track the call and return the configured exit code."""
        self._script_calls.append((command, cwd))
        if command in self._unstartable:
            raise ExecutionError(f"Failed to start script '{command}': not found")
        return self._exit_codes.get(command, 0)

    @property
    def script_calls(self) -> list[tuple[str, Path]]:
        """Get the list of run_script() calls for assertions.

        Returns a shallow copy to prevent external mutation.
        """
        return list(self._script_calls)
