"""Typed errors raised by clockwork core operations.

Core code raises these; CLI commands translate them into a styled message,
an optional remediation hint and an exit code.
"""

from pathlib import Path


class ClockworkError(Exception):
    """Base class for all expected, user-facing failures.

    Attributes:
        message: Short description of what went wrong
        hint: Optional remediation shown below the message
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class NotFoundError(ClockworkError):
    """A manifest, registry entry or package does not exist."""


class ParseError(ClockworkError):
    """A manifest or registry document is malformed."""

    def __init__(self, source: str | Path, detail: str, *, hint: str | None = None) -> None:
        super().__init__(f"Failed to parse {source}: {detail}", hint=hint)
        self.source = str(source)
        self.detail = detail


class ExecutionError(ClockworkError):
    """An external program is missing or exited non-zero."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stderr: str = "",
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.returncode = returncode
        self.stderr = stderr


class NetworkError(ClockworkError):
    """A remote document could not be fetched."""


class ValidationError(ClockworkError):
    """A dependency is incompatible with the project (reported as a warning)."""


class AbortedError(ClockworkError):
    """The user declined a prompt that was required to continue."""
