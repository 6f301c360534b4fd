"""Subprocess execution with rich error context.

Every external program clockwork runs (git, lifecycle scripts) goes through
this module so failures surface as ExecutionError with the operation, the
command line, the exit code and the captured output.
"""

import glob
import logging
import os
import shutil
import subprocess
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from clockwork.errors import ExecutionError

logger = logging.getLogger(__name__)

# Executable names tried on PATH, per tool
_PATH_NAMES: dict[str, dict[str, list[str]]] = {
    "git": {"win32": ["git.exe", "git"], "posix": ["git"]},
    "python": {"win32": ["python.exe", "python3.exe"], "posix": ["python3", "python"]},
}

_INSTALL_HINTS: dict[str, str] = {
    "git": "Install Git (https://git-scm.com/downloads) and try again.",
    "python": "Install Python 3 (https://www.python.org/downloads/) and try again.",
}


def _common_locations(tool: str, env: Mapping[str, str], platform: str) -> list[str]:
    """Return well-known install locations for a tool, glob patterns allowed."""
    if platform == "win32":
        program_files = env.get("ProgramFiles", "")
        program_files_x86 = env.get("ProgramFiles(x86)", "")
        local_app_data = env.get("LOCALAPPDATA", "")
        if tool == "git":
            return [
                str(Path(program_files) / "Git" / "cmd" / "git.exe"),
                str(Path(program_files_x86) / "Git" / "cmd" / "git.exe"),
                str(Path(local_app_data) / "Programs" / "Git" / "cmd" / "git.exe"),
                # GitHub Desktop ships its own portable git
                str(Path(local_app_data) / "GitHub" / "PortableGit_*" / "cmd" / "git.exe"),
            ]
        if tool == "python":
            return [
                str(Path(local_app_data) / "Programs" / "Python" / "Python*" / "python.exe"),
                str(Path(program_files) / "Python*" / "python.exe"),
                str(Path(program_files_x86) / "Python*" / "python.exe"),
            ]
        return []

    if tool == "git":
        return ["/usr/bin/git", "/usr/local/bin/git", "/opt/homebrew/bin/git"]
    if tool == "python":
        return ["/usr/bin/python3", "/usr/local/bin/python3", "/usr/bin/python"]
    return []


def find_executable(
    tool: str,
    *,
    env: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> str:
    """Locate a required tool on PATH or in its common install locations.

    End users frequently run clockwork from environments where PATH is not
    fully configured (notably Windows with Git for Windows or GitHub Desktop),
    so PATH is only the first place looked at.

    Args:
        tool: Logical tool name ("git" or "python")
        env: Environment to read PATH and install roots from (default: os.environ)
        platform: Platform identifier as in sys.platform (default: current)

    Returns:
        Absolute path of the executable

    Raises:
        ExecutionError: If the tool cannot be found anywhere
    """
    if env is None:
        env = os.environ
    if platform is None:
        platform = sys.platform

    family = "win32" if platform == "win32" else "posix"
    search_path = env.get("PATH") or env.get("Path")
    for name in _PATH_NAMES.get(tool, {}).get(family, [tool]):
        found = shutil.which(name, path=search_path)
        if found is not None:
            return found

    for candidate in _common_locations(tool, env, platform):
        if "*" in candidate:
            matches = sorted(glob.glob(candidate), reverse=True)
            if matches:
                logger.debug("Found %s via pattern %s: %s", tool, candidate, matches[0])
                return matches[0]
        elif Path(candidate).is_file():
            logger.debug("Found %s in common location %s", tool, candidate)
            return candidate

    raise ExecutionError(
        f"{tool} is not installed or not found in common locations.",
        hint=_INSTALL_HINTS.get(tool),
    )


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Execute a subprocess and capture its output, enriching failures.

    Blocks until the child exits; there is no timeout.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description of the operation
            (e.g. "clone https://example.com/foo.git")
        cwd: Working directory for command execution
        env: Environment for the child process (default: inherited)

    Returns:
        CompletedProcess with text stdout/stderr

    Raises:
        ExecutionError: If the binary is missing or the command exits non-zero
    """
    cmd_str = " ".join(str(arg) for arg in cmd)
    logger.debug("Running %s (cwd=%s)", cmd_str, cwd)
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"

        stdout_stripped = (e.stdout or "").strip()
        if stdout_stripped:
            error_msg += f"\nstdout: {stdout_stripped}"

        stderr_stripped = (e.stderr or "").strip()
        if stderr_stripped:
            error_msg += f"\nstderr: {stderr_stripped}"

        raise ExecutionError(error_msg, returncode=e.returncode, stderr=stderr_stripped) from e
    except FileNotFoundError as e:
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise ExecutionError(error_msg) from e
