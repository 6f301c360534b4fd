"""Application context with dependency injection."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import click

from clockwork.cli.constants import ExitCode
from clockwork.cli.output import user_output
from clockwork.core.config_store import (
    ClockworkConfig,
    ConfigStore,
    FilesystemConfigStore,
    load_config,
    resolve_home,
)
from clockwork.core.git.abc import Git
from clockwork.core.git.real import RealGit
from clockwork.core.manifest import ManifestStore
from clockwork.core.progress import Progress, RichProgress, SilentProgress
from clockwork.core.prompts import InteractivePrompter, NonInteractivePrompter, Prompter
from clockwork.core.registry.abc import Registry
from clockwork.core.registry.real import HttpRegistry
from clockwork.core.shell import RealShell, Shell
from clockwork.core.updater import GitHubReleaseSource, ReleaseSource
from clockwork.core.user_feedback import InteractiveFeedback, QuietFeedback, UserFeedback
from clockwork.errors import ClockworkError


@dataclass(frozen=True)
class ClockworkContext:
    """Immutable context holding all dependencies for clockwork operations.

    Created at CLI entry point and threaded through the application. Process
    state (working directory, platform, interactivity) is captured here once
    instead of being looked up ambiently.
    """

    git: Git
    registry: Registry
    shell: Shell
    prompter: Prompter
    progress: Progress
    feedback: UserFeedback
    releases: ReleaseSource
    config_store: ConfigStore
    config: ClockworkConfig
    cwd: Path  # Project directory at CLI invocation
    platform: str

    @property
    def manifest_store(self) -> ManifestStore:
        return ManifestStore(self.cwd)

    @property
    def packages_dir(self) -> Path:
        return self.cwd / self.config.packages_dir

    @staticmethod
    def for_test(
        git: Git | None = None,
        registry: Registry | None = None,
        shell: Shell | None = None,
        prompter: Prompter | None = None,
        progress: Progress | None = None,
        feedback: UserFeedback | None = None,
        releases: ReleaseSource | None = None,
        config_store: ConfigStore | None = None,
        config: ClockworkConfig | None = None,
        cwd: Path | None = None,
        platform: str = "linux",
    ) -> "ClockworkContext":
        """Create test context with optional pre-configured integration classes.

        Any unspecified dependency is replaced with its in-memory fake.

        Example:
            >>> git = FakeGit(remote_tags={"https://example.com/foo.git": ["1.0.0"]})
            >>> ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)
        """
        from tests.fakes.progress import FakeProgress
        from tests.fakes.prompter import FakePrompter
        from tests.fakes.releases import FakeReleaseSource
        from tests.fakes.shell import FakeShell
        from tests.fakes.user_feedback import FakeUserFeedback

        from clockwork.core.config_store import InMemoryConfigStore
        from clockwork.core.git.fake import FakeGit
        from clockwork.core.registry.fake import FakeRegistry

        if cwd is None:
            cwd = Path("/test/default/cwd")

        return ClockworkContext(
            git=git if git is not None else FakeGit(),
            registry=registry if registry is not None else FakeRegistry(),
            shell=shell if shell is not None else FakeShell(),
            prompter=prompter if prompter is not None else FakePrompter(),
            progress=progress if progress is not None else FakeProgress(),
            feedback=feedback if feedback is not None else FakeUserFeedback(),
            releases=releases if releases is not None else FakeReleaseSource(),
            config_store=config_store if config_store is not None else InMemoryConfigStore(),
            config=config if config is not None else ClockworkConfig(home=cwd / ".clockwork-home"),
            cwd=cwd,
            platform=platform,
        )


def safe_cwd() -> tuple[Path | None, str | None]:
    """Get current working directory, detecting if it no longer exists.

    Returns:
        tuple[Path | None, str | None]: (path, error_message)
        - If successful: (Path, None)
        - If directory deleted: (None, error_message)
    """
    try:
        cwd_path = Path.cwd()
        return (cwd_path, None)
    except (FileNotFoundError, OSError):
        return (
            None,
            "Current working directory no longer exists",
        )


def create_context(*, non_interactive: bool, quiet: bool = False) -> ClockworkContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        non_interactive: Answer prompts with their defaults and hide the spinner
        quiet: Suppress informational output (warnings and errors still shown)

    Returns:
        ClockworkContext with real implementations
    """
    # 1. Capture cwd (no deps)
    cwd_result, error_msg = safe_cwd()
    if cwd_result is None:
        assert error_msg is not None
        user_output(click.style("Error: ", fg="red") + error_msg)
        user_output("Please change to a valid directory and try again.")
        raise SystemExit(ExitCode.FAILURE)

    # 2. Installation root is mandatory
    env = dict(os.environ)
    try:
        home = resolve_home(env)
    except ClockworkError as e:
        user_output(click.style("Error: ", fg="red") + e.message)
        if e.hint:
            user_output(e.hint)
        raise SystemExit(ExitCode.ENVIRONMENT_NOT_CONFIGURED) from None

    # 3. Load config (defaults < config.toml < environment)
    config_store = FilesystemConfigStore(home)
    try:
        config = load_config(home, config_store, env)
    except ClockworkError as e:
        user_output(click.style("Error: ", fg="red") + e.message)
        raise SystemExit(ExitCode.ENVIRONMENT_NOT_CONFIGURED) from None

    # 4. Choose prompt/progress/feedback implementations based on mode
    prompter: Prompter
    progress: Progress
    if non_interactive:
        prompter = NonInteractivePrompter()
        progress = SilentProgress()
    else:
        prompter = InteractivePrompter()
        progress = RichProgress()

    feedback: UserFeedback = QuietFeedback() if quiet else InteractiveFeedback()

    return ClockworkContext(
        git=RealGit(env=env),
        registry=HttpRegistry(config.registry_url),
        shell=RealShell(),
        prompter=prompter,
        progress=progress,
        feedback=feedback,
        releases=GitHubReleaseSource(),
        config_store=config_store,
        config=config,
        cwd=cwd_result,
        platform=sys.platform,
    )
