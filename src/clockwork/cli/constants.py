"""Shared constants for clockwork CLI commands."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes, one per failure class, for scripting callers."""

    SUCCESS = 0
    FAILURE = 1  # generic failure or prompt declined
    MANIFEST_NOT_FOUND = 4  # no clockwork.yml in the project; run `clockwork init`
    INSTALL_FAILED = 5  # clone/checkout of a package failed
    REGISTRY_LOOKUP_FAILED = 6  # registry unreachable, malformed, or name unknown
    ENVIRONMENT_NOT_CONFIGURED = 7  # CLOCKWORK_HOME missing or config unreadable
    SELF_UPDATE_FAILED = 8  # release check, download or binary swap failed
