"""Version resolution for git-hosted packages.

Versions are git tag names (e.g. "1.2.0", "v2.0.1") or branch names. The
"latest" sentinel stands for the newest tag and is resolved at install time.
"""

from collections.abc import Iterable
from dataclasses import dataclass

LATEST = "latest"
FALLBACK_BRANCH = "main"


@dataclass(frozen=True)
class UpdatePlan:
    """Outcome of comparing an installed version against the remote tags.

    Attributes:
        target: Tag to move to, or None to stay on the current version
        major_available: Newest tag that is a major upgrade and was not applied
    """

    target: str | None
    major_available: str | None


def sort_tags(tags: Iterable[str]) -> list[str]:
    """Sort tag names newest-first.

    Ordering is plain descending string comparison, so "v9" sorts before
    "v10" and "1.9.0" before "1.10.0".
    """
    return sorted(set(tags), reverse=True)


def resolve_version(requested: str, latest_tag: str) -> str:
    """Replace the "latest" sentinel with the newest tag."""
    if requested == LATEST:
        return latest_tag
    return requested


def major_component(version: str) -> str:
    return version.split(".")[0]


def is_major_upgrade(current: str, candidate: str) -> bool:
    """Check whether moving from current to candidate changes the major component.

    Only the first dot-separated component is compared; any difference in the
    remaining components is a minor or patch upgrade.
    """
    return major_component(current) != major_component(candidate)


def pick_update(current: str, tags: list[str], *, allow_major: bool) -> UpdatePlan:
    """Choose which tag an installed package should move to.

    Only tags that sort after the current version (in sort_tags order) are
    candidates, so a package is never downgraded.

    Args:
        current: Version currently recorded in the manifest
        tags: Remote tags, newest first (as returned by sort_tags)
        allow_major: Permit moving to a different major version

    Returns:
        UpdatePlan with the chosen target (if any) and the newest major
        upgrade left unapplied (if any)
    """
    newer = [tag for tag in tags if tag > current]
    if not newer:
        return UpdatePlan(target=None, major_available=None)

    if allow_major:
        return UpdatePlan(target=newer[0], major_available=None)

    target = next((tag for tag in newer if not is_major_upgrade(current, tag)), None)
    major_available = next((tag for tag in newer if is_major_upgrade(current, tag)), None)
    return UpdatePlan(target=target, major_available=major_available)
