"""Tests for the package lifecycle (add, sync, uninstall, init)."""

from pathlib import Path
from typing import Any

import pytest

from clockwork.core.context import ClockworkContext
from clockwork.core.git.fake import FakeGit
from clockwork.core.manifest import MANIFEST_NAME, Dependency
from clockwork.core.package_ops import (
    add_package,
    init_project,
    list_dependencies,
    parse_package_reference,
    repo_name_from_url,
    sync_dependencies,
    uninstall_package,
)
from clockwork.core.registry.fake import FakeRegistry
from clockwork.core.registry.types import RegistryEntry
from clockwork.core.versions import LATEST
from clockwork.errors import AbortedError, ClockworkError, ExecutionError, NotFoundError
from tests.fakes.prompter import FakePrompter
from tests.fakes.shell import FakeShell
from tests.fakes.user_feedback import FakeUserFeedback
from tests.test_utils.project import (
    ICONS_URL,
    XML_URL,
    package_manifest_text,
    read_project,
    write_project,
)

XML = "xml-preprocessor"
ICONS = "wff-icons"


# Package references


def test_parse_reference_git_url_without_version() -> None:
    ref = parse_package_reference(XML_URL)

    assert (ref.name, ref.url, ref.version) == (XML, XML_URL, "latest")


def test_parse_reference_git_url_with_version() -> None:
    ref = parse_package_reference(f"{XML_URL}@1.2.0")

    assert (ref.name, ref.url, ref.version) == (XML, XML_URL, "1.2.0")


def test_parse_reference_ssh_url_keeps_user_part() -> None:
    """The user in git@host:owner/repo.git is not a version suffix."""
    ref = parse_package_reference("git@github.com:Turtlepaw/xml-preprocessor.git")

    assert ref.url == "git@github.com:Turtlepaw/xml-preprocessor.git"
    assert ref.name == XML
    assert ref.version == "latest"


def test_parse_reference_registry_name_with_version() -> None:
    ref = parse_package_reference("xml-preprocessor@2.0.0")

    assert (ref.name, ref.url, ref.version) == (XML, None, "2.0.0")


def test_repo_name_from_url_strips_git_suffix() -> None:
    assert repo_name_from_url("https://github.com/owner/repo.git") == "repo"
    assert repo_name_from_url("https://github.com/owner/repo/") == "repo"


# add_package


def test_add_git_url_installs_newest_tag(tmp_path: Path) -> None:
    """Adding a URL clones the newest tag and records it in the manifest."""
    # Arrange
    write_project(tmp_path)
    git = FakeGit(remote_tags={XML_URL: ["1.0.0", "1.1.0"]})
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)

    # Act
    result = add_package(ctx, XML_URL)

    # Assert
    package_dir = tmp_path / "packages" / XML
    assert result.name == XML
    assert result.path == package_dir
    assert git.cloned == [(XML_URL, package_dir, "1.1.0")]
    assert read_project(tmp_path).dependencies == {XML: Dependency(url=XML_URL, version="1.1.0")}


def test_add_with_explicit_version(tmp_path: Path) -> None:
    write_project(tmp_path)
    git = FakeGit(remote_tags={XML_URL: ["1.0.0", "1.1.0"]})
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)

    add_package(ctx, f"{XML_URL}@1.0.0")

    assert git.cloned[0][2] == "1.0.0"
    assert read_project(tmp_path).dependencies[XML].version == "1.0.0"


def test_add_registry_name_uses_pinned_version(tmp_path: Path) -> None:
    """A version pinned in the registry wins over the newest tag."""
    write_project(tmp_path)
    git = FakeGit(remote_tags={XML_URL: ["1.0.0", "1.1.0"]})
    registry = FakeRegistry(entries={XML: RegistryEntry(name=XML, url=XML_URL, version="1.0.0")})
    ctx = ClockworkContext.for_test(git=git, registry=registry, cwd=tmp_path)

    add_package(ctx, XML)

    assert registry.lookups == [XML]
    assert read_project(tmp_path).dependencies[XML] == Dependency(url=XML_URL, version="1.0.0")


def test_add_unknown_registry_name_leaves_manifest_unchanged(tmp_path: Path) -> None:
    manifest_path = write_project(tmp_path)
    before = manifest_path.read_text(encoding="utf-8")
    git = FakeGit()
    ctx = ClockworkContext.for_test(git=git, registry=FakeRegistry(), cwd=tmp_path)

    with pytest.raises(NotFoundError, match="Package nope not found in the registry."):
        add_package(ctx, "nope")

    assert manifest_path.read_text(encoding="utf-8") == before
    assert git.cloned == []


def test_add_without_manifest_raises(tmp_path: Path) -> None:
    ctx = ClockworkContext.for_test(cwd=tmp_path)

    with pytest.raises(NotFoundError, match=f"No {MANIFEST_NAME} found"):
        add_package(ctx, XML_URL)


def test_add_unreachable_remote_is_fatal(tmp_path: Path) -> None:
    write_project(tmp_path)
    git = FakeGit(unreachable_urls={XML_URL})
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)

    with pytest.raises(ExecutionError):
        add_package(ctx, XML_URL)

    assert read_project(tmp_path).dependencies == {}


def test_add_without_tags_declined_aborts(tmp_path: Path) -> None:
    write_project(tmp_path)
    prompter = FakePrompter(confirms=[False])
    git = FakeGit()
    ctx = ClockworkContext.for_test(git=git, prompter=prompter, cwd=tmp_path)

    with pytest.raises(AbortedError, match="Installation aborted. No tags available."):
        add_package(ctx, XML_URL)

    assert prompter.prompts == ["No tags for this package. Install default branch instead?"]
    assert git.cloned == []


def test_add_without_tags_accepted_installs_default_branch(tmp_path: Path) -> None:
    write_project(tmp_path)
    git = FakeGit(default_branches={XML_URL: "develop"})
    ctx = ClockworkContext.for_test(
        git=git, prompter=FakePrompter(confirms=[True]), cwd=tmp_path
    )

    add_package(ctx, XML_URL)

    assert git.cloned[0][2] == "develop"
    assert read_project(tmp_path).dependencies[XML].version == "develop"


def test_add_replaces_existing_working_copy(tmp_path: Path) -> None:
    """An existing package directory is removed completely before cloning."""
    write_project(tmp_path)
    stale = tmp_path / "packages" / XML / "stale.txt"
    stale.parent.mkdir(parents=True)
    stale.write_text("old", encoding="utf-8")
    git = FakeGit(remote_tags={XML_URL: ["1.0.0"]})
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)

    add_package(ctx, XML_URL)

    assert not stale.exists()
    assert (tmp_path / "packages" / XML).is_dir()


def test_add_warns_when_package_has_no_manifest(tmp_path: Path) -> None:
    write_project(tmp_path)
    feedback = FakeUserFeedback()
    git = FakeGit(remote_tags={XML_URL: ["1.0.0"]})
    ctx = ClockworkContext.for_test(git=git, feedback=feedback, cwd=tmp_path)

    add_package(ctx, XML_URL)

    assert feedback.warnings == [
        f"Package {XML} has no {MANIFEST_NAME}. Are you sure it's compatible with Clockwork?"
    ]


def test_add_warns_on_format_version_mismatch(tmp_path: Path) -> None:
    """Incompatible packages are still installed, with a warning."""
    write_project(tmp_path, format_version="2")
    feedback = FakeUserFeedback()
    git = FakeGit(
        remote_tags={XML_URL: ["1.0.0"]},
        remote_files={XML_URL: {MANIFEST_NAME: package_manifest_text(format_version="1")}},
    )
    ctx = ClockworkContext.for_test(git=git, feedback=feedback, cwd=tmp_path)

    add_package(ctx, XML_URL)

    assert len(feedback.warnings) == 1
    assert "isn't compatible with this watch face format version" in feedback.warnings[0]
    assert XML in read_project(tmp_path).dependencies


def test_add_runs_postinstall_script_in_working_copy(tmp_path: Path) -> None:
    write_project(tmp_path)
    shell = FakeShell()
    git = FakeGit(
        remote_tags={XML_URL: ["1.0.0"]},
        remote_files={
            XML_URL: {MANIFEST_NAME: package_manifest_text(scripts={"postinstall": "make"})}
        },
    )
    ctx = ClockworkContext.for_test(git=git, shell=shell, cwd=tmp_path)

    add_package(ctx, XML_URL)

    assert shell.script_calls == [("make", tmp_path / "packages" / XML)]


def test_failing_postinstall_is_a_warning(tmp_path: Path) -> None:
    write_project(tmp_path)
    feedback = FakeUserFeedback()
    git = FakeGit(
        remote_tags={XML_URL: ["1.0.0"]},
        remote_files={
            XML_URL: {MANIFEST_NAME: package_manifest_text(scripts={"postinstall": "make"})}
        },
    )
    ctx = ClockworkContext.for_test(
        git=git, shell=FakeShell(exit_codes={"make": 2}), feedback=feedback, cwd=tmp_path
    )

    add_package(ctx, XML_URL)

    assert feedback.warnings == [f"postinstall script for {XML} exited with code 2."]
    assert read_project(tmp_path).dependencies[XML].version == "1.0.0"


# sync_dependencies


def _installed_ctx(
    tmp_path: Path,
    version: str,
    tags: list[str],
    *,
    failing_refs: set[str] | None = None,
    unreachable_urls: set[str] | None = None,
    **kwargs: Any,
) -> tuple[ClockworkContext, FakeGit]:
    """Project with XML installed at version and an existing working copy."""
    write_project(tmp_path, dependencies={XML: Dependency(url=XML_URL, version=version)})
    package_dir = tmp_path / "packages" / XML
    package_dir.mkdir(parents=True)
    git = FakeGit(
        remote_tags={XML_URL: tags},
        remote_urls={package_dir: XML_URL},
        failing_refs=failing_refs,
        unreachable_urls=unreachable_urls,
    )
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path, **kwargs)
    return ctx, git


def test_update_moves_to_newest_minor_and_reports_major(tmp_path: Path) -> None:
    """1.2.0 with tags 1.2.0, 1.3.0, 2.0.0 updates to 1.3.0 and flags 2.0.0."""
    # Arrange
    ctx, git = _installed_ctx(tmp_path, "1.2.0", ["1.2.0", "1.3.0", "2.0.0"])
    package_dir = tmp_path / "packages" / XML

    # Act
    report = sync_dependencies(ctx, upgrade=False)

    # Assert
    assert read_project(tmp_path).dependencies[XML].version == "1.3.0"
    assert report.updated == [(XML, "1.2.0", "1.3.0")]
    assert report.upgradable == [XML]
    assert git.fetches == [package_dir]
    assert git.checkouts == [(package_dir, "1.2.0"), (package_dir, "1.3.0")]


def test_upgrade_applies_major_version(tmp_path: Path) -> None:
    ctx, _ = _installed_ctx(tmp_path, "1.2.0", ["1.2.0", "1.3.0", "2.0.0"])

    report = sync_dependencies(ctx, upgrade=True)

    assert read_project(tmp_path).dependencies[XML].version == "2.0.0"
    assert report.updated == [(XML, "1.2.0", "2.0.0")]
    assert report.upgradable == []


def test_update_when_already_newest_changes_nothing(tmp_path: Path) -> None:
    ctx, _ = _installed_ctx(tmp_path, "1.3.0", ["1.2.0", "1.3.0"])

    report = sync_dependencies(ctx, upgrade=False)

    assert report.updated == []
    assert report.upgradable == []
    assert read_project(tmp_path).dependencies[XML].version == "1.3.0"


def test_sync_keeps_pinned_version_when_remote_unreachable(tmp_path: Path) -> None:
    """An installed package whose remote is gone keeps its version and is not a failure."""
    # Arrange
    feedback = FakeUserFeedback()
    ctx, _ = _installed_ctx(
        tmp_path, "1.2.0", ["1.2.0", "1.3.0"], unreachable_urls={XML_URL}, feedback=feedback
    )

    # Act
    report = sync_dependencies(ctx, upgrade=False)

    # Assert
    assert feedback.warnings[:2] == [
        f"Could not fetch {XML}, using local state.",
        f"Could not list versions of {XML}, keeping current version.",
    ]
    assert report.failed == []
    assert report.updated == []
    assert read_project(tmp_path).dependencies[XML].version == "1.2.0"


def test_sync_keeps_latest_when_tags_cannot_be_listed(tmp_path: Path) -> None:
    """'latest' is not replaced by the fallback branch name when the remote is unreachable."""
    ctx, git = _installed_ctx(tmp_path, LATEST, ["1.0.0", "1.1.0"], unreachable_urls={XML_URL})

    report = sync_dependencies(ctx, upgrade=False)

    assert read_project(tmp_path).dependencies[XML].version == LATEST
    assert git.checkouts == []
    assert report.failed == []


def test_sync_installs_missing_working_copy(tmp_path: Path) -> None:
    write_project(tmp_path, dependencies={XML: Dependency(url=XML_URL, version="1.0.0")})
    git = FakeGit(remote_tags={XML_URL: ["1.0.0", "1.1.0"]})
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)

    report = sync_dependencies(ctx, upgrade=False)

    assert report.installed == [XML]
    assert git.cloned == [(XML_URL, tmp_path / "packages" / XML, "1.0.0")]


def test_sync_resolves_latest_before_installing(tmp_path: Path) -> None:
    write_project(tmp_path, dependencies={XML: Dependency(url=XML_URL)})
    git = FakeGit(remote_tags={XML_URL: ["1.0.0", "1.1.0"]})
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)

    sync_dependencies(ctx, upgrade=False)

    assert read_project(tmp_path).dependencies[XML].version == "1.1.0"


def test_sync_reinstalls_when_origin_url_changed(tmp_path: Path) -> None:
    """A working copy cloned from another URL is deleted and cloned again."""
    # Arrange
    write_project(tmp_path, dependencies={XML: Dependency(url=XML_URL, version="1.0.0")})
    package_dir = tmp_path / "packages" / XML
    package_dir.mkdir(parents=True)
    (package_dir / "old.txt").write_text("old", encoding="utf-8")
    git = FakeGit(
        remote_tags={XML_URL: ["1.0.0"]},
        remote_urls={package_dir: "https://github.com/someone-else/xml-preprocessor.git"},
    )
    ctx = ClockworkContext.for_test(git=git, cwd=tmp_path)

    # Act
    report = sync_dependencies(ctx, upgrade=False)

    # Assert
    assert report.installed == [XML]
    assert git.cloned == [(XML_URL, package_dir, "1.0.0")]
    assert not (package_dir / "old.txt").exists()


def test_sync_continues_after_a_package_fails(tmp_path: Path) -> None:
    """One broken dependency is reported; the others still sync."""
    # Arrange
    write_project(
        tmp_path,
        dependencies={
            XML: Dependency(url=XML_URL, version="1.0.0"),
            ICONS: Dependency(url=ICONS_URL, version="0.1.0"),
        },
    )
    feedback = FakeUserFeedback()
    git = FakeGit(
        remote_tags={XML_URL: ["1.0.0"], ICONS_URL: ["0.1.0"]},
        unreachable_urls={XML_URL},
    )
    ctx = ClockworkContext.for_test(git=git, feedback=feedback, cwd=tmp_path)

    # Act
    report = sync_dependencies(ctx, upgrade=False)

    # Assert
    assert [name for name, _ in report.failed] == [XML]
    assert report.installed == [ICONS]
    assert any(w.startswith(f"Failed to update {XML}:") for w in feedback.warnings)
    assert (tmp_path / "packages" / ICONS).is_dir()


def test_sync_keeps_version_when_checkout_fails(tmp_path: Path) -> None:
    feedback = FakeUserFeedback()
    ctx, _ = _installed_ctx(
        tmp_path, "1.2.0", ["1.2.0"], failing_refs={"1.2.0"}, feedback=feedback
    )

    report = sync_dependencies(ctx, upgrade=False)

    assert report.failed == []
    assert feedback.warnings[0] == (
        f"Could not checkout version 1.2.0 for {XML}, using current version."
    )
    assert read_project(tmp_path).dependencies[XML].version == "1.2.0"


def test_sync_runs_postupdate_script(tmp_path: Path) -> None:
    shell = FakeShell()
    ctx, _ = _installed_ctx(tmp_path, "1.2.0", ["1.2.0"], shell=shell)
    package_dir = tmp_path / "packages" / XML
    (package_dir / MANIFEST_NAME).write_text(
        package_manifest_text(scripts={"postupdate": "make update"}), encoding="utf-8"
    )

    sync_dependencies(ctx, upgrade=False)

    assert shell.script_calls == [("make update", package_dir)]


# uninstall_package / list_dependencies


def test_uninstall_removes_working_copy_and_entry(tmp_path: Path) -> None:
    ctx, _ = _installed_ctx(tmp_path, "1.2.0", ["1.2.0"])

    uninstall_package(ctx, XML)

    assert not (tmp_path / "packages" / XML).exists()
    assert read_project(tmp_path).dependencies == {}


def test_second_uninstall_is_not_found(tmp_path: Path) -> None:
    ctx, _ = _installed_ctx(tmp_path, "1.2.0", ["1.2.0"])
    uninstall_package(ctx, XML)

    with pytest.raises(NotFoundError, match=f"Package {XML} is not installed."):
        uninstall_package(ctx, XML)


def test_list_dependencies_in_manifest_order(tmp_path: Path) -> None:
    write_project(
        tmp_path,
        dependencies={
            XML: Dependency(url=XML_URL, version="1.0.0"),
            ICONS: Dependency(url=ICONS_URL, version="0.1.0"),
        },
    )
    ctx = ClockworkContext.for_test(cwd=tmp_path)

    assert [name for name, _ in list_dependencies(ctx)] == [XML, ICONS]


# init_project


def test_init_creates_empty_manifest(tmp_path: Path) -> None:
    ctx = ClockworkContext.for_test(cwd=tmp_path)

    path = init_project(ctx, name="face", format_version="2", force=False)

    manifest = read_project(tmp_path)
    assert path == tmp_path / MANIFEST_NAME
    assert (manifest.name, manifest.version, manifest.description) == ("face", "1.0.0", "")
    assert manifest.watch_face_format_version == "2"
    assert manifest.dependencies == {}


def test_init_refuses_existing_manifest(tmp_path: Path) -> None:
    write_project(tmp_path, name="existing")
    ctx = ClockworkContext.for_test(cwd=tmp_path)

    with pytest.raises(ClockworkError, match="already exists"):
        init_project(ctx, name="face", format_version="1", force=False)

    assert read_project(tmp_path).name == "existing"


def test_init_force_overwrites(tmp_path: Path) -> None:
    (tmp_path / "clockwork.yaml").write_text("name: existing\n", encoding="utf-8")
    ctx = ClockworkContext.for_test(cwd=tmp_path)

    init_project(ctx, name="face", format_version="1", force=True)

    assert not (tmp_path / "clockwork.yaml").exists()
    assert read_project(tmp_path).name == "face"
