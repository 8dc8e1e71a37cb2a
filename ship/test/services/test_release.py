from __future__ import annotations

from pathlib import Path

import pytest

from ship.core.result import Err, Ok
from ship.output.console import MockConsole
from ship.pipeline.errors import StepError
from ship.services import release as release_mod
from ship.services.gh import GhSession, NewRelease, ReleaseRecord
from ship.services.versioning import VersionInfo

CHANGELOG = """# Changelog

## [1.2.0] - 2024-05-01
- Added subtraction

## [1.1.0] - 2024-04-01
- Added addition
"""


def _version(pre_release_tag: str = "") -> VersionInfo:
    return VersionInfo(
        nuget_version_v2="1.2.0" if not pre_release_tag else f"1.2.0-{pre_release_tag}0001",
        assembly_sem_ver="1.2.0.0",
        assembly_sem_file_ver="1.2.0.0",
        informational_version="1.2.0+Branch.main.Sha.abc",
        sha="abc123",
        branch_name="main",
        pre_release_tag=pre_release_tag,
    )


def _record(*, draft: bool) -> ReleaseRecord:
    return ReleaseRecord(
        id=7,
        tag="1.2.0",
        name="v1.2.0",
        draft=draft,
        prerelease=False,
        upload_url="https://uploads.github.com/repos/acme/mypack/releases/7/assets{?name,label}",
        html_url="https://github.com/acme/mypack/releases/tag/1.2.0",
    )


class FakeGitHub:
    def __init__(self, *, existing: ReleaseRecord | None = None, fail_upload: str | None = None):
        self.existing = existing
        self.fail_upload = fail_upload
        self.events: list[str] = []
        self.created: NewRelease | None = None

    def install(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(release_mod, "find_release_by_tag", self.find_release_by_tag)
        monkeypatch.setattr(release_mod, "create_release", self.create_release)
        monkeypatch.setattr(release_mod, "upload_asset", self.upload_asset)
        monkeypatch.setattr(release_mod, "publish_draft", self.publish_draft)

    def find_release_by_tag(self, session: GhSession, tag: str):
        del session
        self.events.append(f"find {tag}")
        return Ok(self.existing)

    def create_release(self, session: GhSession, new: NewRelease):
        del session
        self.created = new
        self.events.append("create")
        return Ok(_record(draft=True))

    def upload_asset(self, session: GhSession, release: ReleaseRecord, asset: Path):
        del session, release
        self.events.append(f"upload {asset.name}")
        if asset.name == self.fail_upload:
            return Err(StepError(kind="release_failed", message=f"failed to upload {asset.name}"))
        return Ok(None)

    def publish_draft(self, session: GhSession, release: ReleaseRecord):
        del session, release
        self.events.append("publish")
        return Ok(_record(draft=False))


@pytest.fixture
def changelog(tmp_path: Path) -> Path:
    path = tmp_path / "CHANGELOG.md"
    path.write_text(CHANGELOG, encoding="utf-8")
    return path


@pytest.fixture
def assets(tmp_path: Path) -> list[Path]:
    paths = [tmp_path / "MyPack.1.2.0.nupkg", tmp_path / "MyPack.Extras.1.2.0.nupkg"]
    for p in paths:
        p.write_bytes(b"pkg")
    return paths


def _session(tmp_path: Path) -> GhSession:
    return GhSession(workspace_root=tmp_path, repo="acme/mypack", token="t")


def test_new_release_for_stable_version() -> None:
    new = release_mod.new_release_for(_version(), "notes")
    assert new.tag == "1.2.0"
    assert new.name == "v1.2.0"
    assert new.target_commitish == "abc123"
    assert new.prerelease is False
    assert new.draft is True


def test_new_release_for_prerelease() -> None:
    new = release_mod.new_release_for(_version("beta"), "notes")
    assert new.tag == "1.2.0-beta0001"
    assert new.prerelease is True


def test_publishes_only_after_every_asset(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, changelog: Path, assets: list[Path]
) -> None:
    fake = FakeGitHub()
    fake.install(monkeypatch)
    console = MockConsole()

    result = release_mod.create_github_release(
        session=_session(tmp_path),
        version=_version(),
        changelog=changelog,
        assets=assets,
        console=console,
    )

    assert isinstance(result, Ok)
    assert result.value.draft is False
    assert fake.events == [
        "find 1.2.0",
        "create",
        "upload MyPack.1.2.0.nupkg",
        "upload MyPack.Extras.1.2.0.nupkg",
        "publish",
    ]
    assert fake.created is not None
    assert fake.created.body == "- Added subtraction"
    assert console.has_message("Published v1.2.0")


def test_failed_upload_leaves_draft(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, changelog: Path, assets: list[Path]
) -> None:
    fake = FakeGitHub(fail_upload="MyPack.1.2.0.nupkg")
    fake.install(monkeypatch)

    result = release_mod.create_github_release(
        session=_session(tmp_path),
        version=_version(),
        changelog=changelog,
        assets=assets,
        console=MockConsole(),
    )

    assert isinstance(result, Err)
    assert "publish" not in fake.events
    assert "upload MyPack.Extras.1.2.0.nupkg" not in fake.events
    assert result.error.hint is not None
    assert "left as a draft" in result.error.hint


def test_existing_tag_fails_before_create(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, changelog: Path, assets: list[Path]
) -> None:
    fake = FakeGitHub(existing=_record(draft=False))
    fake.install(monkeypatch)

    result = release_mod.create_github_release(
        session=_session(tmp_path),
        version=_version(),
        changelog=changelog,
        assets=assets,
        console=MockConsole(),
    )

    assert isinstance(result, Err)
    assert "already exists" in result.error.message
    assert fake.events == ["find 1.2.0"]


def test_missing_changelog_fails_before_any_call(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, assets: list[Path]
) -> None:
    fake = FakeGitHub()
    fake.install(monkeypatch)

    result = release_mod.create_github_release(
        session=_session(tmp_path),
        version=_version(),
        changelog=tmp_path / "missing.md",
        assets=assets,
        console=MockConsole(),
    )

    assert isinstance(result, Err)
    assert fake.events == []


def test_leftover_draft_blocks_second_draft(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, changelog: Path, assets: list[Path]
) -> None:
    fake = FakeGitHub(existing=_record(draft=True))
    fake.install(monkeypatch)

    result = release_mod.create_github_release(
        session=_session(tmp_path),
        version=_version(),
        changelog=changelog,
        assets=assets,
        console=MockConsole(),
    )

    assert isinstance(result, Err)
    assert "draft release already exists" in result.error.message
    assert result.error.hint is not None
    assert "delete or publish draft" in result.error.hint
    assert fake.events == ["find 1.2.0"]
