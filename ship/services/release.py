"""GitHub release creation for the packed version.

Sequence: draft release -> upload every artifact -> publish. The draft stays
hidden from users until the last asset is attached; if an upload fails the
draft is left in place for manual inspection.
"""

from __future__ import annotations

from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.output.console import ConsoleProtocol, Style
from ship.pipeline.errors import StepError
from ship.services.changelog import read_latest_notes
from ship.services.gh import (
    GhSession,
    NewRelease,
    ReleaseRecord,
    create_release,
    find_release_by_tag,
    publish_draft,
    upload_asset,
)
from ship.services.versioning import VersionInfo


def new_release_for(version: VersionInfo, notes: str) -> NewRelease:
    tag = version.nuget_version_v2
    return NewRelease(
        tag=tag,
        target_commitish=version.sha,
        name=f"v{tag}",
        body=notes,
        prerelease=version.is_prerelease,
    )


def create_github_release(
    *,
    session: GhSession,
    version: VersionInfo,
    changelog: Path,
    assets: list[Path],
    console: ConsoleProtocol,
) -> Result[ReleaseRecord, StepError]:
    notes = read_latest_notes(changelog)
    if isinstance(notes, Err):
        return notes

    new = new_release_for(version, notes.value)

    existing = find_release_by_tag(session, new.tag)
    if isinstance(existing, Err):
        return existing
    if existing.value is not None:
        found = existing.value
        if found.draft:
            return Err(
                StepError(
                    kind="release_failed",
                    message=f"a draft release already exists for tag {new.tag}",
                    hint=f"delete or publish draft {found.html_url or found.id} and re-run",
                )
            )
        return Err(
            StepError(
                kind="release_failed",
                message=f"release already exists for tag {new.tag}",
                hint=found.html_url,
            )
        )

    kind = "pre-release" if new.prerelease else "release"
    console.info(f"Creating draft {kind} {new.name} on {session.repo} at {new.target_commitish}")
    created = create_release(session, new)
    if isinstance(created, Err):
        return created
    draft = created.value

    for asset in assets:
        console.print(f"Uploading {asset.name}", Style.DIM)
        uploaded = upload_asset(session, draft, asset)
        if isinstance(uploaded, Err):
            return Err(
                StepError(
                    kind="release_failed",
                    message=uploaded.error.message,
                    hint=f"release {new.tag} was left as a draft: {draft.html_url or draft.id}",
                )
            )

    published = publish_draft(session, draft)
    if isinstance(published, Err):
        return published

    console.success(f"Published {new.name} with {len(assets)} asset(s)")
    if published.value.html_url:
        console.print(published.value.html_url, Style.DIM)
    return Ok(published.value)
