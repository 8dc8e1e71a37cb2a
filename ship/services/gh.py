"""GitHub REST calls for releases, made through the gh CLI.

gh handles authentication (GH_TOKEN), pagination and API versioning, so the
pipeline never talks HTTP directly. Reads are retried on transient errors;
writes (create, upload, edit) are not.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from time import sleep
from urllib.parse import quote

from ship.core.result import Err, Ok, Result
from ship.core.structured import as_obj_list, as_str_dict, get_bool, get_int, get_str
from ship.pipeline.errors import StepError, StepErrorKind
from ship.platform.process import ProcessError, merged_env
from ship.platform.process import run as run_process
from ship.services.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_UPLOAD_TIMEOUT_SECONDS,
)

ASSET_CONTENT_TYPE = "application/octet-stream"
RELEASE_LIST_LIMIT = 100


@dataclass(frozen=True, slots=True)
class ReleaseRecord:
    id: int
    tag: str
    name: str | None
    draft: bool
    prerelease: bool
    upload_url: str
    html_url: str | None = None


@dataclass(frozen=True, slots=True)
class NewRelease:
    tag: str
    target_commitish: str
    name: str
    body: str
    prerelease: bool
    draft: bool = True


@dataclass(frozen=True, slots=True)
class GhSession:
    """Where and as whom gh runs."""

    workspace_root: Path
    repo: str
    token: str | None = None

    def env(self) -> dict[str, str] | None:
        if not self.token:
            return None
        return merged_env({"GH_TOKEN": self.token})


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def _is_not_found(error: ProcessError) -> bool:
    return "http 404" in f"{error.stderr}\n{error.stdout}".lower()


def ensure_gh_available() -> Result[None, StepError]:
    if shutil.which("gh") is None:
        return Err(
            StepError(
                kind="tool_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def _parse_json(text: str, *, what: str) -> Result[dict[str, object], StepError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(StepError(kind="release_failed", message=f"gh api returned invalid JSON: {e}"))
    data = as_str_dict(obj)
    if data is None:
        return Err(StepError(kind="release_failed", message=f"unexpected {what} payload"))
    return Ok(data)


def parse_release(data: dict[str, object]) -> Result[ReleaseRecord, StepError]:
    release_id = get_int(data, "id")
    tag = get_str(data, "tag_name")
    upload_url = get_str(data, "upload_url")
    if release_id is None or tag is None or upload_url is None:
        return Err(
            StepError(kind="release_failed", message="release payload is missing id/tag/upload_url")
        )
    return Ok(
        ReleaseRecord(
            id=release_id,
            tag=tag,
            name=get_str(data, "name"),
            draft=get_bool(data, "draft") or False,
            prerelease=get_bool(data, "prerelease") or False,
            upload_url=upload_url,
            html_url=get_str(data, "html_url"),
        )
    )


def _gh_write(
    session: GhSession,
    cmd: list[str],
    *,
    message: str,
    timeout: float = GH_TIMEOUT_SECONDS,
) -> Result[str, StepError]:
    result = run_process(cmd, cwd=session.workspace_root, env=session.env(), timeout=timeout)
    if isinstance(result, Err):
        e = result.error
        return Err(
            StepError(
                kind="release_failed",
                message=message,
                hint=e.stderr.strip() or None,
            )
        )
    return Ok(result.value)


def run_gh_read(
    session: GhSession,
    cmd: list[str],
    *,
    kind: StepErrorKind,
    message: str,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str | None, StepError]:
    """Run an idempotent gh read. A 404 yields Ok(None)."""
    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(
            cmd, cwd=session.workspace_root, env=session.env(), timeout=GH_TIMEOUT_SECONDS
        )
        if isinstance(result, Ok):
            return Ok(result.value)

        error = result.error
        if _is_not_found(error):
            return Ok(None)
        if attempt < attempts - 1 and _is_transient_gh_error(error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue
        return Err(StepError(kind=kind, message=message, hint=error.stderr.strip() or None))

    return Err(StepError(kind=kind, message=message))


def find_release_by_tag(session: GhSession, tag: str) -> Result[ReleaseRecord | None, StepError]:
    """Look up a release by tag, drafts included.

    The `releases/tags/{tag}` endpoint hides drafts, so the release list is
    searched instead. Only the newest RELEASE_LIST_LIMIT releases are checked.
    """
    result = run_gh_read(
        session,
        ["gh", "api", f"repos/{session.repo}/releases?per_page={RELEASE_LIST_LIMIT}"],
        kind="release_failed",
        message=f"failed to query release {tag}",
    )
    if isinstance(result, Err):
        return result
    if result.value is None:
        return Ok(None)

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(StepError(kind="release_failed", message=f"gh api returned invalid JSON: {e}"))
    raw = as_obj_list(obj)
    if raw is None:
        return Err(StepError(kind="release_failed", message="unexpected releases payload"))

    for item in raw:
        data = as_str_dict(item)
        if data is None or get_str(data, "tag_name") != tag:
            continue
        return parse_release(data)
    return Ok(None)


def create_release(session: GhSession, new: NewRelease) -> Result[ReleaseRecord, StepError]:
    cmd = [
        "gh",
        "api",
        "--method",
        "POST",
        f"repos/{session.repo}/releases",
        "-f",
        f"tag_name={new.tag}",
        "-f",
        f"target_commitish={new.target_commitish}",
        "-f",
        f"name={new.name}",
        "-f",
        f"body={new.body}",
        "-F",
        f"draft={'true' if new.draft else 'false'}",
        "-F",
        f"prerelease={'true' if new.prerelease else 'false'}",
    ]
    out = _gh_write(session, cmd, message=f"failed to create release {new.tag}")
    if isinstance(out, Err):
        return out

    data = _parse_json(out.value, what="release")
    if isinstance(data, Err):
        return data
    return parse_release(data.value)


def asset_upload_url(release: ReleaseRecord, filename: str) -> str:
    """Expand the `{?name,label}` template of a release upload_url."""
    base = release.upload_url.split("{", 1)[0]
    return f"{base}?name={quote(filename)}"


def upload_asset(session: GhSession, release: ReleaseRecord, asset: Path) -> Result[None, StepError]:
    cmd = [
        "gh",
        "api",
        "--method",
        "POST",
        asset_upload_url(release, asset.name),
        "-H",
        f"Content-Type: {ASSET_CONTENT_TYPE}",
        "--input",
        str(asset),
    ]
    out = _gh_write(
        session,
        cmd,
        message=f"failed to upload release asset {asset.name}",
        timeout=GH_UPLOAD_TIMEOUT_SECONDS,
    )
    if isinstance(out, Err):
        return out
    return Ok(None)


def publish_draft(session: GhSession, release: ReleaseRecord) -> Result[ReleaseRecord, StepError]:
    """Flip a draft release to published."""
    cmd = [
        "gh",
        "api",
        "--method",
        "PATCH",
        f"repos/{session.repo}/releases/{release.id}",
        "-F",
        "draft=false",
    ]
    out = _gh_write(session, cmd, message=f"failed to publish release {release.tag}")
    if isinstance(out, Err):
        return out

    data = _parse_json(out.value, what="release")
    if isinstance(data, Err):
        return data
    return parse_release(data.value)
