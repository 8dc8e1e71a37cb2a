"""Git repository metadata for the pipeline.

The pipeline only reads from git: current branch, head commit and the
`origin` remote (to derive the GitHub owner/name for releases).

Usage:
    repo = Repository(root)
    match repo.info(ci):
        case Ok(info):
            print(info.branch, info.is_on_release_branch)
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ship.ci.github_actions import CiEnvironment
from ship.core.result import Err, Ok, Result
from ship.platform.process import ProcessError
from ship.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

_DEVELOP_BRANCHES = frozenset({"dev", "develop", "development"})
_RELEASE_PREFIXES = ("release/", "releases/")

# git@github.com:owner/name.git, https://github.com/owner/name(.git)
_GITHUB_URL_RE = re.compile(
    r"^(?:git@github\.com:|(?:https?|ssh|git)://(?:[^@/]+@)?github\.com[:/])"
    r"(?P<owner>[^/]+)/(?P<name>[^/]+?)(?:\.git)?/?$"
)

__all__ = [
    "GitError",
    "GitInfo",
    "Repository",
    "parse_github_slug",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class GitInfo:
    """Snapshot of repository facts used by target conditions.

    Attributes:
        branch: Branch name (None on a detached HEAD outside CI)
        sha: Full head commit sha
        owner: GitHub owner, if the remote is on GitHub
        name: GitHub repository name, if the remote is on GitHub
    """

    branch: str | None
    sha: str
    owner: str | None = None
    name: str | None = None

    @property
    def is_on_develop_branch(self) -> bool:
        return self.branch is not None and self.branch.lower() in _DEVELOP_BRANCHES

    @property
    def is_on_main_or_master_branch(self) -> bool:
        return self.branch is not None and self.branch.lower() in {"main", "master"}

    @property
    def is_on_release_branch(self) -> bool:
        if self.branch is None:
            return False
        lowered = self.branch.lower()
        return any(lowered.startswith(p) for p in _RELEASE_PREFIXES)

    @property
    def slug(self) -> str | None:
        if self.owner and self.name:
            return f"{self.owner}/{self.name}"
        return None


def parse_github_slug(url: str) -> tuple[str, str] | None:
    """Extract (owner, name) from a GitHub remote URL."""
    m = _GITHUB_URL_RE.match(url.strip())
    if m is None:
        return None
    return (m.group("owner"), m.group("name"))


class Repository:
    """Read-only view of a git work tree.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def current_branch(self) -> str | None:
        """Get current branch name. Returns None on detached HEAD or error."""
        match self._run(["rev-parse", "--abbrev-ref", "HEAD"]):
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def head_sha(self) -> Result[str, GitError]:
        match self._run(["rev-parse", "HEAD"]):
            case Err(e):
                return Err(
                    GitError(
                        command="rev-parse HEAD",
                        message=e.stderr.strip() or "git rev-parse failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout.strip())

    def remote_url(self, remote: str = "origin") -> str | None:
        match self._run(["remote", "get-url", remote]):
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def info(self, ci: CiEnvironment) -> Result[GitInfo, GitError]:
        """Collect branch, sha and GitHub slug.

        On a CI runner the checkout is often a detached HEAD, so the runner's
        own ref/sha/repository take precedence over local git state. The
        branch comes from the triggering ref only.
        """
        branch = ci.branch if ci.is_ci else self.current_branch()

        sha = ci.sha
        if sha is None:
            head = self.head_sha()
            if isinstance(head, Err):
                return head
            sha = head.value

        owner: str | None = None
        name: str | None = None
        if ci.repository and "/" in ci.repository:
            owner, name = ci.repository.split("/", 1)
        else:
            url = self.remote_url()
            parsed = parse_github_slug(url) if url else None
            if parsed is not None:
                owner, name = parsed

        return Ok(GitInfo(branch=branch, sha=sha, owner=owner, name=name))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )
