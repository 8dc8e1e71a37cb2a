"""GitHub Actions environment facts.

Read once from the process environment; everything downstream receives the
frozen CiEnvironment so tests can construct one directly.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

__all__ = ["CiEnvironment", "detect_ci"]

_PR_EVENTS = frozenset({"pull_request", "pull_request_target"})


@dataclass(frozen=True, slots=True)
class CiEnvironment:
    """Facts exposed by the GitHub Actions runner.

    Attributes:
        is_ci: True when running under GitHub Actions.
        repository: `owner/name` of the repository.
        repository_owner: Owner (user or organization).
        ref: Full ref that triggered the run (e.g. `refs/heads/dev`).
        sha: Commit that triggered the run.
        event_name: Triggering event (`push`, `pull_request`, ...).
        token: Workflow GITHUB_TOKEN, if exported to the step.
    """

    is_ci: bool = False
    repository: str | None = None
    repository_owner: str | None = None
    ref: str | None = None
    sha: str | None = None
    event_name: str | None = None
    token: str | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.event_name in _PR_EVENTS

    @property
    def branch(self) -> str | None:
        """Branch that triggered the run.

        None for pull requests (`refs/pull/N/merge`) and tags.
        """
        if self.ref and self.ref.startswith("refs/heads/"):
            return self.ref.removeprefix("refs/heads/")
        return None

    @property
    def package_feed(self) -> str | None:
        """GitHub Packages NuGet feed for the repository owner."""
        if not self.repository_owner:
            return None
        return f"https://nuget.pkg.github.com/{self.repository_owner}/index.json"


def _opt(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key, "").strip()
    return value or None


def detect_ci(env: Mapping[str, str] | None = None) -> CiEnvironment:
    """Build a CiEnvironment from `env` (defaults to os.environ)."""
    e = os.environ if env is None else env
    return CiEnvironment(
        is_ci=e.get("GITHUB_ACTIONS", "").lower() == "true",
        repository=_opt(e, "GITHUB_REPOSITORY"),
        repository_owner=_opt(e, "GITHUB_REPOSITORY_OWNER"),
        ref=_opt(e, "GITHUB_REF"),
        sha=_opt(e, "GITHUB_SHA"),
        event_name=_opt(e, "GITHUB_EVENT_NAME"),
        token=_opt(e, "GITHUB_TOKEN"),
    )
