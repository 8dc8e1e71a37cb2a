"""Git repository metadata."""

from .repository import GitError, GitInfo, Repository, parse_github_slug

__all__ = ["GitError", "GitInfo", "Repository", "parse_github_slug"]
