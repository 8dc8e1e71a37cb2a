"""Build root detection and well-known paths.

The build root is the directory holding `ship.toml` (preferred) or, failing
that, the top of the git work tree. Every relative path in the pipeline
(project file, artifacts directory, changelog) resolves against it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "CONFIG_FILE_NAME",
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
    "find_root_upward",
]

CONFIG_FILE_NAME = "ship.toml"


@dataclass(frozen=True)
class WorkspaceError:
    """Error when the build root cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A detected build root."""

    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    def __str__(self) -> str:
        return str(self.root)


def find_root_upward(start: Path) -> Path | None:
    """Search upward from `start` for a build root.

    A directory with `ship.toml` wins over an enclosing git work tree.
    """
    candidates = (start, *start.parents)
    for parent in candidates:
        if (parent / CONFIG_FILE_NAME).is_file():
            return parent
    for parent in candidates:
        if (parent / ".git").exists():
            return parent
    return None


def detect_workspace(
    *,
    start_dir: Path | None = None,
    env_var: str = "SHIP_ROOT",
) -> Result[Workspace, WorkspaceError]:
    """Detect the build root.

    Detection order:
    1. SHIP_ROOT environment variable (must point at an existing directory)
    2. Search upward from start_dir (or cwd)
    """
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir():
            return Ok(Workspace(root=env_path))
        return Err(
            WorkspaceError(
                message=f"${env_var} is set to '{env_value}' but it is not a directory",
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_root_upward(search_start)
    if found is None:
        return Err(
            WorkspaceError(
                message=f"Could not find build root ({CONFIG_FILE_NAME} or .git not found)",
                searched_from=search_start,
            )
        )
    return Ok(Workspace(root=found))
