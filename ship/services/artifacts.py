"""Artifact discovery and output directory housekeeping."""

from __future__ import annotations

import fnmatch
import os
import shutil
import stat
from collections.abc import Callable
from pathlib import Path

from ship.core.result import Err, Ok, Result
from ship.pipeline.errors import StepError


def is_excluded(path: Path, exclude: str | None) -> bool:
    """True if `path` matches the exclude pattern.

    The pattern is either a plain suffix (`.symbols.nupkg`) or a glob
    (`*.symbols.nupkg`); both forms are checked against the file name.
    """
    if not exclude:
        return False
    name = path.name
    return name.endswith(exclude) or fnmatch.fnmatch(name, exclude)


def glob_artifacts(directory: Path, include: str, exclude: str | None = None) -> list[Path]:
    """Files under `directory` matching `include`, minus excluded ones, sorted."""
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.glob(include) if p.is_file() and not is_excluded(p, exclude)
    )


def _remove_readonly(_func: Callable[[str], object], path: str, exc: BaseException) -> None:
    """Handle read-only files on Windows."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        os.unlink(path)
    else:
        raise exc


def ensure_clean_directory(directory: Path) -> Result[None, StepError]:
    """Create `directory` if needed and delete everything inside it."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for child in directory.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child, onexc=_remove_readonly)
            else:
                child.unlink()
    except OSError as e:
        return Err(
            StepError(
                kind="io_failed",
                message=f"failed to clean directory: {e}",
                hint=str(directory),
            )
        )
    return Ok(None)
