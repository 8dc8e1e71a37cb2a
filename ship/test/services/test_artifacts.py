"""Tests for ship.services.artifacts module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ship.core.result import Err, Ok
from ship.services.artifacts import ensure_clean_directory, glob_artifacts, is_excluded


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"pkg")
    return path


class TestIsExcluded:
    @pytest.mark.parametrize("pattern", [".symbols.nupkg", "*.symbols.nupkg"])
    def test_suffix_or_glob(self, pattern: str) -> None:
        assert is_excluded(Path("MyPack.1.0.0.symbols.nupkg"), pattern)
        assert not is_excluded(Path("MyPack.1.0.0.nupkg"), pattern)

    def test_no_pattern(self) -> None:
        assert not is_excluded(Path("MyPack.1.0.0.symbols.nupkg"), None)
        assert not is_excluded(Path("MyPack.1.0.0.symbols.nupkg"), "")


class TestGlobArtifacts:
    def test_excluded_files_never_returned(self, tmp_path: Path) -> None:
        _touch(tmp_path / "MyPack.1.0.0.nupkg")
        _touch(tmp_path / "MyPack.1.0.0.symbols.nupkg")
        _touch(tmp_path / "MyPack.1.0.0.snupkg")

        found = glob_artifacts(tmp_path, "*.nupkg", ".symbols.nupkg")
        assert [p.name for p in found] == ["MyPack.1.0.0.nupkg"]

    def test_recursive_pattern(self, tmp_path: Path) -> None:
        _touch(tmp_path / "a" / "One.1.0.0.nupkg")
        _touch(tmp_path / "b" / "Two.1.0.0.nupkg")
        found = glob_artifacts(tmp_path, "**/*.nupkg")
        assert [p.name for p in found] == ["One.1.0.0.nupkg", "Two.1.0.0.nupkg"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert glob_artifacts(tmp_path / "missing", "*.nupkg") == []

    def test_directories_are_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "weird.nupkg").mkdir()
        assert glob_artifacts(tmp_path, "*.nupkg") == []


class TestEnsureCleanDirectory:
    def test_creates_missing(self, tmp_path: Path) -> None:
        target = tmp_path / ".artifacts"
        assert isinstance(ensure_clean_directory(target), Ok)
        assert target.is_dir()

    def test_empties_existing(self, tmp_path: Path) -> None:
        target = tmp_path / ".artifacts"
        _touch(target / "old.nupkg")
        _touch(target / "nested" / "deep.nupkg")

        assert isinstance(ensure_clean_directory(target), Ok)
        assert target.is_dir()
        assert list(target.iterdir()) == []

    def test_file_in_the_way(self, tmp_path: Path) -> None:
        blocker = _touch(tmp_path / "file")
        result = ensure_clean_directory(blocker / "sub")
        assert isinstance(result, Err)
        assert result.error.kind == "io_failed"
