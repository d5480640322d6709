"""Unit tests for backup directory statistics."""

from collections.abc import Callable
from pathlib import Path

import pytest
from vmsnap.core.dirstats import MAX_RECURSION_DEPTH, collect
from vmsnap.core.errors import RecursionLimitError


class TestCollect:
    """Tests for collect."""

    def test_missing_directory(self) -> None:
        """A missing directory yields zeroed stats instead of an error."""
        stats = collect("/nonexistent/path")

        assert stats.path == "/nonexistent/path"
        assert (stats.total_files, stats.total_size, stats.marker_files) == (0, 0, 0)

    def test_counts_markers_and_files(
        self, tmp_path: Path, make_backup_dir: Callable[..., Path]
    ) -> None:
        """Marker files are counted once, alongside every other regular file."""
        make_backup_dir(
            tmp_path,
            markers=3,
            files={"vda.full.data": 1000, "vda.inc.virtnbdbackup.1.data": 200},
        )

        stats = collect(str(tmp_path))

        assert stats.marker_files == 3
        assert stats.total_files == 5
        assert stats.total_size == 3 * 10 + 1000 + 200

    def test_nested_directories(self, tmp_path: Path, make_backup_dir: Callable[..., Path]) -> None:
        """Files in nested directories are included."""
        make_backup_dir(tmp_path, markers=1, files={"a/b/c.data": 5, "a/d.data": 7})

        stats = collect(str(tmp_path))

        assert stats.total_files == 3
        assert stats.total_size == 10 + 5 + 7

    def test_without_marker_subdir(self, tmp_path: Path) -> None:
        """A directory without the marker subdirectory has no markers."""
        (tmp_path / "vda.full.data").write_bytes(b"12345")

        stats = collect(str(tmp_path))

        assert stats.marker_files == 0
        assert stats.total_files == 1
        assert stats.total_size == 5

    def test_skips_dangling_symlinks(
        self, tmp_path: Path, make_backup_dir: Callable[..., Path]
    ) -> None:
        """Symlinks whose target is gone are left out of the totals."""
        make_backup_dir(tmp_path, markers=2, files={"vda.full.data": 100})
        (tmp_path / "dangling").symlink_to(tmp_path / "gone")
        (tmp_path / "checkpoints" / "virtnbdbackup.9.xml").symlink_to(tmp_path / "gone.xml")

        stats = collect(str(tmp_path))

        assert stats.marker_files == 2
        assert stats.total_files == 3
        assert stats.total_size == 2 * 10 + 100

    def test_custom_marker_subdir(self, tmp_path: Path) -> None:
        """The marker subdirectory name can be overridden."""
        (tmp_path / "markers").mkdir()
        (tmp_path / "markers" / "one").write_bytes(b"1")

        stats = collect(str(tmp_path), marker_subdir="markers")

        assert stats.marker_files == 1
        assert stats.total_files == 1

    def test_recursion_limit(self, tmp_path: Path) -> None:
        """Trees deeper than the limit raise RecursionLimitError."""
        deep = tmp_path.joinpath(*[f"d{i}" for i in range(MAX_RECURSION_DEPTH + 1)])
        deep.mkdir(parents=True)
        (deep / "file").write_bytes(b"x")

        with pytest.raises(RecursionLimitError, match="Recursion limit"):
            collect(str(tmp_path))

    def test_depth_within_limit(self, tmp_path: Path) -> None:
        """Trees within the limit are walked completely."""
        deep = tmp_path.joinpath(*[f"d{i}" for i in range(MAX_RECURSION_DEPTH - 1)])
        deep.mkdir(parents=True)
        (deep / "file").write_bytes(b"x")

        assert collect(str(tmp_path)).total_files == 1
