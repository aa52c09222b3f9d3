"""Tests for file walking helpers."""

from pathlib import Path

import pytest

from fileseek.utils.files import (
    get_file_size_human,
    is_binary_file,
    is_hidden,
    iter_files,
    normalize_extensions,
)


def names(paths: list[Path], root: Path) -> list[str]:
    return [p.relative_to(root).as_posix() for p in paths]


class TestIterFiles:
    """Tests for iter_files."""

    def test_default_walk(self, sample_files: Path) -> None:
        """Test hidden and binary files are skipped, order is stable."""
        found = names(list(iter_files(sample_files)), sample_files)
        assert found == ["app.log", "main.py", "notes.md", "src/service.py"]

    def test_include_hidden(self, sample_files: Path) -> None:
        """Test hidden entries are included on request."""
        paths = list(iter_files(sample_files, include_hidden=True))
        found = names(paths, sample_files)
        assert ".hidden/secret.txt" in found

    def test_binary_included(self, sample_files: Path) -> None:
        """Test binary files can be included."""
        found = names(list(iter_files(sample_files, skip_binary=False)), sample_files)
        assert "image.png" in found

    def test_extensions(self, sample_files: Path) -> None:
        """Test extension filtering with and without dots."""
        paths = list(iter_files(sample_files, extensions=["py", ".MD"]))
        found = names(paths, sample_files)
        assert found == ["main.py", "notes.md", "src/service.py"]

    def test_max_depth(self, sample_files: Path) -> None:
        """Test subdirectories beyond the depth are skipped."""
        found = names(list(iter_files(sample_files, max_depth=0)), sample_files)
        assert "src/service.py" not in found

    def test_ignored_dirs(self, sample_files: Path) -> None:
        """Test tool directories are never searched."""
        cache_dir = sample_files / "__pycache__"
        cache_dir.mkdir()
        (cache_dir / "notes.txt").write_text("error")
        found = names(list(iter_files(sample_files)), sample_files)
        assert all(not name.startswith("__pycache__") for name in found)

    def test_file_root(self, sample_files: Path) -> None:
        """Test a file root yields only itself."""
        assert list(iter_files(sample_files / "main.py")) == [sample_files / "main.py"]


class TestHelpers:
    """Tests for small path helpers."""

    def test_is_binary_file(self) -> None:
        """Test binary detection by extension."""
        assert is_binary_file(Path("photo.JPG"))
        assert not is_binary_file(Path("notes.txt"))

    def test_is_hidden(self) -> None:
        """Test dot-prefixed names are hidden."""
        assert is_hidden(Path(".env"))
        assert not is_hidden(Path("env"))

    def test_normalize_extensions(self) -> None:
        """Test extensions gain a dot and lose case."""
        assert normalize_extensions(["PY", ".Md", ""]) == {".py", ".md"}
        assert normalize_extensions(None) is None
        assert normalize_extensions([]) is None

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, "0 B"), (512, "512 B"), (2048, "2.0 KB"), (5 * 1024 * 1024, "5.0 MB")],
    )
    def test_get_file_size_human(self, size: int, expected: str) -> None:
        """Test human-readable sizes."""
        assert get_file_size_human(size) == expected
