"""File walking helpers used by the search engine."""

from collections.abc import Iterable, Iterator
from pathlib import Path

# Binary file extensions to skip
BINARY_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp",
        ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
        ".zip", ".tar", ".gz", ".bz2", ".xz", ".7z", ".rar",
        ".exe", ".dll", ".so", ".dylib", ".bin", ".o", ".obj", ".a",
        ".mp3", ".mp4", ".wav", ".avi", ".mov", ".mkv",
        ".pyc", ".pyo", ".class", ".jar",
        ".db", ".sqlite", ".sqlite3",
        ".woff", ".woff2", ".ttf", ".otf", ".eot",
        ".pickle", ".pkl", ".npy", ".npz",
    }
)

# Directories never descended into
IGNORED_DIRS = frozenset(
    {
        ".git", ".svn", ".hg",
        "node_modules", "__pycache__",
        ".pytest_cache", ".mypy_cache", ".ruff_cache",
        "venv", ".venv", ".tox", ".nox",
        "dist", "build", "htmlcov",
    }
)


def is_binary_file(path: Path) -> bool:
    """Check if a file is likely binary based on extension."""
    return path.suffix.lower() in BINARY_EXTENSIONS


def is_hidden(path: Path) -> bool:
    """Check if a file or directory is hidden (starts with '.')."""
    return path.name.startswith(".")


def should_ignore_dir(name: str) -> bool:
    """Check if a directory should be skipped during traversal."""
    return name in IGNORED_DIRS


def normalize_extensions(extensions: Iterable[str] | None) -> set[str] | None:
    """Lower-case extensions and make sure each starts with a dot."""
    if not extensions:
        return None
    return {
        (ext if ext.startswith(".") else f".{ext}").lower()
        for ext in extensions
        if ext
    }


def iter_files(
    root: Path,
    *,
    include_hidden: bool = False,
    skip_binary: bool = True,
    extensions: Iterable[str] | None = None,
    max_depth: int | None = None,
) -> Iterator[Path]:
    """Iterate over files below ``root`` in a stable (sorted) order.

    A file passed as ``root`` is yielded as-is.

    Args:
        root: Root directory (or single file) to search.
        include_hidden: Include hidden files/directories.
        skip_binary: Skip files with binary extensions.
        extensions: Only include files with these extensions.
        max_depth: Maximum directory depth (None for unlimited).

    Yields:
        Path objects for matching files.
    """
    wanted = normalize_extensions(extensions)

    if root.is_file():
        yield root
        return

    def _walk(path: Path, depth: int) -> Iterator[Path]:
        if max_depth is not None and depth > max_depth:
            return

        try:
            entries = sorted(path.iterdir(), key=lambda p: p.name)
        except PermissionError:
            return

        for entry in entries:
            if not include_hidden and is_hidden(entry):
                continue

            if entry.is_dir():
                if should_ignore_dir(entry.name):
                    continue
                yield from _walk(entry, depth + 1)

            elif entry.is_file():
                if skip_binary and is_binary_file(entry):
                    continue
                if wanted and entry.suffix.lower() not in wanted:
                    continue
                yield entry

    yield from _walk(root, 0)


def get_file_size_human(size_bytes: int) -> str:
    """Convert a byte count to a human-readable string."""
    size: float = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"
