"""Pytest fixtures for fileseek tests."""

import logging
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.config.schema import FileSeekConfig
from fileseek.search.evaluator import BooleanEvaluator
from fileseek.search.fuzzy import FuzzyMatcher
from fileseek.search.options import MatchOptions
from fileseek.search.terms import TermMatcher
from fileseek.search.words import WordBoundaryIndexer

FILESEEK_ENV_VARS = (
    "FILESEEK_CONFIG",
    "FILESEEK_LOG_LEVEL",
    "FILESEEK_NO_CACHE",
    "FILESEEK_CASE_SENSITIVE",
    "FILESEEK_NO_FUZZY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of config tests."""
    for name in FILESEEK_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo setup_logging() calls made by CLI tests."""
    package_logger = logging.getLogger("fileseek")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    propagate = package_logger.propagate
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
    package_logger.propagate = propagate


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_files(temp_dir: Path) -> Path:
    """Create a small tree of text files."""
    (temp_dir / "app.log").write_text(
        "startup complete\n"
        "disk error: device is full\n"
        "retrying write after timeout\n"
    )
    (temp_dir / "notes.md").write_text("# Notes\n\nThe quick brown fox jumps.\n")
    (temp_dir / "main.py").write_text("def main():\n    print('Hello')\n")
    (temp_dir / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n error")

    subdir = temp_dir / "src"
    subdir.mkdir()
    (subdir / "service.py").write_text("# handles timeout and error recovery\n")

    hidden = temp_dir / ".hidden"
    hidden.mkdir()
    (hidden / "secret.txt").write_text("error\n")

    return temp_dir


@pytest.fixture
def default_config() -> FileSeekConfig:
    """Get default configuration."""
    return FileSeekConfig()


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Create a test config file."""
    config_path = temp_dir / "config.toml"
    config_path.write_text("""
[search]
case_sensitive = true
fuzzy_threshold = 80.0

[streaming]
chunk_size = 4096

[cache]
enabled = false

[output]
default_format = "plain"
""")
    return config_path


@pytest.fixture
def options() -> MatchOptions:
    """Default match options (case-insensitive, fuzzy on)."""
    return MatchOptions()


@pytest.fixture
def exact_options() -> MatchOptions:
    """Match options with fuzzy matching off."""
    return MatchOptions(fuzzy_enabled=False, fuzzy_near_enabled=False)


@pytest.fixture
def evaluator() -> BooleanEvaluator:
    """Evaluator wired with caches, like the engine builds it."""
    indexer = WordBoundaryIndexer(MemoryAwareLRUCache(50, name="word_index"))
    fuzzy = FuzzyMatcher(cache=MemoryAwareLRUCache(100, name="fuzzy_results"))
    return BooleanEvaluator(
        TermMatcher(fuzzy),
        indexer,
        MemoryAwareLRUCache(100, name="proximity_results"),
    )
