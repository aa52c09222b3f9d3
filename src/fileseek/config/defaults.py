"""Default configuration values and paths."""

import os
from pathlib import Path
from typing import Final

DEFAULT_CONFIG_DIR: Final[Path] = Path.home() / ".config" / "fileseek"
DEFAULT_CONFIG_FILE: Final[Path] = DEFAULT_CONFIG_DIR / "config.toml"

# Environment variable names
ENV_CONFIG_PATH: Final[str] = "FILESEEK_CONFIG"
ENV_LOG_LEVEL: Final[str] = "FILESEEK_LOG_LEVEL"
ENV_NO_CACHE: Final[str] = "FILESEEK_NO_CACHE"
ENV_CASE_SENSITIVE: Final[str] = "FILESEEK_CASE_SENSITIVE"
ENV_NO_FUZZY: Final[str] = "FILESEEK_NO_FUZZY"

TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})

# Default config content (TOML)
DEFAULT_CONFIG_TOML: Final[str] = """\
# fileseek configuration

[search]
case_sensitive = false
whole_word = false
fuzzy_enabled = true
fuzzy_near_enabled = true
fuzzy_threshold = 70.0

[streaming]
chunk_size = 65536          # 64 KiB
max_file_size = 67108864    # 64 MiB
max_buffer_size = 1048576   # 1 MiB
max_result_lines = 10000
early_termination = true

[cache]
enabled = true
stats_max_size = 100
content_max_size = 50
content_ttl_seconds = 300.0
word_index_max_size = 50
max_memory_mb = 256

[memory]
medium_threshold = 0.70
high_threshold = 0.85

[output]
default_format = "rich"
color = true

[logging]
level = "WARNING"
json_format = false
"""


def get_config_path() -> Path:
    """Get the configuration file path."""
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_FILE
