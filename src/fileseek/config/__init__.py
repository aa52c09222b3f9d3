"""Configuration management."""

from fileseek.config.loader import apply_env_overrides, load_config
from fileseek.config.schema import (
    CacheConfig,
    FileSeekConfig,
    LoggingConfig,
    MemoryConfig,
    OutputConfig,
    OutputFormat,
    SearchConfig,
    StreamingConfig,
)

__all__ = [
    "CacheConfig",
    "FileSeekConfig",
    "LoggingConfig",
    "MemoryConfig",
    "OutputConfig",
    "OutputFormat",
    "SearchConfig",
    "StreamingConfig",
    "apply_env_overrides",
    "load_config",
]
