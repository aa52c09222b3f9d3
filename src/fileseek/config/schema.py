"""Pydantic models for fileseek configuration."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

KIB = 1024
MIB = 1024 * 1024


class OutputFormat(str, Enum):
    """Supported output formats."""

    RICH = "rich"
    PLAIN = "plain"
    JSON = "json"


class SearchConfig(BaseModel):
    """Default match options for queries."""

    case_sensitive: bool = False
    whole_word: bool = False
    fuzzy_enabled: bool = True
    fuzzy_near_enabled: bool = True
    fuzzy_threshold: float = Field(default=70.0, ge=0.0, le=100.0)
    max_content_size: int | None = Field(default=64 * MIB, gt=0)


class StreamingConfig(BaseModel):
    """Chunked file reading."""

    chunk_size: int = Field(default=64 * KIB, gt=0)
    max_file_size: int | None = Field(default=64 * MIB, gt=0)
    max_buffer_size: int = Field(default=1 * MIB, gt=0)
    max_result_lines: int = Field(default=10_000, gt=0)
    max_matched_chunks: int = Field(default=100, ge=0)
    early_termination: bool = True


class CacheConfig(BaseModel):
    """Sizes and lifetimes of the in-memory caches."""

    enabled: bool = True
    stats_max_size: int = Field(default=100, gt=0)
    stats_ttl_seconds: float | None = 60.0
    content_max_size: int = Field(default=50, gt=0)
    content_ttl_seconds: float | None = 300.0  # 5 minutes
    content_max_file_size: int = Field(default=1 * MIB, ge=0)
    word_index_max_size: int = Field(default=50, gt=0)
    fuzzy_max_size: int = Field(default=2000, gt=0)
    proximity_max_size: int = Field(default=2000, gt=0)
    proximity_ttl_seconds: float | None = 1200.0  # 20 minutes
    max_memory_mb: int | None = Field(default=256, gt=0)


class MemoryConfig(BaseModel):
    """Memory pressure thresholds (fraction of system memory in use)."""

    medium_threshold: float = Field(default=0.70, gt=0.0, le=1.0)
    high_threshold: float = Field(default=0.85, gt=0.0, le=1.0)
    history_limit: int = Field(default=20, gt=0)
    poll_interval_seconds: float = Field(default=30.0, gt=0.0)

    @model_validator(mode="after")
    def _check_order(self) -> "MemoryConfig":
        if self.medium_threshold > self.high_threshold:
            raise ValueError("medium_threshold must not exceed high_threshold")
        return self


class OutputConfig(BaseModel):
    """Output configuration."""

    default_format: OutputFormat = OutputFormat.RICH
    color: bool = True
    show_lines: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    file: Path | None = None  # Default: no file logging
    json_format: bool = False


class FileSeekConfig(BaseModel):
    """Root configuration for fileseek."""

    model_config = ConfigDict(use_enum_values=True)

    search: SearchConfig = Field(default_factory=SearchConfig)
    streaming: StreamingConfig = Field(default_factory=StreamingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
