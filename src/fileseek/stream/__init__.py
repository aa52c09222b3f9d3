"""Streaming file scanning."""

from fileseek.stream.processor import (
    FileReadResult,
    FileStats,
    MatchedLines,
    StreamingContentProcessor,
    StreamProcessResult,
)

__all__ = [
    "FileReadResult",
    "FileStats",
    "MatchedLines",
    "StreamProcessResult",
    "StreamingContentProcessor",
]
