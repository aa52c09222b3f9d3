"""Chunked file scanning with a caller-supplied matcher.

Files smaller than one chunk are read whole; larger files are streamed in
fixed-size chunks through an incremental UTF-8 decoder so multi-byte
characters are never split between matcher calls.
"""

import codecs
import logging
import stat as stat_module
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
import aiofiles.os

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.config.schema import KIB, MIB, StreamingConfig
from fileseek.exceptions import ContentTooLargeError, FileReadError
from fileseek.utils.logging import get_logger, log_with_context
from fileseek.utils.retry import io_retry

logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 64 * KIB
DEFAULT_MAX_BUFFER_SIZE = 1 * MIB
DEFAULT_MAX_RESULTS = 10_000
DEFAULT_MAX_MATCHED_CHUNKS = 100
CONTENT_CACHE_MAX_FILE_SIZE = 1 * MIB

Matcher = Callable[[str], bool]


@dataclass(frozen=True)
class FileStats:
    """Subset of ``os.stat`` results used for size checks and caching."""

    size: int
    mtime: float
    is_directory: bool


@dataclass
class FileReadResult:
    """Outcome of a whole-file read; ``error`` is set instead of raising."""

    content: str | None = None
    error: Exception | None = None
    stats: FileStats | None = None


@dataclass
class StreamProcessResult:
    """Outcome of a chunked scan.

    Attributes:
        matched: True if any matcher call returned True.
        error: Stat, size or read error that stopped the scan, if any.
        matched_chunks: Text that matched (bounded); None when early
            termination was requested.
    """

    matched: bool = False
    error: Exception | None = None
    matched_chunks: list[str] | None = None


@dataclass
class MatchedLines:
    """Lines accepted by a per-line matcher.

    Attributes:
        lines: Matching lines without their newline.
        positions: Byte offset of the start of each matching line.
        truncated: True if a matching line was dropped at the result cap.
        error: Error that stopped the scan, if any.
    """

    lines: list[str] = field(default_factory=list)
    positions: list[int] = field(default_factory=list)
    truncated: bool = False
    error: Exception | None = None


@io_retry
async def _stat(path: Path) -> FileStats:
    st = await aiofiles.os.stat(path)
    return FileStats(
        size=st.st_size,
        mtime=st.st_mtime,
        is_directory=stat_module.S_ISDIR(st.st_mode),
    )


@io_retry
async def _read_bytes(path: Path) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


class StreamingContentProcessor:
    """Reads files for matching without holding more than a bounded buffer.

    Usage:
        processor = StreamingContentProcessor()
        result = await processor.process_in_chunks(path, matcher)
        if result.error:
            ...
    """

    def __init__(
        self,
        stats_cache: MemoryAwareLRUCache[str, FileStats] | None = None,
        content_cache: MemoryAwareLRUCache[str, str] | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_file_size: int | None = None,
        max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE,
        max_matched_chunks: int = DEFAULT_MAX_MATCHED_CHUNKS,
        content_cache_max_file_size: int = CONTENT_CACHE_MAX_FILE_SIZE,
    ) -> None:
        """Initialize the processor.

        Args:
            stats_cache: Cache of file stats keyed by path.
            content_cache: Cache of small file contents.
            chunk_size: Default read size in bytes.
            max_file_size: Default size limit in bytes (None = unlimited).
            max_buffer_size: Accumulation buffer cap in characters.
            max_matched_chunks: Most matched chunks kept per scan.
            content_cache_max_file_size: Only files up to this size are
                kept in the content cache.
        """
        self.stats_cache = stats_cache
        self.content_cache = content_cache
        self.chunk_size = chunk_size
        self.max_file_size = max_file_size
        self.max_buffer_size = max_buffer_size
        self.max_matched_chunks = max_matched_chunks
        self.content_cache_max_file_size = content_cache_max_file_size

    @classmethod
    def from_config(
        cls,
        config: StreamingConfig,
        stats_cache: MemoryAwareLRUCache[str, FileStats] | None = None,
        content_cache: MemoryAwareLRUCache[str, str] | None = None,
        content_cache_max_file_size: int = CONTENT_CACHE_MAX_FILE_SIZE,
    ) -> "StreamingContentProcessor":
        return cls(
            stats_cache,
            content_cache,
            chunk_size=config.chunk_size,
            max_file_size=config.max_file_size,
            max_buffer_size=config.max_buffer_size,
            max_matched_chunks=config.max_matched_chunks,
            content_cache_max_file_size=content_cache_max_file_size,
        )

    async def get_file_stats(self, path: Path | str) -> FileStats:
        """Stat ``path``, using the stats cache when available.

        Raises:
            FileReadError: If the file cannot be stat'ed.
        """
        key = str(path)
        if self.stats_cache is not None:
            cached = self.stats_cache.get(key)
            if cached is not None:
                return cached

        try:
            stats = await _stat(Path(path))
        except OSError as e:
            raise FileReadError(key, e.strerror or str(e)) from e

        if self.stats_cache is not None:
            self.stats_cache.set(key, stats)
        return stats

    async def read_file(
        self, path: Path | str, max_file_size: int | None = None
    ) -> FileReadResult:
        """Read a whole file as text; errors are returned, not raised."""
        result = FileReadResult()
        try:
            stats = await self._checked_stats(path, max_file_size)
            result.stats = stats
            result.content = await self._read_text(path, stats)
        except (FileReadError, ContentTooLargeError) as e:
            result.error = e
        return result

    async def process_in_chunks(
        self,
        path: Path | str,
        matcher: Matcher,
        chunk_size: int | None = None,
        max_file_size: int | None = None,
        early_termination: bool = True,
    ) -> StreamProcessResult:
        """Run ``matcher`` over a file chunk by chunk.

        Each chunk is checked as it arrives; the text is also accumulated
        in a buffer that is checked when it grows past ``max_buffer_size``
        (up to its last newline) and once more at the end of the file, so
        a match spanning chunk boundaries is still found.

        Args:
            path: File to scan.
            matcher: Predicate over text.
            chunk_size: Bytes per read (default: processor setting).
            max_file_size: Size limit in bytes (default: processor setting).
            early_termination: Stop at the first match.

        Returns:
            StreamProcessResult; stat, size and read errors are stored in
            ``error``.
        """
        chunk_size = chunk_size or self.chunk_size
        result = StreamProcessResult(
            matched_chunks=None if early_termination else []
        )

        try:
            stats = await self._checked_stats(path, max_file_size)

            if stats.size < chunk_size:
                content = await self._read_text(path, stats)
                if content and matcher(content):
                    result.matched = True
                    self._keep_chunk(result, content)
                return result

            await self._stream(path, matcher, chunk_size, early_termination, result)
        except (FileReadError, ContentTooLargeError) as e:
            result.error = e
        except OSError as e:
            result.error = FileReadError(str(path), e.strerror or str(e))

        if result.error is not None:
            log_with_context(
                logger, logging.DEBUG, "Scan failed", path=str(path), error=result.error
            )
        return result

    async def extract_matched_lines(
        self,
        path: Path | str,
        matcher: Matcher,
        chunk_size: int | None = None,
        max_file_size: int | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> MatchedLines:
        """Return every line accepted by ``matcher`` with its byte offset.

        Scanning stops at the first matching line beyond ``max_results``;
        the result is then marked ``truncated``.
        """
        chunk_size = chunk_size or self.chunk_size
        result = MatchedLines()

        try:
            stats = await self._checked_stats(path, max_file_size)
            if stats.size < chunk_size:
                data = await _read_bytes(Path(path))
                self._collect_lines(data, 0, True, matcher, result, max_results)
                return result

            async with aiofiles.open(path, "rb") as f:
                pending = b""
                offset = 0
                while not result.truncated:
                    chunk = await f.read(chunk_size)
                    if not chunk:
                        break
                    pending += chunk
                    consumed = self._collect_lines(
                        pending, offset, False, matcher, result, max_results
                    )
                    if consumed == 0 and len(pending) > self.max_buffer_size:
                        # One very long line; treat the buffer as a line of its own
                        consumed = len(pending)
                        self._add_line(pending, offset, matcher, result, max_results)
                    pending = pending[consumed:]
                    offset += consumed

                if pending and not result.truncated:
                    self._add_line(pending, offset, matcher, result, max_results)
        except (FileReadError, ContentTooLargeError) as e:
            result.error = e
        except OSError as e:
            result.error = FileReadError(str(path), e.strerror or str(e))
        return result

    def clear_caches(self) -> None:
        if self.stats_cache is not None:
            self.stats_cache.clear()
        if self.content_cache is not None:
            self.content_cache.clear()

    async def _checked_stats(
        self, path: Path | str, max_file_size: int | None
    ) -> FileStats:
        stats = await self.get_file_stats(path)
        if stats.is_directory:
            raise FileReadError(str(path), "is a directory")

        limit = max_file_size if max_file_size is not None else self.max_file_size
        if limit is not None and stats.size > limit:
            raise ContentTooLargeError(stats.size, limit, path=str(path))
        return stats

    async def _read_text(self, path: Path | str, stats: FileStats) -> str:
        cache = (
            self.content_cache
            if stats.size <= self.content_cache_max_file_size
            else None
        )
        key = f"{path}:{stats.mtime}:{stats.size}"
        if cache is not None:
            cached = cache.get(key)
            if cached is not None:
                return cached

        try:
            data = await _read_bytes(Path(path))
        except OSError as e:
            raise FileReadError(str(path), e.strerror or str(e)) from e

        content = data.decode("utf-8", errors="replace")
        if cache is not None:
            cache.set(key, content)
        return content

    async def _stream(
        self,
        path: Path | str,
        matcher: Matcher,
        chunk_size: int,
        early_termination: bool,
        result: StreamProcessResult,
    ) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        buffer = ""

        async with aiofiles.open(path, "rb") as f:
            while True:
                data = await f.read(chunk_size)
                final = not data
                text = decoder.decode(data, final=final)

                if text:
                    if matcher(text):
                        result.matched = True
                        self._keep_chunk(result, text)
                        if early_termination:
                            return

                    buffer += text
                    if len(buffer) > self.max_buffer_size:
                        buffer = self._flush_buffer(buffer, matcher, result)

                if final:
                    break

        if not result.matched and buffer and matcher(buffer):
            result.matched = True
            self._keep_chunk(result, buffer)

    def _flush_buffer(
        self, buffer: str, matcher: Matcher, result: StreamProcessResult
    ) -> str:
        """Check the buffer up to its last newline and return the remainder."""
        cut = buffer.rfind("\n") + 1
        if cut == 0:
            cut = len(buffer)
        head, rest = buffer[:cut], buffer[cut:]
        if not result.matched and matcher(head):
            result.matched = True
            self._keep_chunk(result, head)
        return rest

    def _keep_chunk(self, result: StreamProcessResult, text: str) -> None:
        chunks = result.matched_chunks
        if chunks is not None and len(chunks) < self.max_matched_chunks:
            chunks.append(text)

    def _collect_lines(
        self,
        data: bytes,
        offset: int,
        final: bool,
        matcher: Matcher,
        result: MatchedLines,
        max_results: int,
    ) -> int:
        """Match complete lines in ``data``; returns the bytes consumed."""
        start = 0
        while not result.truncated:
            end = data.find(b"\n", start)
            if end == -1:
                break
            self._add_line(
                data[start:end], offset + start, matcher, result, max_results
            )
            start = end + 1

        if final and not result.truncated and start < len(data):
            self._add_line(data[start:], offset + start, matcher, result, max_results)
            start = len(data)
        return start

    def _add_line(
        self,
        raw: bytes,
        position: int,
        matcher: Matcher,
        result: MatchedLines,
        max_results: int,
    ) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r")
        if not matcher(line):
            return
        if len(result.lines) >= max_results:
            result.truncated = True
            return
        result.lines.append(line)
        result.positions.append(position)
