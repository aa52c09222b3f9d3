"""Unit tests for the streaming content processor."""

from pathlib import Path

import pytest

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.config.schema import StreamingConfig
from fileseek.exceptions import ContentTooLargeError, FileReadError
from fileseek.stream.processor import FileStats, StreamingContentProcessor


def contains(needle: str):
    return lambda text: needle in text


@pytest.fixture
def processor() -> StreamingContentProcessor:
    """Processor with small chunks so tests exercise streaming."""
    return StreamingContentProcessor(
        MemoryAwareLRUCache(10, name="file_stats"),
        MemoryAwareLRUCache(10, name="file_content"),
        chunk_size=16,
        max_buffer_size=1024,
    )


class TestFileStats:
    """Tests for get_file_stats."""

    async def test_stats(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test size and directory flag."""
        path = temp_dir / "a.txt"
        path.write_text("hello")

        stats = await processor.get_file_stats(path)

        assert stats.size == 5
        assert not stats.is_directory
        assert (await processor.get_file_stats(temp_dir)).is_directory

    async def test_stats_are_cached(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test a second stat comes from the cache."""
        path = temp_dir / "a.txt"
        path.write_text("hello")

        await processor.get_file_stats(path)
        await processor.get_file_stats(path)

        assert processor.stats_cache is not None
        assert processor.stats_cache.stats().hits == 1

    async def test_missing_file(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test stat errors are FileReadError."""
        with pytest.raises(FileReadError) as exc_info:
            await processor.get_file_stats(temp_dir / "missing.txt")
        assert "missing.txt" in exc_info.value.path


class TestReadFile:
    """Tests for read_file."""

    async def test_read(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test whole-file reads fill the content cache."""
        path = temp_dir / "a.txt"
        path.write_text("héllo")

        result = await processor.read_file(path)

        assert result.error is None
        assert result.content == "héllo"
        assert result.stats == FileStats(
            size=6, mtime=path.stat().st_mtime, is_directory=False
        )
        assert processor.content_cache is not None
        assert len(processor.content_cache) == 1

    async def test_invalid_utf8_is_replaced(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test undecodable bytes become replacement characters."""
        path = temp_dir / "bin.dat"
        path.write_bytes(b"ok \xff end")

        result = await processor.read_file(path)

        assert result.content == "ok � end"

    async def test_errors_are_returned(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test read_file reports errors instead of raising."""
        result = await processor.read_file(temp_dir / "missing.txt")
        assert isinstance(result.error, FileReadError)
        assert result.content is None


class TestProcessInChunks:
    """Tests for process_in_chunks."""

    async def test_small_file(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test files below one chunk are matched whole."""
        path = temp_dir / "small.txt"
        path.write_text("disk full")

        result = await processor.process_in_chunks(
            path, contains("full"), early_termination=False
        )

        assert result.matched
        assert result.error is None
        assert result.matched_chunks == ["disk full"]

    async def test_early_termination_has_no_chunks(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test matched chunks are not collected in early termination mode."""
        path = temp_dir / "big.txt"
        path.write_text("needle " * 20)

        result = await processor.process_in_chunks(path, contains("needle"))

        assert result.matched
        assert result.matched_chunks is None

    async def test_collects_matching_chunks(self, temp_dir: Path) -> None:
        """Test every matching chunk is kept up to the cap."""
        path = temp_dir / "big.txt"
        path.write_text("abcdefgh" * 10)
        processor = StreamingContentProcessor(chunk_size=8, max_matched_chunks=3)

        result = await processor.process_in_chunks(
            path, contains("abc"), early_termination=False
        )

        assert result.matched
        assert result.matched_chunks == ["abcdefgh"] * 3

    async def test_match_across_chunk_boundary(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test a term split by a chunk boundary is still found."""
        path = temp_dir / "split.txt"
        path.write_text("0123456789abneedle and more text")

        result = await processor.process_in_chunks(path, contains("needle"))

        assert result.matched

    async def test_match_found_when_buffer_flushes(self, temp_dir: Path) -> None:
        """Test the buffer is checked when it outgrows its cap."""
        path = temp_dir / "flush.txt"
        path.write_text("0123456789abneedle\n" + "z" * 40 + "\n")
        processor = StreamingContentProcessor(chunk_size=16, max_buffer_size=20)

        result = await processor.process_in_chunks(path, contains("needle"))

        assert result.matched

    async def test_matches_whole_file_evaluation(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test chunked scanning agrees with reading the file whole."""
        path = temp_dir / "log.txt"
        path.write_text("line one\nline two has a timeout\nline three\n" * 3)

        for needle in ("timeout", "three\nline", "absent"):
            chunked = await processor.process_in_chunks(path, contains(needle))
            whole = await processor.read_file(path)
            assert whole.content is not None
            assert chunked.matched == (needle in whole.content)

    async def test_multibyte_characters_not_split(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test multi-byte characters survive chunk boundaries."""
        path = temp_dir / "utf8.txt"
        path.write_text("é" * 20, encoding="utf-8")

        broken = await processor.process_in_chunks(
            path, contains("�"), chunk_size=7
        )
        intact = await processor.process_in_chunks(path, contains("éé"), chunk_size=7)

        assert not broken.matched
        assert intact.matched

    async def test_empty_file(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test an empty file never matches."""
        path = temp_dir / "empty.txt"
        path.write_text("")

        result = await processor.process_in_chunks(path, lambda text: True)

        assert not result.matched
        assert result.error is None

    async def test_missing_file(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test a missing file is reported in the result."""
        result = await processor.process_in_chunks(
            temp_dir / "missing.txt", contains("x")
        )
        assert not result.matched
        assert isinstance(result.error, FileReadError)

    async def test_directory(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test a directory is reported as an error."""
        result = await processor.process_in_chunks(temp_dir, contains("x"))
        assert isinstance(result.error, FileReadError)
        assert "directory" in str(result.error)

    async def test_too_large(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test the size limit is enforced before reading."""
        path = temp_dir / "big.txt"
        path.write_text("x" * 100)

        result = await processor.process_in_chunks(
            path, contains("x"), max_file_size=50
        )

        assert not result.matched
        assert isinstance(result.error, ContentTooLargeError)
        assert result.error.size == 100
        assert result.error.limit == 50


class TestExtractMatchedLines:
    """Tests for extract_matched_lines."""

    async def test_lines_and_byte_offsets(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test matching lines come back with their byte offsets."""
        path = temp_dir / "log.txt"
        path.write_text("alpha\nbeta error\ngamma\nerror again\n")

        result = await processor.extract_matched_lines(path, contains("error"))

        assert result.lines == ["beta error", "error again"]
        assert result.positions == [6, 23]
        assert not result.truncated

    async def test_offsets_count_bytes(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test offsets are in bytes, not characters."""
        path = temp_dir / "utf8.txt"
        path.write_text("é\nerror\n", encoding="utf-8")

        result = await processor.extract_matched_lines(path, contains("error"))

        assert result.positions == [3]

    async def test_small_file_last_line(self, temp_dir: Path) -> None:
        """Test the last line counts without a trailing newline."""
        path = temp_dir / "small.txt"
        path.write_text("one\nerror")
        processor = StreamingContentProcessor()

        result = await processor.extract_matched_lines(path, contains("error"))

        assert result.lines == ["error"]
        assert result.positions == [4]

    async def test_crlf(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test carriage returns are stripped."""
        path = temp_dir / "crlf.txt"
        path.write_bytes(b"first line\r\nerror here\r\nlast line here\r\n")

        result = await processor.extract_matched_lines(path, contains("error"))

        assert result.lines == ["error here"]

    async def test_truncated(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test scanning stops at max_results."""
        path = temp_dir / "many.txt"
        path.write_text("error 1\nerror 2\nerror 3\n")

        result = await processor.extract_matched_lines(
            path, contains("error"), max_results=2
        )

        assert result.lines == ["error 1", "error 2"]
        assert result.truncated

    @pytest.mark.parametrize("chunk_size", [4, 1024])
    async def test_exactly_max_results_not_truncated(
        self, temp_dir: Path, chunk_size: int
    ) -> None:
        """Test hitting the cap with nothing left over is not truncation."""
        path = temp_dir / "two.txt"
        path.write_text("error 1\nerror 2\nok\n")
        processor = StreamingContentProcessor(chunk_size=chunk_size)

        result = await processor.extract_matched_lines(
            path, contains("error"), max_results=2
        )

        assert result.lines == ["error 1", "error 2"]
        assert not result.truncated

    @pytest.mark.parametrize("chunk_size", [4, 1024])
    async def test_offsets_after_invalid_utf8(
        self, temp_dir: Path, chunk_size: int
    ) -> None:
        """Test undecodable bytes do not shift later offsets."""
        path = temp_dir / "bad.bin"
        path.write_bytes(b"\xff\xfe\nhit\n")
        processor = StreamingContentProcessor(chunk_size=chunk_size)

        result = await processor.extract_matched_lines(path, contains("hit"))

        assert result.lines == ["hit"]
        assert result.positions == [3]

    async def test_very_long_line(self, temp_dir: Path) -> None:
        """Test a line longer than the buffer does not stall the scan."""
        path = temp_dir / "long.txt"
        path.write_text("x" * 30 + "\nerror\n")
        processor = StreamingContentProcessor(chunk_size=4, max_buffer_size=10)

        result = await processor.extract_matched_lines(path, contains("error"))

        assert result.lines == ["error"]
        assert result.positions == [31]

    async def test_errors(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test errors are reported in the result."""
        result = await processor.extract_matched_lines(
            temp_dir / "missing.txt", contains("x")
        )
        assert isinstance(result.error, FileReadError)
        assert result.lines == []


class TestProcessorSetup:
    """Tests for construction helpers."""

    def test_from_config(self) -> None:
        """Test settings come from StreamingConfig."""
        config = StreamingConfig(chunk_size=4096, max_file_size=1_000_000)
        processor = StreamingContentProcessor.from_config(config)
        assert processor.chunk_size == 4096
        assert processor.max_file_size == 1_000_000

    async def test_clear_caches(
        self, processor: StreamingContentProcessor, temp_dir: Path
    ) -> None:
        """Test clearing empties both caches."""
        path = temp_dir / "a.txt"
        path.write_text("hello")
        await processor.read_file(path)

        processor.clear_caches()

        assert processor.stats_cache is not None
        assert processor.content_cache is not None
        assert len(processor.stats_cache) == 0
        assert len(processor.content_cache) == 0
