"""Search engine: wires caches, matchers and the stream processor together.

The engine is the one place that owns shared state. Everything below it
receives its caches through constructor arguments.
"""

import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fileseek.cache.base import CacheStats, MemoryPressure
from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.cache.memory import MemoryMonitor
from fileseek.cache.registry import CacheProfile, CacheRegistry
from fileseek.config.schema import MIB, FileSeekConfig
from fileseek.query.ast import Expression, iter_literals
from fileseek.query.parser import parse_query
from fileseek.search.evaluator import BooleanEvaluator
from fileseek.search.fuzzy import FuzzyMatcher
from fileseek.search.options import MatchOptions
from fileseek.search.terms import TermMatcher
from fileseek.search.words import WordBoundaryIndexer
from fileseek.stream.processor import Matcher, StreamingContentProcessor
from fileseek.utils.files import iter_files
from fileseek.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONCURRENCY = 8

STATS_CACHE = "file_stats"
CONTENT_CACHE = "file_content"
WORD_INDEX_CACHE = "word_index"
FUZZY_CACHE = "fuzzy_results"
PROXIMITY_CACHE = "proximity_results"


@dataclass
class FileMatch:
    """Result of evaluating a query against one file."""

    path: str
    matched: bool
    lines: list[str] = field(default_factory=list)
    line_positions: list[int] = field(default_factory=list)
    truncated: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": self.path, "matched": self.matched}
        if self.lines:
            data["lines"] = [
                {"offset": pos, "text": line}
                for pos, line in zip(self.line_positions, self.lines)
            ]
            data["truncated"] = self.truncated
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class SearchReport:
    """Outcome of a search over a file tree."""

    query: str
    root: str
    matches: list[FileMatch] = field(default_factory=list)
    errors: list[FileMatch] = field(default_factory=list)
    files_searched: int = 0
    elapsed_ms: float = 0.0

    @property
    def files_matched(self) -> int:
        return len(self.matches)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "root": self.root,
            "files_searched": self.files_searched,
            "files_matched": self.files_matched,
            "elapsed_ms": round(self.elapsed_ms, 2),
            "matches": [m.to_dict() for m in self.matches],
            "errors": [{"path": e.path, "error": e.error} for e in self.errors],
        }


class SearchEngine:
    """Evaluates queries against files.

    Usage:
        engine = SearchEngine(load_config())
        report = engine.search(Path("."), 'NEAR(error, timeout, 5)')
        for match in report.matches:
            print(match.path)
    """

    def __init__(self, config: FileSeekConfig | None = None) -> None:
        """Initialize the engine and its caches.

        Args:
            config: Configuration; defaults are used when None.
        """
        self.config = config or FileSeekConfig()
        self.registry = CacheRegistry()

        cache_config = self.config.cache
        enabled = cache_config.enabled

        def make(
            name: str,
            max_size: int,
            ttl: float | None = None,
            profile: CacheProfile = CacheProfile.HEAVY,
            max_memory_bytes: int | None = None,
        ) -> MemoryAwareLRUCache[Any, Any] | None:
            if not enabled:
                return None
            return self.registry.get_or_create_cache(
                name,
                max_size,
                ttl,
                max_memory_bytes=max_memory_bytes,
                profile=profile,
            )

        content_memory = (
            cache_config.max_memory_mb * MIB if cache_config.max_memory_mb else None
        )

        self.indexer = WordBoundaryIndexer(
            make(WORD_INDEX_CACHE, cache_config.word_index_max_size)
        )
        self.fuzzy = FuzzyMatcher(
            self.config.search.fuzzy_threshold,
            make(FUZZY_CACHE, cache_config.fuzzy_max_size),
        )
        self.term_matcher = TermMatcher(self.fuzzy)
        self.evaluator = BooleanEvaluator(
            self.term_matcher,
            self.indexer,
            make(
                PROXIMITY_CACHE,
                cache_config.proximity_max_size,
                cache_config.proximity_ttl_seconds,
            ),
        )
        self.processor = StreamingContentProcessor.from_config(
            self.config.streaming,
            stats_cache=make(
                STATS_CACHE,
                cache_config.stats_max_size,
                cache_config.stats_ttl_seconds,
                CacheProfile.LIGHT,
            ),
            content_cache=make(
                CONTENT_CACHE,
                cache_config.content_max_size,
                cache_config.content_ttl_seconds,
                max_memory_bytes=content_memory,
            ),
            content_cache_max_file_size=cache_config.content_max_file_size,
        )

        memory = self.config.memory
        self.monitor = MemoryMonitor(
            memory.medium_threshold,
            memory.high_threshold,
            history_limit=memory.history_limit,
        )
        self.registry.attach(self.monitor)

    def default_options(self) -> MatchOptions:
        return MatchOptions.from_config(self.config.search)

    def search(
        self,
        root: Path | str,
        query: str | Expression,
        options: MatchOptions | None = None,
        *,
        extensions: Iterable[str] | None = None,
        include_hidden: bool = False,
        max_depth: int | None = None,
        lines: bool = False,
    ) -> SearchReport:
        """Search every file below ``root``; blocking wrapper around ``search_async``.

        Raises:
            QueryParseError: If ``query`` cannot be parsed.
            InvalidPatternError: If a regex literal does not compile.
        """
        return asyncio.run(
            self.search_async(
                root,
                query,
                options,
                extensions=extensions,
                include_hidden=include_hidden,
                max_depth=max_depth,
                lines=lines,
            )
        )

    async def search_async(
        self,
        root: Path | str,
        query: str | Expression,
        options: MatchOptions | None = None,
        *,
        extensions: Iterable[str] | None = None,
        include_hidden: bool = False,
        max_depth: int | None = None,
        lines: bool = False,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> SearchReport:
        """Search every file below ``root``.

        Files that cannot be read or are too large are reported in
        ``errors``; they never stop the search.
        """
        ast = parse_query(query) if isinstance(query, str) else query
        options = options or self.default_options()
        root_path = Path(root)
        start = time.perf_counter()

        paths = list(
            iter_files(
                root_path,
                include_hidden=include_hidden,
                extensions=extensions,
                max_depth=max_depth,
            )
        )
        semaphore = asyncio.Semaphore(max(1, concurrency))

        async def run(path: Path) -> FileMatch:
            async with semaphore:
                return await self.search_file(path, ast, options, lines=lines)

        results = await asyncio.gather(*(run(path) for path in paths))

        self.monitor.check()

        report = SearchReport(
            query=str(query),
            root=str(root_path),
            files_searched=len(paths),
        )
        for result in results:
            if result.error:
                report.errors.append(result)
            elif result.matched:
                report.matches.append(result)
        report.elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "Searched %d files, %d matched, %d errors",
            report.files_searched,
            report.files_matched,
            len(report.errors),
        )
        return report

    async def search_file(
        self,
        path: Path | str,
        ast: Expression,
        options: MatchOptions | None = None,
        *,
        lines: bool = False,
    ) -> FileMatch:
        """Evaluate ``ast`` against one file."""
        options = options or self.default_options()
        streaming = self.config.streaming

        result = await self.processor.process_in_chunks(
            path,
            self.evaluator.create_matcher(ast, options),
            early_termination=streaming.early_termination,
        )
        match = FileMatch(
            path=str(path),
            matched=result.matched,
            error=str(result.error) if result.error else None,
        )

        if lines and match.matched and not match.error:
            extracted = await self.processor.extract_matched_lines(
                path,
                self.line_matcher(ast, options),
                max_results=streaming.max_result_lines,
            )
            match.lines = extracted.lines
            match.line_positions = extracted.positions
            match.truncated = extracted.truncated

        return match

    def line_matcher(self, ast: Expression, options: MatchOptions) -> Matcher:
        """Predicate accepting lines that contain any positive term of ``ast``."""
        literals = iter_literals(ast, positive_only=True)

        def matcher(line: str) -> bool:
            return any(
                self.term_matcher.matches(line, literal.term, options)
                for literal in literals
            )

        return matcher

    def handle_memory_pressure(self, level: MemoryPressure | str) -> dict[str, int]:
        """Trim caches for the given pressure level."""
        return self.registry.apply_memory_pressure(level)

    def cache_stats(self) -> list[CacheStats]:
        return self.registry.stats()

    def clear_caches(self) -> int:
        return self.registry.clear_all()

    def start_memory_monitor(self) -> None:
        self.monitor.start_monitoring(self.config.memory.poll_interval_seconds)

    def stop_memory_monitor(self) -> None:
        self.monitor.stop_monitoring()
