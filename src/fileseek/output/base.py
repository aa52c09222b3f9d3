"""Output formatter base class."""

import sys
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, TextIO

from fileseek.cache.base import CacheStats
from fileseek.config.schema import OutputFormat
from fileseek.query.ast import Expression

if TYPE_CHECKING:
    from fileseek.engine import SearchReport


class OutputFormatter(ABC):
    """Renders search reports, parsed queries and cache stats.

    ``format_*`` methods return strings; ``print_*`` methods write them to
    the output (or error) stream.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        show_lines: bool = True,
    ) -> None:
        """Initialize the formatter.

        Args:
            stream: Output stream (defaults to stdout).
            error_stream: Error stream (defaults to stderr).
            verbose: Include timing and error details.
            show_lines: Include matched lines when the report has them.
        """
        self._stream = stream or sys.stdout
        self._error_stream = error_stream or sys.stderr
        self._verbose = verbose
        self._show_lines = show_lines

    @property
    def stream(self) -> TextIO:
        return self._stream

    @property
    def error_stream(self) -> TextIO:
        return self._error_stream

    @property
    def verbose(self) -> bool:
        return self._verbose

    @property
    @abstractmethod
    def format_type(self) -> OutputFormat:
        """Get the format type of this formatter."""

    @abstractmethod
    def format_report(self, report: "SearchReport") -> str:
        """Format the result of a search."""

    @abstractmethod
    def format_query(self, ast: Expression) -> str:
        """Format a parsed query."""

    @abstractmethod
    def format_cache_stats(self, stats: list[CacheStats]) -> str:
        """Format cache statistics."""

    @abstractmethod
    def format_error(self, message: str, title: str | None = None) -> str:
        """Format an error message."""

    def print_report(self, report: "SearchReport") -> None:
        self._write(self.format_report(report))

    def print_query(self, ast: Expression) -> None:
        self._write(self.format_query(ast))

    def print_cache_stats(self, stats: list[CacheStats]) -> None:
        self._write(self.format_cache_stats(stats))

    def print_error(self, message: str, title: str | None = None) -> None:
        self._write(self.format_error(message, title), error=True)

    def _write(self, text: str, error: bool = False) -> None:
        if text:
            print(text, file=self._error_stream if error else self._stream)
