"""JSON output formatter."""

import json
from typing import TYPE_CHECKING, Any, TextIO

from fileseek.cache.base import CacheStats
from fileseek.config.schema import OutputFormat
from fileseek.output.base import OutputFormatter
from fileseek.query.ast import Expression, to_dict

if TYPE_CHECKING:
    from fileseek.engine import SearchReport


class JSONFormatter(OutputFormatter):
    """JSON output for scripts and other tools."""

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        show_lines: bool = True,
        indent: int | None = 2,
        ensure_ascii: bool = False,
    ) -> None:
        """Initialize JSON formatter.

        Args:
            stream: Output stream.
            error_stream: Error stream.
            verbose: Accepted for interface parity; JSON always has all fields.
            show_lines: Include matched lines.
            indent: JSON indentation (None for compact).
            ensure_ascii: Whether to escape non-ASCII characters.
        """
        super().__init__(stream, error_stream, verbose, show_lines)
        self._indent = indent
        self._ensure_ascii = ensure_ascii

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.JSON

    def _to_json(self, data: Any) -> str:
        return json.dumps(
            data,
            indent=self._indent,
            ensure_ascii=self._ensure_ascii,
            default=str,
        )

    def format_report(self, report: "SearchReport") -> str:
        data = report.to_dict()
        if not self._show_lines:
            for match in data["matches"]:
                match.pop("lines", None)
                match.pop("truncated", None)
        return self._to_json(data)

    def format_query(self, ast: Expression) -> str:
        return self._to_json({"query": str(ast), "ast": to_dict(ast)})

    def format_cache_stats(self, stats: list[CacheStats]) -> str:
        return self._to_json({"caches": [s.to_dict() for s in stats]})

    def format_error(self, message: str, title: str | None = None) -> str:
        output: dict[str, Any] = {"success": False, "error": message}
        if title:
            output["title"] = title
        return self._to_json(output)
