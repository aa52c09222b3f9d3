"""Plain text output formatter."""

from typing import TYPE_CHECKING

from fileseek.cache.base import CacheStats
from fileseek.config.schema import OutputFormat
from fileseek.output.base import OutputFormatter
from fileseek.query.ast import Expression
from fileseek.utils.files import get_file_size_human

if TYPE_CHECKING:
    from fileseek.engine import SearchReport


class PlainFormatter(OutputFormatter):
    """Plain text output, one matching path per line.

    Suitable for piping to other commands; matched lines are printed
    grep-style as ``path:offset:text``.
    """

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.PLAIN

    def format_report(self, report: "SearchReport") -> str:
        lines: list[str] = []

        for match in report.matches:
            if self._show_lines and match.lines:
                for pos, text in zip(match.line_positions, match.lines):
                    lines.append(f"{match.path}:{pos}:{text}")
                if match.truncated:
                    lines.append(f"{match.path}: (more lines not shown)")
            else:
                lines.append(match.path)

        if self._verbose:
            for failed in report.errors:
                lines.append(f"error: {failed.path}: {failed.error}")
            lines.append("")
            lines.append(
                f"{report.files_matched} of {report.files_searched} files matched "
                f"({len(report.errors)} errors, {report.elapsed_ms:.1f} ms)"
            )

        return "\n".join(lines)

    def format_query(self, ast: Expression) -> str:
        return str(ast)

    def format_cache_stats(self, stats: list[CacheStats]) -> str:
        lines: list[str] = []
        for s in stats:
            lines.append(
                f"{s.name}: {s.size}/{s.capacity} entries, "
                f"{s.hits} hits, {s.misses} misses, {s.evictions} evictions, "
                f"{get_file_size_human(s.memory_bytes)}"
            )
        return "\n".join(lines)

    def format_error(self, message: str, title: str | None = None) -> str:
        if title:
            return f"Error ({title}): {message}"
        return f"Error: {message}"
