"""Rich terminal output formatter."""

from io import StringIO
from typing import TYPE_CHECKING, Any, TextIO

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from fileseek.cache.base import CacheStats
from fileseek.config.schema import OutputFormat
from fileseek.output.base import OutputFormatter
from fileseek.query.ast import And, Expression, Literal, Near, Not, Or
from fileseek.utils.files import get_file_size_human

if TYPE_CHECKING:
    from fileseek.engine import SearchReport


class RichFormatter(OutputFormatter):
    """Colored terminal output using Rich tables, trees and panels."""

    def __init__(
        self,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        verbose: bool = False,
        show_lines: bool = True,
        width: int | None = None,
        color: bool = True,
    ) -> None:
        """Initialize rich formatter.

        Args:
            stream: Output stream.
            error_stream: Error stream.
            verbose: Show timing and per-file errors.
            show_lines: Show matched lines under each file.
            width: Console width (None for auto-detect).
            color: Emit ANSI color codes.
        """
        super().__init__(stream, error_stream, verbose, show_lines)
        self._width = width
        self._color = color

    @property
    def format_type(self) -> OutputFormat:
        return OutputFormat.RICH

    def _render(self, *renderables: Any) -> str:
        buffer = StringIO()
        console = Console(
            file=buffer,
            width=self._width,
            force_terminal=self._color,
            no_color=not self._color,
            highlight=False,
        )
        for renderable in renderables:
            console.print(renderable)
        return buffer.getvalue().rstrip()

    def format_report(self, report: "SearchReport") -> str:
        renderables: list[Any] = []

        for match in report.matches:
            renderables.append(Text(match.path, style="bold cyan"))
            if self._show_lines and match.lines:
                for pos, line in zip(match.line_positions, match.lines):
                    row = Text("  ")
                    row.append(f"{pos}", style="green")
                    row.append(": ")
                    row.append(line)
                    renderables.append(row)
                if match.truncated:
                    renderables.append(Text("  … more lines not shown", style="dim"))

        if self._verbose and report.errors:
            errors = Table(title="Errors", show_header=True, header_style="bold red")
            errors.add_column("File")
            errors.add_column("Error")
            for failed in report.errors:
                errors.add_row(failed.path, failed.error or "")
            renderables.append(errors)

        summary = Text()
        summary.append(f"{report.files_matched}", style="bold green")
        summary.append(f" of {report.files_searched} files matched")
        if report.errors:
            summary.append(f", {len(report.errors)} errors", style="yellow")
        if self._verbose:
            summary.append(f" ({report.elapsed_ms:.1f} ms)", style="dim")
        renderables.append(summary)

        return self._render(*renderables)

    def format_query(self, ast: Expression) -> str:
        tree = Tree(Text(str(ast), style="bold"))
        _add_node(tree, ast)
        return self._render(tree)

    def format_cache_stats(self, stats: list[CacheStats]) -> str:
        table = Table(title="Caches", show_header=True, header_style="bold")
        table.add_column("Name")
        table.add_column("Size", justify="right")
        table.add_column("Hits", justify="right")
        table.add_column("Misses", justify="right")
        table.add_column("Hit rate", justify="right")
        table.add_column("Evictions", justify="right")
        table.add_column("Memory", justify="right")
        for s in stats:
            table.add_row(
                s.name,
                f"{s.size}/{s.capacity}",
                str(s.hits),
                str(s.misses),
                f"{s.hit_rate:.0%}",
                str(s.evictions),
                get_file_size_human(s.memory_bytes),
            )
        return self._render(table)

    def format_error(self, message: str, title: str | None = None) -> str:
        text = Text(f"Error: {message}", style="bold red")
        if title:
            return self._render(Panel(text, title=title, border_style="red"))
        return self._render(text)


def _add_node(tree: Tree, node: Expression) -> None:
    if isinstance(node, Literal):
        kind = "regex" if node.is_regex else "fuzzy" if node.is_fuzzy else "term"
        tree.add(Text.assemble((kind, "dim"), " ", (str(node), "cyan")))
        return
    if isinstance(node, Not):
        _add_node(tree.add(Text("NOT", style="magenta")), node.child)
        return
    if isinstance(node, Near):
        branch = tree.add(Text(f"NEAR distance={node.distance}", style="magenta"))
    elif isinstance(node, And):
        branch = tree.add(Text("AND", style="magenta"))
    elif isinstance(node, Or):
        branch = tree.add(Text("OR", style="magenta"))
    else:
        raise TypeError(f"Unknown expression node: {type(node).__name__}")
    _add_node(branch, node.left)
    _add_node(branch, node.right)
