"""Main CLI application for fileseek."""

from pathlib import Path

import typer
from rich.console import Console

from fileseek import __version__
from fileseek.cli.options import (
    ConfigOption,
    FormatOption,
    NoCacheOption,
    VerboseOption,
    get_output_format,
)
from fileseek.config import FileSeekConfig, OutputFormat, load_config
from fileseek.config.defaults import get_config_path
from fileseek.engine import SearchEngine
from fileseek.exceptions import FileSeekError
from fileseek.output import get_formatter
from fileseek.query.parser import parse_query
from fileseek.search.options import MatchOptions
from fileseek.utils.logging import setup_logging

app = typer.Typer(
    name="fileseek",
    help="Search files with boolean, regex, fuzzy and NEAR queries",
    add_completion=True,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"fileseek version {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Search files with boolean, regex, fuzzy and NEAR queries."""


def _load(config_path: Path | None, verbose: bool) -> FileSeekConfig:
    try:
        config = load_config(config_path)
    except FileSeekError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code) from None

    setup_logging(
        level="DEBUG" if verbose else config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        use_color=config.output.color,
    )
    return config


@app.command()
def search(
    query: str = typer.Argument(
        ..., help="Query, e.g. 'error AND NEAR(disk, full, 3)'."
    ),
    path: Path = typer.Argument(Path("."), help="File or directory to search."),
    case_sensitive: bool | None = typer.Option(
        None,
        "--case-sensitive/--ignore-case",
        "-s/-i",
        help="Match letter case exactly. Defaults to config setting.",
    ),
    whole_word: bool | None = typer.Option(
        None,
        "--whole-word/--substring",
        "-w/-W",
        help="Only match whole words. Defaults to config setting.",
    ),
    no_fuzzy: bool = typer.Option(
        False, "--no-fuzzy", help="Disable typo-tolerant matching."
    ),
    lines: bool | None = typer.Option(
        None, "--lines/--no-lines", "-l/-L", help="Show matching lines."
    ),
    extensions: list[str] | None = typer.Option(
        None, "--ext", "-e", help="Only search files with this extension (repeatable)."
    ),
    hidden: bool = typer.Option(False, "--hidden", "-a", help="Include hidden files."),
    max_depth: int | None = typer.Option(
        None, "--max-depth", "-d", help="Maximum directory depth."
    ),
    stats: bool = typer.Option(False, "--stats", help="Print cache statistics."),
    format: FormatOption = None,
    config_path: ConfigOption = None,
    no_cache: NoCacheOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Search files for QUERY."""
    config = _load(config_path, verbose)
    if no_cache:
        config.cache.enabled = False

    show_lines = config.output.show_lines if lines is None else lines
    output_format = get_output_format(format, default=config.output.default_format)
    extra = {"color": config.output.color} if output_format is OutputFormat.RICH else {}
    formatter = get_formatter(
        output_format, verbose=verbose, show_lines=show_lines, **extra
    )

    defaults = MatchOptions.from_config(config.search)
    options = MatchOptions(
        case_sensitive=(
            defaults.case_sensitive if case_sensitive is None else case_sensitive
        ),
        whole_word=defaults.whole_word if whole_word is None else whole_word,
        fuzzy_enabled=defaults.fuzzy_enabled and not no_fuzzy,
        fuzzy_near_enabled=defaults.fuzzy_near_enabled and not no_fuzzy,
        max_content_size=defaults.max_content_size,
        fuzzy_threshold=defaults.fuzzy_threshold,
    )

    if not path.exists():
        formatter.print_error(f"No such file or directory: {path}")
        raise typer.Exit(1)

    engine = SearchEngine(config)
    try:
        report = engine.search(
            path,
            query,
            options,
            extensions=extensions,
            include_hidden=hidden,
            max_depth=max_depth,
            lines=show_lines,
        )
    except FileSeekError as e:
        formatter.print_error(str(e), title=e.user_message)
        raise typer.Exit(e.exit_code) from None

    formatter.print_report(report)
    if stats:
        formatter.print_cache_stats(engine.cache_stats())


@app.command()
def parse(
    query: str = typer.Argument(..., help="Query to parse."),
    format: FormatOption = None,
) -> None:
    """Show how QUERY is parsed."""
    formatter = get_formatter(get_output_format(format))
    try:
        ast = parse_query(query)
    except FileSeekError as e:
        formatter.print_error(str(e), title=e.user_message)
        raise typer.Exit(e.exit_code) from None
    formatter.print_query(ast)


@app.command("config")
def config_cmd(
    show_path: bool = typer.Option(
        False,
        "--path",
        "-p",
        help="Show config file path.",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Write the default config file if it does not exist.",
    ),
    config_path: ConfigOption = None,
) -> None:
    """Show current configuration."""
    path = config_path or get_config_path()

    if show_path:
        console.print(str(path))
        return

    try:
        config = load_config(path, create_if_missing=init)
    except FileSeekError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code) from None

    console.print("[bold]fileseek configuration[/bold]\n")
    suffix = "" if path.exists() else " (not found, using defaults)"
    console.print(f"Config file: {path}{suffix}")
    console.print(f"Case sensitive: {config.search.case_sensitive}")
    console.print(f"Whole word: {config.search.whole_word}")
    console.print(
        f"Fuzzy: {config.search.fuzzy_enabled} "
        f"(NEAR: {config.search.fuzzy_near_enabled}, "
        f"threshold {config.search.fuzzy_threshold:g})"
    )
    console.print(f"Chunk size: {config.streaming.chunk_size} bytes")
    console.print(f"Cache enabled: {config.cache.enabled}")
    console.print(f"Output format: {config.output.default_format}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
