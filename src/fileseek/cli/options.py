"""Shared CLI options for fileseek commands."""

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from fileseek.config.schema import OutputFormat


class FormatChoice(str, Enum):
    """Output format choices for CLI."""

    PLAIN = "plain"
    JSON = "json"
    RICH = "rich"


FormatOption = Annotated[
    FormatChoice | None,
    typer.Option(
        "--format",
        "-f",
        help="Output format (plain, json, rich). Defaults to config setting.",
        case_sensitive=False,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Config file to use instead of the default.",
        envvar="FILESEEK_CONFIG",
    ),
]

NoCacheOption = Annotated[
    bool,
    typer.Option(
        "--no-cache",
        help="Disable in-memory caches for this run.",
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Show timing, per-file errors and debug logs.",
    ),
]


def get_output_format(
    format_choice: FormatChoice | None, default: str = "rich"
) -> OutputFormat:
    """Convert CLI format choice to OutputFormat.

    Args:
        format_choice: CLI format choice or None.
        default: Default format if none specified.

    Returns:
        OutputFormat enum value.
    """
    if format_choice is None:
        return OutputFormat(default)
    return OutputFormat(format_choice.value)
