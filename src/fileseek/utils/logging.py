"""Logging for fileseek: rich console output and JSON lines for log files.

Modules log through ``get_logger(__name__)``; nothing is emitted until the
CLI (or an embedding application) calls ``setup_logging``. Key-value
context passed to ``log_with_context`` travels on the record and is
rendered by both formatters.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "fileseek"


def _record_context(record: logging.LogRecord) -> dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class ContextFormatter(logging.Formatter):
    """Appends ``[key=value ...]`` context to the formatted message."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = _record_context(record)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} [{pairs}]"
        return message


class JSONLinesFormatter(logging.Formatter):
    """One JSON object per record with context keys at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_record_context(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(
    level: str = "WARNING",
    log_file: Path | None = None,
    json_format: bool = False,
    use_color: bool = True,
) -> logging.Logger:
    """Route the ``fileseek`` logger to stderr and, optionally, a file.

    Calling it again replaces the previous handlers.

    Args:
        level: Level name; unknown names fall back to WARNING.
        log_file: Also append JSON lines to this file.
        json_format: Write JSON lines to stderr instead of rich output.
        use_color: Allow color in rich output.

    Returns:
        The package logger.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)
    package_logger.handlers.clear()
    package_logger.propagate = False

    console_handler: logging.Handler
    if json_format:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(JSONLinesFormatter())
    else:
        console_handler = RichHandler(
            console=Console(stderr=True, no_color=not use_color),
            show_time=False,
            show_path=False,
            markup=False,
        )
        console_handler.setFormatter(ContextFormatter("%(message)s"))
    package_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(JSONLinesFormatter())
        package_logger.addHandler(file_handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, e.g. ``get_logger(__name__)``."""
    return logging.getLogger(name)


def log_with_context(
    log: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """Log ``message`` with key-value context attached to the record."""
    if log.isEnabledFor(level):
        log.log(level, message, extra={"context": context}, stacklevel=2)
