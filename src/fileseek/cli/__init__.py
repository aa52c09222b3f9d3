"""CLI layer for fileseek.

Usage:
    fileseek search 'NEAR(error, timeout, 5)' ./logs
    fileseek parse '"stack trace" AND NOT /debug/i'
"""

from fileseek.cli.app import app, main
from fileseek.cli.options import (
    ConfigOption,
    FormatChoice,
    FormatOption,
    NoCacheOption,
    VerboseOption,
)

__all__ = [
    # App
    "app",
    "main",
    # Options
    "ConfigOption",
    "FormatChoice",
    "FormatOption",
    "NoCacheOption",
    "VerboseOption",
]
