"""fileseek - search files with boolean, regex, fuzzy and NEAR queries."""

__version__ = "0.1.0"
