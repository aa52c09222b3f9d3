"""Query language: expression tree, regex literals and parser."""

from fileseek.query.ast import (
    And,
    Expression,
    FuzzyTerm,
    Literal,
    Near,
    Not,
    Or,
    PatternTerm,
    PlainTerm,
    Term,
    iter_literals,
    to_dict,
)
from fileseek.query.parser import QueryParser, parse_query, tokenize
from fileseek.query.patterns import compile_pattern, parse_regex_literal

__all__ = [
    # AST
    "And",
    "Expression",
    "FuzzyTerm",
    "Literal",
    "Near",
    "Not",
    "Or",
    "PatternTerm",
    "PlainTerm",
    "Term",
    "iter_literals",
    "to_dict",
    # Parser
    "QueryParser",
    "parse_query",
    "tokenize",
    # Patterns
    "compile_pattern",
    "parse_regex_literal",
]
