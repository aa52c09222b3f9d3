"""Query evaluation: term, fuzzy and proximity matching.

This package decides whether a piece of content matches a parsed query.
"""

from fileseek.search.evaluator import BooleanEvaluator
from fileseek.search.fuzzy import FuzzyMatcher, FuzzyResult
from fileseek.search.near import NearEvaluator, validate_distance
from fileseek.search.options import FuzzyContext, MatchOptions
from fileseek.search.terms import TermMatcher, find_substring_positions
from fileseek.search.words import WordBoundaryIndexer, WordIndex, WordSpan

__all__ = [
    # Evaluator
    "BooleanEvaluator",
    "NearEvaluator",
    "validate_distance",
    # Matchers
    "FuzzyMatcher",
    "FuzzyResult",
    "TermMatcher",
    "find_substring_positions",
    # Options
    "FuzzyContext",
    "MatchOptions",
    # Words
    "WordBoundaryIndexer",
    "WordIndex",
    "WordSpan",
]
