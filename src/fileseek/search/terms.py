"""Term matching: every start offset of a term in content."""

import re

from fileseek.query.ast import FuzzyTerm, PatternTerm, Term
from fileseek.query.patterns import escape, whole_word_pattern
from fileseek.search.fuzzy import MIN_TERM_LENGTH, FuzzyMatcher
from fileseek.search.options import FuzzyContext, MatchOptions
from fileseek.utils.logging import get_logger

logger = get_logger(__name__)


class TermMatcher:
    """Finds match positions for a single term.

    Regex terms are scanned with ``finditer``; plain terms use a direct
    substring scan (overlapping) or a whole-word pattern. When nothing is
    found and fuzzy matching is allowed, the fuzzy matcher gets a turn.
    """

    def __init__(self, fuzzy: FuzzyMatcher | None = None) -> None:
        self.fuzzy = fuzzy

    def find_positions(
        self,
        content: str,
        term: Term,
        options: MatchOptions,
        context: FuzzyContext = FuzzyContext.LEAF,
    ) -> list[int]:
        """Return the ascending start offsets of ``term`` in ``content``.

        Args:
            content: Text to search.
            term: Plain, pattern or fuzzy term.
            options: Match options.
            context: LEAF for boolean leaves, NEAR for NEAR operands.

        Returns:
            Ascending character offsets; empty when there is no match.
        """
        if isinstance(term, PatternTerm):
            return self._pattern_positions(content, term, options)

        text = term.text
        if not text:
            return []

        if options.whole_word:
            pattern = whole_word_pattern(text, options.case_sensitive)
            positions = [m.start() for m in pattern.finditer(content)]
        else:
            positions = find_substring_positions(content, text, options.case_sensitive)

        if positions:
            return positions

        fuzzy_allowed = isinstance(term, FuzzyTerm) or options.fuzzy_allowed(context)
        if fuzzy_allowed and self.fuzzy is not None and len(text) >= MIN_TERM_LENGTH:
            result = self.fuzzy.search(
                content,
                text,
                case_sensitive=options.case_sensitive,
                whole_word=options.whole_word,
                threshold=options.fuzzy_threshold,
            )
            if result.is_match:
                logger.debug(
                    "Fuzzy match for %r (score %.1f, %d positions)",
                    text,
                    result.score,
                    len(result.match_positions),
                )
                return list(result.match_positions)

        return []

    def matches(
        self,
        content: str,
        term: Term,
        options: MatchOptions,
        context: FuzzyContext = FuzzyContext.LEAF,
    ) -> bool:
        return bool(self.find_positions(content, term, options, context))

    def _pattern_positions(
        self, content: str, term: PatternTerm, options: MatchOptions
    ) -> list[int]:
        pattern = term.compiled
        if not options.case_sensitive and not pattern.flags & re.IGNORECASE:
            pattern = re.compile(pattern.pattern, pattern.flags | re.IGNORECASE)
        # finditer steps past empty matches on its own
        return [m.start() for m in pattern.finditer(content)]


def find_substring_positions(
    content: str, term: str, case_sensitive: bool
) -> list[int]:
    """Every start offset of ``term`` in ``content``, overlaps included.

    "aba" in "abababa" gives [0, 2, 4].
    """
    if not term:
        return []

    if case_sensitive:
        return _scan(content, term)

    haystack = content.lower()
    needle = term.lower()
    if len(haystack) == len(content) and len(needle) == len(term):
        return _scan(haystack, needle)

    # Lower-casing changed some lengths; scan the original text instead
    pattern = re.compile(f"(?={escape(term)})", re.IGNORECASE)
    return [m.start() for m in pattern.finditer(content)]


def _scan(haystack: str, needle: str) -> list[int]:
    positions: list[int] = []
    i = haystack.find(needle)
    while i != -1:
        positions.append(i)
        i = haystack.find(needle, i + 1)
    return positions
