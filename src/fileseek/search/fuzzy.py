"""Fuzzy term matching.

Finds approximate occurrences of a term in content using rapidfuzz's
normalized Levenshtein similarity over windows of content words.
"""

import re
from dataclasses import dataclass, field

from rapidfuzz.distance import Levenshtein

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.query.patterns import escape, whole_word_pattern
from fileseek.utils.hashing import hash_content, make_key

MIN_TERM_LENGTH = 3
DEFAULT_THRESHOLD = 70.0

# Window lengths outside this ratio of the term length are never compared
MIN_LENGTH_RATIO = 0.7
MAX_LENGTH_RATIO = 1.3

_TOKEN_RE = re.compile(r"\S+")
_CORE_RE = re.compile(r"\w(?:.*\w)?", re.DOTALL)


@dataclass(frozen=True)
class FuzzyResult:
    """Result of a fuzzy search.

    Attributes:
        is_match: True if the best window cleared the threshold.
        score: Best similarity score (0-100).
        match_positions: Start offsets of every window that cleared the
            threshold, ascending.
    """

    is_match: bool
    score: float = 0.0
    match_positions: list[int] = field(default_factory=list)

    def size_estimate(self) -> int:
        return 32 + len(self.match_positions) * 8


NO_MATCH = FuzzyResult(is_match=False)


class FuzzyMatcher:
    """Typo-tolerant matcher used when exact matching finds nothing.

    Content is split into words (surrounding punctuation stripped) and
    every run of as many words as the term has is compared with the term.
    A window only counts as a match when its similarity score reaches
    ``threshold``.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        cache: MemoryAwareLRUCache[str, FuzzyResult] | None = None,
    ) -> None:
        """Initialize the matcher.

        Args:
            threshold: Default minimum score (0-100) for a match.
            cache: Optional result cache keyed by content hash, term and
                options.
        """
        self.threshold = threshold
        self._cache = cache

    def search(
        self,
        content: str,
        term: str,
        case_sensitive: bool = False,
        whole_word: bool = False,
        threshold: float | None = None,
    ) -> FuzzyResult:
        """Search ``content`` for approximate occurrences of ``term``.

        Args:
            content: Text to search.
            term: Plain search term; shorter than 3 characters never matches.
            case_sensitive: Compare letter case exactly.
            whole_word: Exact pre-check only accepts whole-word hits.
            threshold: Override the default threshold for this call.

        Returns:
            FuzzyResult for the best-scoring windows.
        """
        term = " ".join(term.split())
        if len(term) < MIN_TERM_LENGTH or not content:
            return NO_MATCH

        cutoff = self.threshold if threshold is None else threshold

        key = None
        if self._cache is not None:
            key = make_key(
                hash_content(content), term, case_sensitive, whole_word, cutoff
            )
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        result = self._search(content, term, case_sensitive, whole_word, cutoff)

        if self._cache is not None and key is not None:
            self._cache.set(key, result)
        return result

    def similarity(self, a: str, b: str, case_sensitive: bool = False) -> float:
        """Normalized Levenshtein similarity (0-100) of two strings."""
        if not case_sensitive:
            a, b = a.lower(), b.lower()
        return Levenshtein.normalized_similarity(a, b) * 100.0

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def _search(
        self,
        content: str,
        term: str,
        case_sensitive: bool,
        whole_word: bool,
        cutoff: float,
    ) -> FuzzyResult:
        exact = _exact_positions(content, term, case_sensitive, whole_word)
        if exact:
            return FuzzyResult(is_match=True, score=100.0, match_positions=exact)

        needle = term if case_sensitive else term.lower()
        size = len(needle.split(" "))
        min_len = MIN_LENGTH_RATIO * len(needle)
        max_len = MAX_LENGTH_RATIO * len(needle)

        words = _words(content)
        best = 0.0
        positions: list[int] = []

        for i in range(len(words) - size + 1):
            window = " ".join(text for _, text in words[i : i + size])
            if not min_len <= len(window) <= max_len:
                continue
            if not case_sensitive:
                window = window.lower()
            score = Levenshtein.normalized_similarity(needle, window) * 100.0
            if score > best:
                best = score
            if score >= cutoff:
                positions.append(words[i][0])

        return FuzzyResult(
            is_match=bool(positions),
            score=round(best, 2),
            match_positions=positions,
        )


def _words(content: str) -> list[tuple[int, str]]:
    """Whitespace-delimited words with leading/trailing punctuation removed."""
    words: list[tuple[int, str]] = []
    for token in _TOKEN_RE.finditer(content):
        core = _CORE_RE.search(token.group())
        if core is not None:
            words.append((token.start() + core.start(), core.group()))
    return words


def _exact_positions(
    content: str, term: str, case_sensitive: bool, whole_word: bool
) -> list[int]:
    if whole_word:
        pattern = whole_word_pattern(term, case_sensitive)
    else:
        pattern = re.compile(escape(term), 0 if case_sensitive else re.IGNORECASE)
    return [m.start() for m in pattern.finditer(content)]
