"""NEAR proximity evaluation.

``NEAR(a, b, n)`` holds when some occurrence of ``a`` and some occurrence
of ``b`` are at most ``n`` words apart. Distance is inclusive and the
operand order does not matter.
"""

import logging
from bisect import bisect_left
from typing import TYPE_CHECKING, Any

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.exceptions import InvalidNearArgumentsError
from fileseek.query.ast import Expression, Literal
from fileseek.search.options import FuzzyContext, MatchOptions
from fileseek.search.words import WordBoundaryIndexer
from fileseek.utils.hashing import hash_content, make_key
from fileseek.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from fileseek.search.evaluator import BooleanEvaluator

logger = get_logger(__name__)

AVERAGE_WORD_LENGTH = 6
PREFILTER_MIN_POSITIONS = 10
MAX_CANDIDATES = 10


def validate_distance(distance: Any) -> int:
    """Return ``distance`` if it is a non-negative int.

    Raises:
        InvalidNearArgumentsError: Otherwise (bools are rejected too).
    """
    if isinstance(distance, bool) or not isinstance(distance, int) or distance < 0:
        raise InvalidNearArgumentsError(
            f"NEAR distance must be a non-negative integer, got {distance!r}"
        )
    return distance


class NearEvaluator:
    """Evaluates NEAR nodes for a boolean evaluator.

    Literal operands are matched directly; composite operands are first
    evaluated as a whole and, when true, contribute the positions of their
    matching positive literals.
    """

    def __init__(
        self,
        evaluator: "BooleanEvaluator",
        indexer: WordBoundaryIndexer,
        cache: MemoryAwareLRUCache[str, bool] | None = None,
    ) -> None:
        self.evaluator = evaluator
        self.indexer = indexer
        self._cache = cache

    def evaluate_near(
        self,
        content: str,
        left: Expression,
        right: Expression,
        distance: Any,
        options: MatchOptions,
    ) -> bool:
        """Check whether ``left`` and ``right`` occur within ``distance`` words.

        Invalid arguments are logged and evaluate to False.

        Raises:
            InvalidPatternError: Propagated from regex operands.
        """
        try:
            max_distance = validate_distance(distance)
        except InvalidNearArgumentsError as e:
            log_with_context(logger, logging.WARNING, str(e), distance=distance)
            return False

        if not content:
            return False

        key = None
        if self._cache is not None:
            key = make_key(
                hash_content(content), left, right, max_distance, options.cache_key()
            )
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        try:
            result = self._evaluate(content, left, right, max_distance, options)
        except InvalidNearArgumentsError as e:
            log_with_context(logger, logging.WARNING, str(e), left=left, right=right)
            result = False

        if self._cache is not None and key is not None:
            self._cache.set(key, result)
        return result

    def resolve_positions(
        self, content: str, node: Expression, options: MatchOptions
    ) -> list[int]:
        """Ascending match positions for one NEAR operand.

        Raises:
            InvalidNearArgumentsError: If a composite operand matches but
                yields no positions (e.g. ``NOT x``).
        """
        if isinstance(node, Literal):
            return self.evaluator.term_matcher.find_positions(
                content, node.term, options, FuzzyContext.NEAR
            )

        if not self.evaluator.evaluate(node, content, options):
            return []

        positions = self.evaluator.positions(node, content, options, FuzzyContext.NEAR)
        if not positions:
            raise InvalidNearArgumentsError(
                f"NEAR operand {node} matches but has no positions to measure from"
            )
        return positions

    def _evaluate(
        self,
        content: str,
        left: Expression,
        right: Expression,
        distance: int,
        options: MatchOptions,
    ) -> bool:
        positions1 = self.resolve_positions(content, left, options)
        if not positions1:
            return False
        positions2 = self.resolve_positions(content, right, options)
        if not positions2:
            return False

        positions1 = sorted(positions1)
        positions2 = sorted(positions2)

        if (
            len(positions1) > PREFILTER_MIN_POSITIONS
            and len(positions2) > PREFILTER_MIN_POSITIONS
        ):
            max_char_distance = distance * AVERAGE_WORD_LENGTH * 2
            if not _any_within(positions1, positions2, max_char_distance):
                return False

        word_index = self.indexer.index(content)
        for pos1 in positions1:
            word1 = word_index.word_index_of(pos1)
            if word1 is None:
                continue
            i = bisect_left(positions2, pos1)
            before = positions2[max(0, i - MAX_CANDIDATES) : i][::-1]
            after = positions2[i : i + MAX_CANDIDATES]
            for candidates in (before, after):
                # Word indexes grow with offsets, so the first position that
                # lands in a word is the closest one on this side
                for pos2 in candidates:
                    word2 = word_index.word_index_of(pos2)
                    if word2 is None:
                        continue
                    if abs(word1 - word2) <= distance:
                        return True
                    break
        return False


def _any_within(positions1: list[int], positions2: list[int], limit: int) -> bool:
    """True if some pair from the two sorted lists is at most ``limit`` apart."""
    for pos in positions1:
        i = bisect_left(positions2, pos)
        if i < len(positions2) and positions2[i] - pos <= limit:
            return True
        if i > 0 and pos - positions2[i - 1] <= limit:
            return True
    return False
