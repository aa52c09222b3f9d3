"""Boolean evaluation of query expressions against content."""

from collections.abc import Callable

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.exceptions import ContentTooLargeError
from fileseek.query.ast import And, Expression, Literal, Near, Not, Or, iter_literals
from fileseek.search.near import NearEvaluator
from fileseek.search.options import FuzzyContext, MatchOptions
from fileseek.search.terms import TermMatcher
from fileseek.search.words import WordBoundaryIndexer


class BooleanEvaluator:
    """Evaluates an expression tree to match / no match.

    ``And`` and ``Or`` short-circuit left to right. The evaluator keeps no
    per-call state, so one instance can serve many files.

    Usage:
        evaluator = BooleanEvaluator()
        evaluator.evaluate(parse_query("error AND NOT debug"), text, MatchOptions())
    """

    def __init__(
        self,
        term_matcher: TermMatcher | None = None,
        indexer: WordBoundaryIndexer | None = None,
        proximity_cache: MemoryAwareLRUCache[str, bool] | None = None,
    ) -> None:
        self.term_matcher = term_matcher or TermMatcher()
        self.near = NearEvaluator(
            self, indexer or WordBoundaryIndexer(), proximity_cache
        )

    def evaluate(self, node: Expression, content: str, options: MatchOptions) -> bool:
        """Decide whether ``content`` satisfies ``node``.

        Raises:
            ContentTooLargeError: If content exceeds ``options.max_content_size``.
            InvalidPatternError: If a regex leaf cannot be used.
        """
        limit = options.max_content_size
        if limit is not None and len(content) > limit:
            raise ContentTooLargeError(len(content), limit)
        return self._evaluate(node, content, options)

    def create_matcher(
        self, node: Expression, options: MatchOptions
    ) -> Callable[[str], bool]:
        """Bind ``node`` and ``options`` into a ``content -> bool`` predicate."""

        def matcher(content: str) -> bool:
            return self.evaluate(node, content, options)

        return matcher

    def positions(
        self,
        node: Expression,
        content: str,
        options: MatchOptions,
        context: FuzzyContext = FuzzyContext.LEAF,
    ) -> list[int]:
        """Union of the match positions of every positive literal in ``node``.

        Literals under a ``Not`` contribute nothing.
        """
        found: set[int] = set()
        for literal in iter_literals(node, positive_only=True):
            found.update(
                self.term_matcher.find_positions(
                    content, literal.term, options, context
                )
            )
        return sorted(found)

    def _evaluate(self, node: Expression, content: str, options: MatchOptions) -> bool:
        if isinstance(node, Literal):
            return self.term_matcher.matches(content, node.term, options)
        if isinstance(node, Not):
            return not self._evaluate(node.child, content, options)
        if isinstance(node, And):
            return self._evaluate(node.left, content, options) and self._evaluate(
                node.right, content, options
            )
        if isinstance(node, Or):
            return self._evaluate(node.left, content, options) or self._evaluate(
                node.right, content, options
            )
        if isinstance(node, Near):
            return self.near.evaluate_near(
                content, node.left, node.right, node.distance, options
            )
        raise TypeError(f"Unknown expression node: {type(node).__name__}")
