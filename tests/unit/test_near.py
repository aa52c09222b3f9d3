"""Unit tests for NEAR proximity evaluation."""

import logging

import pytest

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.exceptions import InvalidNearArgumentsError
from fileseek.query.ast import And, Literal, Near, Not, Or
from fileseek.search.evaluator import BooleanEvaluator
from fileseek.search.near import validate_distance
from fileseek.search.options import MatchOptions

WORDS = "word1 word2 word3 word4 word5 word6"
DISK = "the disk is almost full now"


def near(evaluator: BooleanEvaluator, content: str, left, right, distance, options):
    return evaluator.near.evaluate_near(content, left, right, distance, options)


class TestValidateDistance:
    """Tests for validate_distance."""

    def test_valid(self) -> None:
        """Test non-negative ints pass through."""
        assert validate_distance(0) == 0
        assert validate_distance(7) == 7

    @pytest.mark.parametrize("distance", [-1, True, False, "5", 2.5, None])
    def test_invalid(self, distance: object) -> None:
        """Test anything else is rejected."""
        with pytest.raises(InvalidNearArgumentsError):
            validate_distance(distance)


class TestNearLiterals:
    """Tests for NEAR over plain operands."""

    def test_inclusive_distance(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test words five apart match at distance 5 but not 4."""
        left, right = Literal.plain("word1"), Literal.plain("word6")
        assert near(evaluator, WORDS, left, right, 5, exact_options)
        assert not near(evaluator, WORDS, left, right, 4, exact_options)

    def test_distance_zero_same_word(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test two terms inside one word are zero words apart."""
        left, right = Literal.plain("disk"), Literal.plain("isk")
        assert near(evaluator, "disk", left, right, 0, exact_options)

    def test_missing_operand(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test NEAR is false when one side never occurs."""
        left, right = Literal.plain("word1"), Literal.plain("absent")
        assert not near(evaluator, WORDS, left, right, 10, exact_options)

    def test_empty_content(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test empty content never matches."""
        left, right = Literal.plain("a"), Literal.plain("b")
        assert not near(evaluator, "", left, right, 10, exact_options)

    def test_regex_operand(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test a regex operand supplies its match positions."""
        left, right = Literal.regex("ful+"), Literal.plain("disk")
        assert near(evaluator, DISK, left, right, 3, exact_options)
        assert not near(evaluator, DISK, left, right, 2, exact_options)

    def test_whitespace_positions_are_skipped(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test positions that fall in whitespace never count."""
        left, right = Literal.regex(r"\s"), Literal.plain("disk")
        assert not near(evaluator, DISK, left, right, 10, exact_options)

    def test_fuzzy_operand(self, evaluator: BooleanEvaluator) -> None:
        """Test NEAR operands fall back to fuzzy matching."""
        options = MatchOptions(fuzzy_enabled=False, fuzzy_near_enabled=True)
        left, right = Literal.plain("brown"), Literal.plain("fox")
        assert near(evaluator, "the quick brwn fox", left, right, 1, options)

    def test_fuzzy_near_disabled(self, evaluator: BooleanEvaluator) -> None:
        """Test the NEAR fuzzy switch is honoured."""
        options = MatchOptions(fuzzy_enabled=True, fuzzy_near_enabled=False)
        left, right = Literal.plain("brown"), Literal.plain("fox")
        assert not near(evaluator, "the quick brwn fox", left, right, 1, options)


class TestNearProperties:
    """Tests for symmetry and monotonicity."""

    CONTENT = "alpha x beta y y alpha z z z beta gamma alpha q q q q q q beta"

    @pytest.mark.parametrize("distance", range(0, 9))
    def test_symmetric(
        self,
        evaluator: BooleanEvaluator,
        exact_options: MatchOptions,
        distance: int,
    ) -> None:
        """Test swapping operands never changes the result."""
        a, b = Literal.plain("alpha"), Literal.plain("beta")
        assert near(evaluator, self.CONTENT, a, b, distance, exact_options) == near(
            evaluator, self.CONTENT, b, a, distance, exact_options
        )

    def test_monotonic(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test a larger distance never turns a match into a miss."""
        a, b = Literal.plain("gamma"), Literal.plain("q")
        results = [
            near(evaluator, self.CONTENT, a, b, d, exact_options) for d in range(10)
        ]
        first_true = results.index(True)
        assert first_true == 2
        assert all(results[first_true:])

    def test_closest_candidate_on_either_side(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test the nearest occurrence is found before and after."""
        content = "beta " + "pad " * 20 + "alpha pad beta"
        a, b = Literal.plain("alpha"), Literal.plain("beta")
        assert near(evaluator, content, a, b, 2, exact_options)
        assert near(evaluator, content, b, a, 2, exact_options)

    def test_prefilter_rejects_distant_clusters(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test many far-apart positions are rejected early."""
        content = "alpha " * 11 + "filler " * 100 + "beta " * 11
        a, b = Literal.plain("alpha"), Literal.plain("beta")
        assert not near(evaluator, content, a, b, 5, exact_options)
        assert near(evaluator, content, a, b, 200, exact_options)


class TestNearComposites:
    """Tests for NEAR over composite operands."""

    def test_or_operand(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test an OR operand contributes positions of its matching side."""
        left = Or(Literal.plain("disk"), Literal.plain("drive"))
        right = Literal.plain("full")
        assert near(evaluator, DISK, left, right, 3, exact_options)
        assert not near(evaluator, DISK, left, right, 2, exact_options)

    def test_and_operand(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test an AND operand contributes positions of every leaf."""
        left = And(Literal.plain("disk"), Literal.plain("almost"))
        right = Literal.plain("full")
        assert near(evaluator, DISK, left, right, 1, exact_options)

    def test_false_composite(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test a composite that does not match makes NEAR false."""
        left = And(Literal.plain("disk"), Literal.plain("missing"))
        right = Literal.plain("full")
        assert not near(evaluator, DISK, left, right, 10, exact_options)

    def test_nested_near(
        self, evaluator: BooleanEvaluator, exact_options: MatchOptions
    ) -> None:
        """Test NEAR can be an operand of NEAR."""
        inner = Near(Literal.plain("disk"), Literal.plain("almost"), 2)
        assert near(evaluator, DISK, inner, Literal.plain("full"), 1, exact_options)

    def test_not_operand_is_false(
        self,
        evaluator: BooleanEvaluator,
        exact_options: MatchOptions,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test a NOT operand has no positions and evaluates false."""
        left = Not(Literal.plain("missing"))
        with caplog.at_level(logging.WARNING, logger="fileseek"):
            result = near(
                evaluator, DISK, left, Literal.plain("full"), 5, exact_options
            )
        assert result is False
        assert "no positions" in caplog.text


class TestNearArguments:
    """Tests for invalid NEAR arguments."""

    @pytest.mark.parametrize("distance", [-1, True, "5", 2.5])
    def test_invalid_distance_is_false(
        self,
        evaluator: BooleanEvaluator,
        exact_options: MatchOptions,
        caplog: pytest.LogCaptureFixture,
        distance: object,
    ) -> None:
        """Test a bad distance logs a warning and evaluates false."""
        left, right = Literal.plain("word1"), Literal.plain("word2")
        with caplog.at_level(logging.WARNING, logger="fileseek"):
            result = near(evaluator, WORDS, left, right, distance, exact_options)
        assert result is False
        assert "non-negative integer" in caplog.text


class TestNearCache:
    """Tests for proximity result caching."""

    def test_result_is_cached(self, exact_options: MatchOptions) -> None:
        """Test repeated NEAR checks reuse the cached result."""
        cache: MemoryAwareLRUCache[str, bool] = MemoryAwareLRUCache(10)
        evaluator = BooleanEvaluator(proximity_cache=cache)
        left, right = Literal.plain("word1"), Literal.plain("word6")

        assert near(evaluator, WORDS, left, right, 5, exact_options)
        assert near(evaluator, WORDS, left, right, 5, exact_options)

        assert len(cache) == 1
        assert cache.stats().hits == 1

    def test_distance_is_part_of_key(self, exact_options: MatchOptions) -> None:
        """Test each distance gets its own entry."""
        cache: MemoryAwareLRUCache[str, bool] = MemoryAwareLRUCache(10)
        evaluator = BooleanEvaluator(proximity_cache=cache)
        left, right = Literal.plain("word1"), Literal.plain("word6")

        assert near(evaluator, WORDS, left, right, 5, exact_options)
        assert not near(evaluator, WORDS, left, right, 4, exact_options)

        assert len(cache) == 2
