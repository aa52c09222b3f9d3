"""Query expression tree.

Expressions are immutable dataclasses; a query string becomes one of these
via ``fileseek.query.parser.parse_query`` or can be built directly:

    Near(Literal.plain("error"), Literal.regex(r"time\\w+"), 5)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Union

from fileseek.query.patterns import compile_pattern, parse_regex_literal

FUZZY_PREFIX = "~"


@dataclass(frozen=True)
class PlainTerm:
    """Exact text; fuzzy fallback depends on the matching context."""

    text: str


@dataclass(frozen=True)
class PatternTerm:
    """Compiled regular expression."""

    source: str
    flags: str = ""
    compiled: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled", compile_pattern(self.source, self.flags))

    @property
    def literal(self) -> str:
        return f"/{self.source}/{self.flags}"


@dataclass(frozen=True)
class FuzzyTerm:
    """Text that always falls back to fuzzy matching when not found exactly."""

    text: str


Term = Union[PlainTerm, PatternTerm, FuzzyTerm]


@dataclass(frozen=True)
class Literal:
    """Leaf node holding a single term."""

    term: Term

    @classmethod
    def plain(cls, text: str) -> "Literal":
        return cls(PlainTerm(text))

    @classmethod
    def regex(cls, source: str, flags: str = "") -> "Literal":
        """Build a regex literal; raises InvalidPatternError if it won't compile."""
        return cls(PatternTerm(source, flags))

    @classmethod
    def fuzzy(cls, text: str) -> "Literal":
        return cls(FuzzyTerm(text))

    @classmethod
    def from_text(cls, text: str) -> "Literal":
        """Resolve ``/src/flags``, ``~word`` or plain text into a literal."""
        parsed = parse_regex_literal(text)
        if parsed is not None:
            return cls.regex(*parsed)
        if text.startswith(FUZZY_PREFIX) and len(text) > 1:
            return cls.fuzzy(text[1:])
        return cls.plain(text)

    @property
    def text(self) -> str:
        """Term text (regex source for patterns)."""
        if isinstance(self.term, PatternTerm):
            return self.term.source
        return self.term.text

    @property
    def is_regex(self) -> bool:
        return isinstance(self.term, PatternTerm)

    @property
    def is_fuzzy(self) -> bool:
        return isinstance(self.term, FuzzyTerm)

    def __str__(self) -> str:
        if isinstance(self.term, PatternTerm):
            return self.term.literal
        if isinstance(self.term, FuzzyTerm):
            return f"{FUZZY_PREFIX}{self.term.text}"
        return _quote(self.term.text)


@dataclass(frozen=True)
class Not:
    child: "Expression"

    def __str__(self) -> str:
        return f"NOT {_group(self.child)}"


@dataclass(frozen=True)
class And:
    left: "Expression"
    right: "Expression"

    def __str__(self) -> str:
        return f"{_group(self.left)} AND {_group(self.right)}"


@dataclass(frozen=True)
class Or:
    left: "Expression"
    right: "Expression"

    def __str__(self) -> str:
        return f"{_group(self.left)} OR {_group(self.right)}"


@dataclass(frozen=True)
class Near:
    """Both sides occur within ``distance`` words of each other.

    ``distance`` is whatever the query supplied; anything other than a
    non-negative int makes the node evaluate to False.
    """

    left: "Expression"
    right: "Expression"
    distance: Any

    def __str__(self) -> str:
        return f"NEAR({self.left}, {self.right}, {self.distance})"


Expression = Union[Literal, Not, And, Or, Near]


def iter_literals(node: Expression, *, positive_only: bool = False) -> list[Literal]:
    """Collect the literal leaves of ``node``, left to right.

    Args:
        node: Expression to walk.
        positive_only: Skip leaves below a ``Not``.
    """
    if isinstance(node, Literal):
        return [node]
    if isinstance(node, Not):
        return [] if positive_only else iter_literals(node.child)
    return iter_literals(node.left, positive_only=positive_only) + iter_literals(
        node.right, positive_only=positive_only
    )


def to_dict(node: Expression) -> dict[str, Any]:
    """Plain-data form of an expression, for JSON output."""
    if isinstance(node, Literal):
        term = node.term
        if isinstance(term, PatternTerm):
            return {"type": "regex", "source": term.source, "flags": term.flags}
        if isinstance(term, FuzzyTerm):
            return {"type": "fuzzy", "text": term.text}
        return {"type": "term", "text": term.text}
    if isinstance(node, Not):
        return {"type": "not", "child": to_dict(node.child)}
    if isinstance(node, Near):
        return {
            "type": "near",
            "left": to_dict(node.left),
            "right": to_dict(node.right),
            "distance": node.distance,
        }
    return {
        "type": "and" if isinstance(node, And) else "or",
        "left": to_dict(node.left),
        "right": to_dict(node.right),
    }


def _quote(text: str) -> str:
    if text and re.fullmatch(r"[\w.\-]+", text) and text.upper() not in _KEYWORDS:
        return text
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _group(node: Expression) -> str:
    if isinstance(node, (And, Or)):
        return f"({node})"
    return str(node)


_KEYWORDS = frozenset({"AND", "OR", "NOT", "NEAR"})
