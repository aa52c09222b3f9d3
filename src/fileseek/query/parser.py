"""Query string parser.

Grammar, lowest precedence first::

    or      := and (("OR" | "||") and)*
    and     := not (("AND" | "&&")? not)*
    not     := ("NOT" | "!") not | primary
    primary := "(" or ")"
             | ("NEAR" | "near") "(" or "," or "," distance ")"
             | "quoted" | 'quoted' | /regex/flags | ~fuzzy | word

Operator keywords are upper-case; ``and``/``or``/``not`` in lower case are
ordinary search words. Adjacent operands are joined with an implicit AND.
"""

from dataclasses import dataclass
from enum import Enum

from fileseek.exceptions import QueryParseError
from fileseek.query.ast import And, Expression, Literal, Near, Not, Or

KEYWORDS = {"AND": "AND", "OR": "OR", "NOT": "NOT"}
NEAR_NAMES = frozenset({"NEAR", "near"})
WORD_TERMINATORS = frozenset("(),")


class TokenType(str, Enum):
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    NEAR = "NEAR"
    WORD = "word"
    QUOTED = "quoted"
    REGEX = "regex"
    EOF = "end of query"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    position: int


def tokenize(query: str) -> list[Token]:
    """Split a query string into tokens.

    Raises:
        QueryParseError: On an unterminated quoted string or regex.
    """
    tokens: list[Token] = []
    i = 0
    n = len(query)

    while i < n:
        ch = query[i]

        if ch.isspace():
            i += 1
            continue

        if ch in "(),":
            tokens.append(Token(TokenType(ch), ch, i))
            i += 1
            continue

        if query.startswith("&&", i):
            tokens.append(Token(TokenType.AND, "&&", i))
            i += 2
            continue

        if query.startswith("||", i):
            tokens.append(Token(TokenType.OR, "||", i))
            i += 2
            continue

        if ch == "!":
            tokens.append(Token(TokenType.NOT, "!", i))
            i += 1
            continue

        if ch in "\"'":
            value, end = _read_quoted(query, i)
            tokens.append(Token(TokenType.QUOTED, value, i))
            i = end
            continue

        if ch == "/":
            literal, end = _read_regex(query, i)
            tokens.append(Token(TokenType.REGEX, literal, i))
            i = end
            continue

        start = i
        while i < n and not query[i].isspace() and query[i] not in WORD_TERMINATORS:
            i += 1
        word = query[start:i]

        if word in KEYWORDS:
            tokens.append(Token(TokenType(KEYWORDS[word]), word, start))
        elif word in NEAR_NAMES and _next_non_space(query, i) == "(":
            tokens.append(Token(TokenType.NEAR, word, start))
        else:
            tokens.append(Token(TokenType.WORD, word, start))

    tokens.append(Token(TokenType.EOF, "", n))
    return tokens


def _read_quoted(query: str, start: int) -> tuple[str, int]:
    quote = query[start]
    chars: list[str] = []
    i = start + 1
    while i < len(query):
        ch = query[i]
        if ch == "\\" and i + 1 < len(query):
            chars.append(query[i + 1])
            i += 2
            continue
        if ch == quote:
            return "".join(chars), i + 1
        chars.append(ch)
        i += 1
    raise QueryParseError(
        f"Unterminated string starting at position {start}", position=start
    )


def _read_regex(query: str, start: int) -> tuple[str, int]:
    i = start + 1
    while i < len(query):
        ch = query[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "/":
            i += 1
            while i < len(query) and query[i].isalpha():
                i += 1
            return query[start:i], i
        i += 1
    raise QueryParseError(
        f"Unterminated regular expression starting at position {start}",
        position=start,
    )


def _next_non_space(query: str, i: int) -> str:
    while i < len(query) and query[i].isspace():
        i += 1
    return query[i] if i < len(query) else ""


class QueryParser:
    """Recursive-descent parser producing an expression tree."""

    def __init__(self) -> None:
        self.tokens: list[Token] = []
        self.pos = 0

    def parse(self, query: str) -> Expression:
        """Parse ``query`` into an expression.

        Raises:
            QueryParseError: If the query is empty or malformed.
            InvalidPatternError: If a regex literal does not compile.
        """
        self.tokens = tokenize(query)
        self.pos = 0

        if self._current.type is TokenType.EOF:
            raise QueryParseError("Empty query", position=0)

        result = self._parse_or()

        if self._current.type is not TokenType.EOF:
            self._error(f"Unexpected token '{self._current.value}'")

        return result

    @property
    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    def _expect(self, token_type: TokenType) -> Token:
        if self._current.type is not token_type:
            found = self._current.value or self._current.type.value
            self._error(f"Expected '{token_type.value}' but found '{found}'")
        return self._advance()

    def _error(self, message: str) -> None:
        position = self._current.position
        raise QueryParseError(f"{message} at position {position}", position=position)

    def _parse_or(self) -> Expression:
        left = self._parse_and()
        while self._current.type is TokenType.OR:
            self._advance()
            left = Or(left, self._parse_and())
        return left

    def _parse_and(self) -> Expression:
        left = self._parse_not()
        while True:
            token_type = self._current.type
            if token_type is TokenType.AND:
                self._advance()
                left = And(left, self._parse_not())
            elif token_type in (
                TokenType.NOT,
                TokenType.LPAREN,
                TokenType.NEAR,
                TokenType.WORD,
                TokenType.QUOTED,
                TokenType.REGEX,
            ):
                # Implicit AND between adjacent operands
                left = And(left, self._parse_not())
            else:
                return left

    def _parse_not(self) -> Expression:
        if self._current.type is TokenType.NOT:
            self._advance()
            return Not(self._parse_not())
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        token = self._current

        if token.type is TokenType.LPAREN:
            self._advance()
            inner = self._parse_or()
            self._expect(TokenType.RPAREN)
            return inner

        if token.type is TokenType.NEAR:
            return self._parse_near()

        if token.type is TokenType.QUOTED:
            self._advance()
            if not token.value:
                raise QueryParseError(
                    f"Empty search term at position {token.position}",
                    position=token.position,
                )
            return Literal.plain(token.value)

        if token.type in (TokenType.WORD, TokenType.REGEX):
            self._advance()
            return Literal.from_text(token.value)

        if token.type is TokenType.EOF:
            self._error("Unexpected end of query")
        self._error(f"Unexpected token '{token.value}'")
        raise AssertionError("unreachable")

    def _parse_near(self) -> Expression:
        self._advance()
        self._expect(TokenType.LPAREN)
        left = self._parse_or()
        self._expect(TokenType.COMMA)
        right = self._parse_or()
        self._expect(TokenType.COMMA)
        distance = self._parse_distance()
        self._expect(TokenType.RPAREN)
        return Near(left, right, distance)

    def _parse_distance(self) -> int | str:
        token = self._current
        if token.type not in (TokenType.WORD, TokenType.QUOTED):
            found = token.value or token.type.value
            self._error(f"Expected NEAR distance but found '{found}'")
        self._advance()
        try:
            return int(token.value)
        except ValueError:
            # Kept as-is; evaluation rejects it as an invalid distance
            return token.value


def parse_query(query: str) -> Expression:
    """Parse a query string into an expression tree.

    Usage:
        ast = parse_query('error AND NOT "stack trace"')
        ast = parse_query("NEAR(/time\\w+/i, error, 5)")
    """
    return QueryParser().parse(query)
