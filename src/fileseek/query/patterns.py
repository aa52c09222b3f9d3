"""Regular expression literal helpers.

Regex terms are written ``/source/flags``. Flags ``i``, ``m``, ``s`` and
``x`` map to the matching ``re`` flags; ``g``, ``u`` and ``y`` are accepted
and ignored since every search is global and unicode-aware already.
"""

import re

from fileseek.exceptions import InvalidPatternError

FLAG_MAP: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}
IGNORED_FLAGS = frozenset("guy")
VALID_FLAGS = frozenset(FLAG_MAP) | IGNORED_FLAGS


def parse_regex_literal(text: str) -> tuple[str, str] | None:
    """Split ``/source/flags`` into ``(source, flags)``.

    Returns None when ``text`` is not a regex literal.
    """
    if len(text) < 3 or not text.startswith("/"):
        return None
    end = text.rfind("/")
    if end <= 0:
        return None
    flags = text[end + 1 :]
    if any(flag not in VALID_FLAGS for flag in flags):
        return None
    source = text[1:end]
    if not source:
        return None
    return source, flags


def flags_to_re(flags: str) -> re.RegexFlag:
    """Convert a flag string to ``re`` flags.

    Raises:
        InvalidPatternError: If an unknown flag letter is present.
    """
    result = re.RegexFlag(0)
    for flag in flags:
        if flag in FLAG_MAP:
            result |= FLAG_MAP[flag]
        elif flag not in IGNORED_FLAGS:
            raise InvalidPatternError(flags, f"unknown flag '{flag}'")
    return result


def compile_pattern(source: str, flags: str = "") -> re.Pattern[str]:
    """Compile a regex term.

    Raises:
        InvalidPatternError: If the source or flags are not valid.
    """
    try:
        return re.compile(source, flags_to_re(flags))
    except re.error as e:
        raise InvalidPatternError(source, str(e)) from e


def escape(text: str) -> str:
    """Escape ``text`` for literal use inside a pattern."""
    return re.escape(text)


def whole_word_pattern(text: str, case_sensitive: bool) -> re.Pattern[str]:
    """Pattern matching ``text`` with no word character on either side."""
    return re.compile(
        rf"(?<!\w){escape(text)}(?!\w)",
        0 if case_sensitive else re.IGNORECASE,
    )
