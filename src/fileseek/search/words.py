"""Word boundary indexing.

Maps character offsets to word indexes so NEAR can measure distances in
words. A word is a maximal run of non-whitespace characters.
"""

import re
from bisect import bisect_right
from dataclasses import dataclass

from fileseek.cache.lru import MemoryAwareLRUCache
from fileseek.utils.hashing import hash_content

WORD_RE = re.compile(r"\S+")


@dataclass(frozen=True)
class WordSpan:
    """Character range of one word; ``end`` is inclusive."""

    start: int
    end: int

    def __contains__(self, offset: object) -> bool:
        return isinstance(offset, int) and self.start <= offset <= self.end


class WordIndex:
    """Ordered word spans of a piece of content with offset lookup."""

    __slots__ = ("spans", "_starts")

    def __init__(self, spans: list[WordSpan]) -> None:
        self.spans = spans
        self._starts = [span.start for span in spans]

    @classmethod
    def build(cls, content: str) -> "WordIndex":
        return cls(
            [WordSpan(m.start(), m.end() - 1) for m in WORD_RE.finditer(content)]
        )

    def word_index_of(self, offset: int) -> int | None:
        """Index of the word containing ``offset``, or None if it's in whitespace."""
        i = bisect_right(self._starts, offset) - 1
        if i < 0:
            return None
        if offset <= self.spans[i].end:
            return i
        return None

    def size_estimate(self) -> int:
        # Two ints per span plus the start list
        return len(self.spans) * 24

    def __len__(self) -> int:
        return len(self.spans)

    def __getitem__(self, index: int) -> WordSpan:
        return self.spans[index]


class WordBoundaryIndexer:
    """Builds and caches word indexes keyed by a hash of the content."""

    def __init__(
        self, cache: MemoryAwareLRUCache[str, WordIndex] | None = None
    ) -> None:
        self._cache = cache

    def index(self, content: str) -> WordIndex:
        """Word index for ``content``, built once per distinct content."""
        if self._cache is None:
            return WordIndex.build(content)

        key = hash_content(content)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        word_index = WordIndex.build(content)
        self._cache.set(key, word_index)
        return word_index

    def word_index_of(self, offset: int, content: str) -> int | None:
        """Index of the word containing ``offset`` in ``content``.

        Returns None for offsets in whitespace or outside the content.
        """
        if offset < 0 or offset >= len(content):
            return None
        return self.index(content).word_index_of(offset)

    def word_distance(self, offset1: int, offset2: int, content: str) -> int | None:
        """Distance in words between two offsets, or None if either isn't in a word."""
        word_index = self.index(content)
        w1 = word_index.word_index_of(offset1)
        w2 = word_index.word_index_of(offset2)
        if w1 is None or w2 is None:
            return None
        return abs(w1 - w2)

    def remove(self, content: str) -> bool:
        if self._cache is None:
            return False
        return self._cache.delete(hash_content(content))

    def clear(self) -> None:
        if self._cache is not None:
            self._cache.clear()
