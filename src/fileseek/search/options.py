"""Match options shared by every matcher."""

from dataclasses import dataclass
from enum import Enum

from fileseek.config.schema import SearchConfig


class FuzzyContext(str, Enum):
    """Where a term is being matched; selects which fuzzy switch applies."""

    LEAF = "leaf"
    NEAR = "near"


@dataclass(frozen=True)
class MatchOptions:
    """Options for one evaluation.

    Attributes:
        case_sensitive: Match letter case exactly.
        whole_word: Reject matches with a word character on either side.
        fuzzy_enabled: Fuzzy fallback for terms outside NEAR.
        fuzzy_near_enabled: Fuzzy fallback for terms inside NEAR.
        max_content_size: Largest content (in characters) accepted, or None.
        fuzzy_threshold: Minimum similarity score (0-100) for a fuzzy match.
    """

    case_sensitive: bool = False
    whole_word: bool = False
    fuzzy_enabled: bool = True
    fuzzy_near_enabled: bool = True
    max_content_size: int | None = None
    fuzzy_threshold: float = 70.0

    @classmethod
    def from_config(cls, config: SearchConfig) -> "MatchOptions":
        return cls(
            case_sensitive=config.case_sensitive,
            whole_word=config.whole_word,
            fuzzy_enabled=config.fuzzy_enabled,
            fuzzy_near_enabled=config.fuzzy_near_enabled,
            max_content_size=config.max_content_size,
            fuzzy_threshold=config.fuzzy_threshold,
        )

    def fuzzy_allowed(self, context: FuzzyContext) -> bool:
        if context is FuzzyContext.NEAR:
            return self.fuzzy_near_enabled
        return self.fuzzy_enabled

    def cache_key(self) -> str:
        return (
            f"cs={int(self.case_sensitive)},ww={int(self.whole_word)},"
            f"fz={int(self.fuzzy_enabled)},fzn={int(self.fuzzy_near_enabled)},"
            f"th={self.fuzzy_threshold}"
        )
