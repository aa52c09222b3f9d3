"""Content hashing utilities."""

import hashlib


def hash_content(content: str, length: int = 32) -> str:
    """Hash string content using SHA256.

    Args:
        content: String content to hash.
        length: Length of hash to return (max 64).

    Returns:
        Hex digest truncated to specified length.
    """
    return hashlib.sha256(content.encode("utf-8", "surrogatepass")).hexdigest()[
        :length
    ]


def make_key(*parts: object) -> str:
    """Join key parts into a single cache key.

    None is rendered as "-" so that optional parts keep their slot.
    """
    return ":".join("-" if part is None else str(part) for part in parts)
