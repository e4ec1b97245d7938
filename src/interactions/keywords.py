"""Keyword extraction for interaction and like records."""

import re

from src.interactions.constants import (
    KEYWORD_STOP_WORDS,
    MAX_KEYWORDS,
    MIN_KEYWORD_LENGTH,
)


_NON_ALPHA = re.compile(r"[^a-z\s]")


def extract_keywords(text: str | None, limit: int = MAX_KEYWORDS) -> list[str]:
    """Extract unique lowercase keywords from free text.

    Args:
        text: Title and summary text.
        limit: Maximum number of keywords returned.

    Returns:
        Keywords in order of first appearance.
    """
    if not text:
        return []
    words = _NON_ALPHA.sub(" ", text.lower()).split()
    unique = dict.fromkeys(
        w for w in words if len(w) >= MIN_KEYWORD_LENGTH and w not in KEYWORD_STOP_WORDS
    )
    return list(unique)[:limit]
