"""Standalone-word promotion policy for trending extraction.

Phrases are preferred over single words. A single word is only surfaced on
its own when it behaves like a strong proper noun, either isolated from any
bigram context or versatile across many of them.
"""

import math
from dataclasses import dataclass

from src.feed.constants import (
    ISOLATED_WORD_MIN_COUNT,
    PROPER_NOUN_CAPITALIZED_RATIO,
    PROPER_NOUN_MIN_CAPITALIZED,
    VERSATILE_WORD_MIN_CONTEXTS,
    VERSATILE_WORD_MIN_COUNT,
)


@dataclass(frozen=True)
class WordStats:
    """Observed statistics for one candidate word.

    Attributes:
        count: Occurrences as a unigram.
        capitalized: Occurrences capitalized away from the title start.
        contexts: Number of distinct bigrams containing the word.
    """

    count: int
    capitalized: int
    contexts: int


def is_strong_proper_noun(stats: WordStats) -> bool:
    """Capitalized in at least half its occurrences, and at least three times."""
    required = max(
        PROPER_NOUN_MIN_CAPITALIZED,
        math.ceil(stats.count * PROPER_NOUN_CAPITALIZED_RATIO),
    )
    return stats.capitalized >= required


def should_promote_word(stats: WordStats) -> bool:
    """Decide whether a word may trend on its own.

    Args:
        stats: Word statistics from the current pool.

    Returns:
        True if the word is promoted to standalone trending status.
    """
    if not is_strong_proper_noun(stats):
        return False
    if stats.contexts == 0:
        return stats.count >= ISOLATED_WORD_MIN_COUNT
    return (
        stats.contexts >= VERSATILE_WORD_MIN_CONTEXTS
        and stats.count >= VERSATILE_WORD_MIN_COUNT
    )
