"""Trending phrase extraction over the current item pool."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import structlog

from src.feed.constants import (
    PHRASE_DOMINATED_BY_WORD_RATIO,
    TRENDING_MAX_PHRASES,
    TRENDING_MIN_PHRASE_COUNT,
    TRENDING_MIN_WORD_COUNT,
    TRENDING_MIN_WORD_LENGTH,
    WORD_COVERED_BY_PHRASE_RATIO,
)
from src.feed.models import NewsItem, PhraseKind, TrendingPhrase
from src.feed.promotion import WordStats, should_promote_word
from src.feed.text import is_stop_word, is_valid_word, tokenize_title


logger = structlog.get_logger()


@dataclass
class PoolCounts:
    """Counters gathered from one pass over the pool's titles.

    Attributes:
        phrases: Bigram occurrence counts.
        words: Unigram occurrence counts.
        capitalized: Mid-title capitalized occurrences per word.
        contexts: Distinct bigrams each word occurs in.
    """

    phrases: Counter[str] = field(default_factory=Counter)
    words: Counter[str] = field(default_factory=Counter)
    capitalized: Counter[str] = field(default_factory=Counter)
    contexts: dict[str, set[str]] = field(default_factory=dict)

    def add_title(self, title: str) -> None:
        """Accumulate counts for one headline."""
        tokens = tokenize_title(title)

        for token in tokens:
            if token.is_proper_noun_signal:
                self.capitalized[token.text] += 1

        for token in tokens:
            word = token.text
            if (
                len(word) >= TRENDING_MIN_WORD_LENGTH
                and not is_stop_word(word)
                and is_valid_word(word)
            ):
                self.words[word] += 1

        for left, right in zip(tokens, tokens[1:], strict=False):
            w1, w2 = left.text, right.text
            if is_stop_word(w1) or is_stop_word(w2):
                continue
            if not is_valid_word(w1) or not is_valid_word(w2):
                continue
            phrase = f"{w1} {w2}"
            self.phrases[phrase] += 1
            self.contexts.setdefault(w1, set()).add(phrase)
            self.contexts.setdefault(w2, set()).add(phrase)

    def stats_for(self, word: str) -> WordStats:
        """Promotion statistics for a word."""
        return WordStats(
            count=self.words.get(word, 0),
            capitalized=self.capitalized.get(word, 0),
            contexts=len(self.contexts.get(word, ())),
        )


def _is_redundant(candidate: TrendingPhrase, kept: list[TrendingPhrase]) -> bool:
    """Check a candidate against already-kept entries."""
    for existing in kept:
        if (
            candidate.kind is PhraseKind.WORD
            and candidate.text in existing.words
            and existing.count >= candidate.count * WORD_COVERED_BY_PHRASE_RATIO
        ):
            return True
        if (
            candidate.kind is PhraseKind.PHRASE
            and existing.kind is PhraseKind.WORD
            and existing.text in candidate.words
            and existing.count >= candidate.count * PHRASE_DOMINATED_BY_WORD_RATIO
        ):
            return True
    return False


class TrendingExtractor:
    """Mines the item pool for recurring phrases and proper-noun words."""

    def __init__(
        self,
        max_phrases: int = TRENDING_MAX_PHRASES,
        lookback_hours: float | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            max_phrases: Maximum number of entries returned.
            lookback_hours: Only consider items published within this window.
            now: Reference time for the lookback window.
        """
        self._max_phrases = max_phrases
        self._lookback_hours = lookback_hours
        self._now = now
        self._log = logger.bind(component="feed", subcomponent="trending")

    def _window(self, items: Iterable[NewsItem]) -> list[NewsItem]:
        if self._lookback_hours is None:
            return list(items)
        cutoff = (self._now or datetime.now(UTC)) - timedelta(
            hours=self._lookback_hours
        )
        return [
            item
            for item in items
            if item.published_at is not None and item.published_at >= cutoff
        ]

    def count(self, items: Iterable[NewsItem]) -> PoolCounts:
        """Gather pool counts from item titles."""
        counts = PoolCounts()
        for item in self._window(items):
            counts.add_title(item.title)
        return counts

    def extract(self, items: Iterable[NewsItem]) -> list[TrendingPhrase]:
        """Extract ranked trending entries.

        Args:
            items: Current visible item pool.

        Returns:
            Up to ``max_phrases`` entries, highest count first.
        """
        counts = self.count(items)

        candidates: list[TrendingPhrase] = []
        consumed: set[str] = set()

        phrase_entries = sorted(
            (
                (phrase, n)
                for phrase, n in counts.phrases.items()
                if n >= TRENDING_MIN_PHRASE_COUNT
            ),
            key=lambda entry: -entry[1],
        )
        for phrase, n in phrase_entries:
            candidates.append(TrendingPhrase(phrase, n, PhraseKind.PHRASE))
            consumed.update(phrase.split(" "))

        word_entries = sorted(
            (
                (word, n)
                for word, n in counts.words.items()
                if n >= TRENDING_MIN_WORD_COUNT
                and word not in consumed
                and should_promote_word(counts.stats_for(word))
            ),
            key=lambda entry: -entry[1],
        )
        for word, n in word_entries:
            candidates.append(TrendingPhrase(word, n, PhraseKind.WORD))

        candidates.sort(key=lambda c: -c.count)

        kept: list[TrendingPhrase] = []
        for candidate in candidates:
            if len(kept) >= self._max_phrases:
                break
            if not _is_redundant(candidate, kept):
                kept.append(candidate)

        self._log.debug(
            "trending_extracted",
            phrase_candidates=len(phrase_entries),
            word_candidates=len(word_entries),
            kept=len(kept),
        )
        return kept


def extract_trending(
    items: Iterable[NewsItem],
    max_phrases: int = TRENDING_MAX_PHRASES,
    lookback_hours: float | None = None,
    now: datetime | None = None,
) -> list[TrendingPhrase]:
    """Pure function API for trending extraction.

    Args:
        items: Current visible item pool.
        max_phrases: Maximum number of entries returned.
        lookback_hours: Optional publish-time window.
        now: Reference time for the window.

    Returns:
        Ranked trending entries.
    """
    extractor = TrendingExtractor(
        max_phrases=max_phrases, lookback_hours=lookback_hours, now=now
    )
    return extractor.extract(items)
