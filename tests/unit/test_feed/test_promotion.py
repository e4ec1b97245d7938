"""Unit tests for the standalone-word promotion policy."""

import pytest

from src.feed.promotion import WordStats, is_strong_proper_noun, should_promote_word


class TestIsStrongProperNoun:
    """Tests for is_strong_proper_noun."""

    @pytest.mark.parametrize(
        ("count", "capitalized", "expected"),
        [
            (4, 3, True),
            (4, 2, False),
            (10, 5, True),
            (10, 4, False),
            (3, 3, True),
        ],
    )
    def test_threshold(self, count: int, capitalized: int, expected: bool) -> None:
        """At least three capitals and at least half of all occurrences."""
        stats = WordStats(count=count, capitalized=capitalized, contexts=0)

        assert is_strong_proper_noun(stats) is expected


class TestShouldPromoteWord:
    """Tests for should_promote_word."""

    def test_isolated_word_needs_four_occurrences(self) -> None:
        """Isolated proper nouns need a count of four."""
        assert should_promote_word(WordStats(count=4, capitalized=4, contexts=0))
        assert not should_promote_word(WordStats(count=3, capitalized=3, contexts=0))

    def test_versatile_word_needs_contexts_and_count(self) -> None:
        """Words inside bigrams need four contexts and five occurrences."""
        assert should_promote_word(WordStats(count=5, capitalized=5, contexts=4))
        assert not should_promote_word(WordStats(count=5, capitalized=5, contexts=3))
        assert not should_promote_word(WordStats(count=4, capitalized=4, contexts=4))

    def test_weak_capitalization_never_promoted(self) -> None:
        """Mostly lowercase words never trend alone."""
        assert not should_promote_word(WordStats(count=12, capitalized=2, contexts=0))
