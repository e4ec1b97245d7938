"""Headline tokenization helpers shared by trending extraction."""

import re
from dataclasses import dataclass

from src.feed.constants import (
    STOP_WORDS,
    TRENDING_MAX_WORD_LENGTH,
    TRENDING_MIN_TOKEN_LENGTH,
    VOWELS,
)


_NON_WORD = re.compile(r"[^A-Za-z0-9_\sÀ-ɏ'-]")
_WHITESPACE = re.compile(r"\s+")
_ALL_DIGITS = re.compile(r"^\d+$")
_LEADING_CAPITAL = re.compile(r"^[A-ZÀ-Ü]")
_HAS_VOWEL = re.compile(f"[{VOWELS}]", re.IGNORECASE)


@dataclass(frozen=True)
class Token:
    """A headline token.

    Attributes:
        text: Lowercased token.
        position: Index among the title's kept tokens.
        capitalized: Whether the original token starts with a capital letter.
    """

    text: str
    position: int
    capitalized: bool

    @property
    def is_proper_noun_signal(self) -> bool:
        """Capitalized somewhere other than the start of the title."""
        return self.position > 0 and self.capitalized and self.text not in STOP_WORDS


def tokenize_title(title: str) -> list[Token]:
    """Split a headline into kept tokens.

    Punctuation is replaced by spaces; tokens shorter than three characters
    and purely numeric tokens are dropped before positions are assigned.

    Args:
        title: Original headline text.

    Returns:
        Tokens in title order.
    """
    cleaned = _NON_WORD.sub(" ", title or "")
    raw = [
        word
        for word in _WHITESPACE.split(cleaned)
        if len(word) >= TRENDING_MIN_TOKEN_LENGTH and not _ALL_DIGITS.match(word)
    ]
    return [
        Token(
            text=word.lower(),
            position=idx,
            capitalized=bool(_LEADING_CAPITAL.match(word)),
        )
        for idx, word in enumerate(raw)
    ]


def is_valid_word(word: str) -> bool:
    """Reject abbreviation noise: too short/long, all digits, or vowel-less."""
    if len(word) < TRENDING_MIN_TOKEN_LENGTH or len(word) > TRENDING_MAX_WORD_LENGTH:
        return False
    if _ALL_DIGITS.match(word):
        return False
    return bool(_HAS_VOWEL.search(word))


def is_stop_word(word: str) -> bool:
    """Check a lowercased word against the headline stop-word list."""
    return word in STOP_WORDS


def title_case(text: str) -> str:
    """Capitalize the first letter of each space-separated word."""
    return " ".join(w[:1].upper() + w[1:] for w in text.split(" "))
