"""Constants for interaction tracking."""

# Retention applied on every tracker write and when building profiles
RETENTION_DAYS: int = 7
MAX_TRACKED: int = 500

# A single dwell observation longer than this counts as a meaningful read
READ_THRESHOLD_SECONDS: float = 5.0

MAX_KEYWORDS: int = 10
MIN_KEYWORD_LENGTH: int = 4

KEYWORD_STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
        "her", "was", "one", "our", "out", "has", "have", "been", "will",
        "more", "when", "who", "new", "now", "way", "may", "say", "she", "two",
        "how", "its", "let", "put", "too", "use", "this", "that", "with",
        "from", "they", "were", "said", "each", "which", "their", "there",
        "what", "about", "would", "could", "should", "after", "before",
    }
)
