"""Constants for the feed ranking engine."""

# Trending extraction
TRENDING_MAX_PHRASES: int = 20
TRENDING_MIN_TOKEN_LENGTH: int = 3
TRENDING_MIN_WORD_LENGTH: int = 4
TRENDING_MAX_WORD_LENGTH: int = 20
TRENDING_MIN_PHRASE_COUNT: int = 2
TRENDING_MIN_WORD_COUNT: int = 4

# Standalone word promotion thresholds
PROPER_NOUN_MIN_CAPITALIZED: int = 3
PROPER_NOUN_CAPITALIZED_RATIO: float = 0.5
ISOLATED_WORD_MIN_COUNT: int = 4
VERSATILE_WORD_MIN_CONTEXTS: int = 4
VERSATILE_WORD_MIN_COUNT: int = 5

# Redundancy filter ratios
WORD_COVERED_BY_PHRASE_RATIO: float = 0.6
PHRASE_DOMINATED_BY_WORD_RATIO: float = 2.0

VOWELS: str = "aeiouáéíóúàèìòùâêîôûãõäëïöü"

# Combined English / Portuguese / Spanish stop-words tuned for headlines.
STOP_WORDS: frozenset[str] = frozenset(
    {
        # English
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
        "be", "have", "has", "had", "do", "does", "did", "will", "would",
        "could", "should", "may", "might", "must", "shall", "can", "need",
        "dare", "ought", "used", "it", "its", "this", "that", "these", "those",
        "you", "he", "she", "we", "they", "what", "which", "who", "whom",
        "whose", "where", "when", "why", "how", "all", "each", "every", "both",
        "few", "more", "most", "other", "some", "such", "nor", "not", "only",
        "own", "same", "than", "too", "very", "just", "also", "now", "here",
        "there", "then", "once", "because", "until", "while", "although",
        "though", "after", "before", "above", "below", "between", "under",
        "again", "further", "about", "into", "through", "during", "out", "off",
        "over", "down", "any", "new", "says", "said", "say", "according",
        "report", "reports", "news", "amid", "among", "around", "being", "get",
        "gets", "got", "make", "makes", "made", "take", "takes", "took", "come",
        "comes", "came", "goes", "went", "see", "sees", "saw", "know", "knows",
        "knew", "think", "thinks", "thought", "want", "wants", "wanted", "use",
        "uses", "find", "finds", "found", "give", "gives", "gave", "tell",
        "tells", "told", "year", "years", "day", "days", "time", "first",
        "last", "long", "great", "little", "old", "right", "big", "high",
        "different", "small", "large", "next", "early", "young", "important",
        "public", "bad", "good", "best", "worst", "way", "week", "month",
        "today", "yesterday", "tomorrow", "monday", "tuesday", "wednesday",
        "thursday", "friday", "saturday", "sunday", "january", "february",
        "march", "april", "june", "july", "august", "september", "october",
        "november", "december", "reuters", "associated", "press", "bbc", "cnn",
        "guardian", "times", "post", "journal", "breaking", "update", "latest",
        "live", "watch", "read", "click", "video", "gov", "sen", "rep", "dr",
        "mr", "mrs", "ms", "jr", "sr",
        # Portuguese
        "para", "com", "uma", "por", "mais", "como", "mas", "foi", "ser", "são",
        "tem", "seu", "sua", "isso", "esse", "esta", "este", "pela", "pelo",
        "nos", "das", "dos", "que", "não", "nao", "ainda", "sobre", "após",
        "apos", "até", "ate", "onde", "quando", "muito", "pode", "deve", "será",
        "sera", "está", "foram", "entre", "dois", "tres", "três", "anos", "dia",
        "dias", "diz", "disse", "vai", "vão", "vao", "ter", "já", "sem", "nem",
        "só", "todo", "toda", "fica", "contra", "desde", "cada", "seus", "suas",
        "eram",
        # Spanish
        "con", "una", "más", "pero", "fue", "son", "tiene", "tienen", "esto",
        "ese", "esa", "del", "los", "las", "hay", "muy", "puede", "pueden",
        "están", "años", "día",
        # Common fragments
        "est", "vel", "ncia", "cio", "ção", "cao", "mente", "dade", "ado", "ada",
    }
)

# Scoring
PROFILE_KIND_LIKE = "like"
PROFILE_KIND_ENGAGEMENT = "engagement"

# Ranking component names for logging
COMPONENT_FEED = "feed"
