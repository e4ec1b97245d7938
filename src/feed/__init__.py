"""Feed ranking and personalization engine.

Turns a continuously updating pool of short news items into a stable,
diverse, session-consistent ordering. Scores combine freshness, trending
matches and two affinity profiles, are cached per epoch so the list does
not flicker, and are then reordered to guarantee slots for breaking items
and to bound same-source and same-category runs.
"""

from src.feed.affinity import ProfileBuilder, build_profiles
from src.feed.cache import ScoreCache
from src.feed.controller import FeedWindowController
from src.feed.diversity import (
    DiversityEnforcer,
    DiversityResult,
    enforce_category_cap,
    enforce_diversity,
    enforce_source_cap,
)
from src.feed.interleave import FreshnessInterleaver, interleave, is_fresh
from src.feed.metrics import RankerMetrics
from src.feed.models import (
    AffinityProfile,
    AffinityProfiles,
    NewsItem,
    PhraseKind,
    RankedEntry,
    RenderPass,
    ScoreComponents,
    ScoredItem,
    TrendingPhrase,
)
from src.feed.promotion import WordStats, should_promote_word
from src.feed.ranker import FeedRanker, rank
from src.feed.scorer import ItemScorer, ScoringContext, score
from src.feed.session import FeedSession, SessionState
from src.feed.state_machine import (
    RankerState,
    RankerStateMachine,
    RankerStateTransitionError,
)
from src.feed.trending import TrendingExtractor, extract_trending


__all__ = [
    "AffinityProfile",
    "AffinityProfiles",
    "DiversityEnforcer",
    "DiversityResult",
    "FeedRanker",
    "FeedSession",
    "FeedWindowController",
    "FreshnessInterleaver",
    "ItemScorer",
    "NewsItem",
    "PhraseKind",
    "ProfileBuilder",
    "RankedEntry",
    "RankerMetrics",
    "RankerState",
    "RankerStateMachine",
    "RankerStateTransitionError",
    "RenderPass",
    "ScoreCache",
    "ScoreComponents",
    "ScoredItem",
    "ScoringContext",
    "SessionState",
    "TrendingExtractor",
    "TrendingPhrase",
    "WordStats",
    "build_profiles",
    "enforce_category_cap",
    "enforce_diversity",
    "enforce_source_cap",
    "extract_trending",
    "interleave",
    "is_fresh",
    "rank",
    "score",
    "should_promote_word",
]
