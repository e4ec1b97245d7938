"""Configuration schemas."""

from src.config.schemas.feed import (
    AffinityConfig,
    AffinityMatchConfig,
    DiversityConfig,
    FeedConfig,
    FreshnessConfig,
    FreshnessStep,
    InterleaveConfig,
    PenaltyConfig,
    ScoringConfig,
    SessionConfig,
    TrendingConfig,
)


__all__ = [
    "AffinityConfig",
    "AffinityMatchConfig",
    "DiversityConfig",
    "FeedConfig",
    "FreshnessConfig",
    "FreshnessStep",
    "InterleaveConfig",
    "PenaltyConfig",
    "ScoringConfig",
    "SessionConfig",
    "TrendingConfig",
]
