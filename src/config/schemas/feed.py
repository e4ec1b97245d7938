"""Feed engine configuration schema."""

import math
from typing import Annotated

from pydantic import Field, model_validator

from src.data_model import StrictBaseModel


class ScoringConfig(StrictBaseModel):
    """Signal weights for the multi-signal scorer.

    Attributes:
        freshness_weight: Weight of the freshness step function.
        trending_weight: Weight of the trending phrase match.
        like_weight: Weight of the like-profile match.
        engagement_weight: Weight of the engagement-profile match.
        trending_match_cap: Number of trending matches that saturate the signal.
        jitter_max: Upper bound of the per-item uniform jitter draw.
        floor_score: Minimum score after penalties and on scoring failure.
    """

    freshness_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.40
    trending_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.25
    like_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.20
    engagement_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.15
    trending_match_cap: Annotated[int, Field(ge=1, le=20)] = 3
    jitter_max: Annotated[float, Field(ge=0.0, le=1.0)] = 0.05
    floor_score: Annotated[float, Field(ge=0.0, le=1.0)] = 0.01

    @model_validator(mode="after")
    def validate_weights_sum(self) -> "ScoringConfig":
        """Ensure the four signal weights sum to 1.0."""
        total = (
            self.freshness_weight
            + self.trending_weight
            + self.like_weight
            + self.engagement_weight
        )
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            msg = f"Signal weights must sum to 1.0, got {total:.4f}"
            raise ValueError(msg)
        return self


class PenaltyConfig(StrictBaseModel):
    """Penalties subtracted from the weighted signal sum."""

    seen_per_view: Annotated[float, Field(ge=0.0, le=1.0)] = 0.15
    seen_cap: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    clicked: Annotated[float, Field(ge=0.0, le=1.0)] = 0.6
    session_shown: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3


class AffinityMatchConfig(StrictBaseModel):
    """Saturation points and sub-weights for profile matching.

    Attributes:
        source_saturation: Source count at which the source signal saturates.
        category_saturation: Category count at which the category signal saturates.
        keyword_saturation: Matched keyword count at which the keyword signal saturates.
        source_share: Share of the profile match contributed by source.
        category_share: Share of the profile match contributed by category.
        keyword_share: Share of the profile match contributed by keywords.
    """

    source_saturation: Annotated[float, Field(gt=0.0)] = 5.0
    category_saturation: Annotated[float, Field(gt=0.0)] = 3.0
    keyword_saturation: Annotated[float, Field(gt=0.0)] = 3.0
    source_share: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    category_share: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    keyword_share: Annotated[float, Field(ge=0.0, le=1.0)] = 0.4


class FreshnessStep(StrictBaseModel):
    """One step of the freshness function: items younger than ``max_age_hours``."""

    max_age_hours: Annotated[float, Field(gt=0.0)]
    value: Annotated[float, Field(ge=0.0, le=1.0)]


def _default_steps() -> list[FreshnessStep]:
    return [
        FreshnessStep(max_age_hours=1, value=1.0),
        FreshnessStep(max_age_hours=3, value=0.9),
        FreshnessStep(max_age_hours=6, value=0.8),
        FreshnessStep(max_age_hours=12, value=0.6),
        FreshnessStep(max_age_hours=24, value=0.4),
        FreshnessStep(max_age_hours=48, value=0.25),
    ]


class FreshnessConfig(StrictBaseModel):
    """Freshness step function.

    Attributes:
        steps: Ascending age thresholds with their values.
        stale_value: Value for items older than the last step.
        unknown_value: Value for items with a missing or invalid publish time.
    """

    steps: list[FreshnessStep] = Field(default_factory=_default_steps)
    stale_value: Annotated[float, Field(ge=0.0, le=1.0)] = 0.10
    unknown_value: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3

    @model_validator(mode="after")
    def validate_steps_ascending(self) -> "FreshnessConfig":
        """Ensure step thresholds are strictly ascending."""
        ages = [step.max_age_hours for step in self.steps]
        if any(b <= a for a, b in zip(ages, ages[1:], strict=False)):
            msg = "Freshness steps must have strictly ascending max_age_hours"
            raise ValueError(msg)
        return self


class InterleaveConfig(StrictBaseModel):
    """Freshness interleaving parameters."""

    fresh_window_hours: Annotated[float, Field(gt=0.0)] = 2.0
    fresh_max_views: Annotated[int, Field(ge=1)] = 3
    lead_fresh_count: Annotated[int, Field(ge=0)] = 3
    regular_per_fresh: Annotated[int, Field(ge=1)] = 4


class DiversityConfig(StrictBaseModel):
    """Diversity enforcement limits."""

    max_source_run: Annotated[int, Field(ge=1)] = 2
    category_window: Annotated[int, Field(ge=1)] = 3


class SessionConfig(StrictBaseModel):
    """Session, pagination and cache bounds.

    Attributes:
        page_size: Items added to the display window per pagination advance.
        settle_ms: Window that collapses duplicate reveal/pagination triggers.
        shown_max: Shown-set size that triggers trimming.
        shown_keep: Number of most recent shown IDs kept after trimming.
        cache_max_entries: Score cache size that triggers eviction.
    """

    page_size: Annotated[int, Field(ge=1, le=500)] = 20
    settle_ms: Annotated[int, Field(ge=0, le=10000)] = 300
    shown_max: Annotated[int, Field(ge=1)] = 500
    shown_keep: Annotated[int, Field(ge=1)] = 400
    cache_max_entries: Annotated[int, Field(ge=2)] = 1000

    @model_validator(mode="after")
    def validate_shown_bounds(self) -> "SessionConfig":
        """Ensure trimming keeps fewer entries than the trim trigger."""
        if self.shown_keep > self.shown_max:
            msg = "shown_keep must not exceed shown_max"
            raise ValueError(msg)
        return self


class TrendingConfig(StrictBaseModel):
    """Trending phrase extraction parameters."""

    max_phrases: Annotated[int, Field(ge=1, le=100)] = 20
    lookback_hours: Annotated[float | None, Field(gt=0.0)] = None


class AffinityConfig(StrictBaseModel):
    """Interaction log retention for profile building."""

    retention_days: Annotated[int, Field(ge=1, le=365)] = 7
    max_tracked: Annotated[int, Field(ge=1)] = 500
    read_threshold_seconds: Annotated[float, Field(ge=0.0)] = 5.0


class FeedConfig(StrictBaseModel):
    """Root configuration for feed.yaml.

    Attributes:
        version: Schema version.
        scoring: Signal weights.
        penalties: Score penalties.
        affinity_match: Profile match shares and saturation points.
        freshness: Freshness step function.
        interleave: Fresh/regular interleaving.
        diversity: Run-length limits.
        session: Session and pagination bounds.
        trending: Trending extraction limits.
        affinity: Interaction log retention.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    penalties: PenaltyConfig = Field(default_factory=PenaltyConfig)
    affinity_match: AffinityMatchConfig = Field(default_factory=AffinityMatchConfig)
    freshness: FreshnessConfig = Field(default_factory=FreshnessConfig)
    interleave: InterleaveConfig = Field(default_factory=InterleaveConfig)
    diversity: DiversityConfig = Field(default_factory=DiversityConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    trending: TrendingConfig = Field(default_factory=TrendingConfig)
    affinity: AffinityConfig = Field(default_factory=AffinityConfig)
