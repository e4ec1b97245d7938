"""Multi-signal scoring engine for feed items."""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from src.config.schemas.feed import FeedConfig
from src.feed.models import (
    AffinityProfile,
    AffinityProfiles,
    NewsItem,
    ScoreComponents,
    TrendingPhrase,
)
from src.feed.session import FeedSession
from src.interactions.keywords import extract_keywords
from src.interactions.models import ItemCounters


logger = structlog.get_logger()


@dataclass
class ScoringContext:
    """Inputs shared by every item scored in one ranking pass.

    Attributes:
        session: Session owning the score cache and jitter source.
        trending: Current trending entries.
        profiles: Like and engagement profiles.
        counters: Interaction counters keyed by item ID.
        now: Reference time for freshness.
    """

    session: FeedSession
    trending: list[TrendingPhrase] = field(default_factory=list)
    profiles: AffinityProfiles = field(default_factory=AffinityProfiles)
    counters: Mapping[str, ItemCounters] = field(default_factory=dict)
    now: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def config(self) -> FeedConfig:
        """Configuration of the owning session."""
        return self.session.config

    def counters_for(self, item_id: str) -> ItemCounters:
        """Counters for an item, empty when untracked."""
        return self.counters.get(item_id) or ItemCounters()


class ItemScorer:
    """Computes cached scores for feed items.

    Scoring formula:
        weighted = 0.40 * freshness + 0.25 * trending
                 + 0.20 * like_affinity + 0.15 * engagement_affinity
        score = max(weighted - seen - clicked - session_shown, floor) + jitter

    Where:
        - freshness: step function of item age
        - trending: share of trending entries found in title and summary
        - like_affinity / engagement_affinity: source, category and keyword
          overlap with the respective profile
        - jitter: one uniform draw per item per epoch
    """

    def __init__(self, context: ScoringContext) -> None:
        """Initialize the scorer.

        Args:
            context: Shared scoring inputs.
        """
        self._context = context
        self._config = context.config
        self._session = context.session
        self.failures = 0
        self._log = logger.bind(
            component="feed",
            subcomponent="scorer",
            session_id=context.session.session_id,
        )

    def score(self, item: NewsItem) -> float:
        """Return the item's score for the current epoch.

        Computed at most once per epoch; later calls return the cached value.

        Args:
            item: Item to score.

        Returns:
            Score, never below the configured floor.
        """
        return self._session.cache.get_score(item.id, lambda: self._compute(item))

    def _compute(self, item: NewsItem) -> float:
        floor = self._config.scoring.floor_score
        try:
            total = self.components(item, jitter=self._session.draw_jitter()).total
        except Exception:  # noqa: BLE001
            self._log.warning("item_scoring_failed", item_id=item.id, exc_info=True)
            self.failures += 1
            return floor

        if not isinstance(total, int | float) or not math.isfinite(total):
            self._log.warning("item_score_not_finite", item_id=item.id, score=total)
            self.failures += 1
            return floor
        return float(total)

    def components(self, item: NewsItem, jitter: float = 0.0) -> ScoreComponents:
        """Compute the full score breakdown without touching the cache.

        Args:
            item: Item to score.
            jitter: Jitter added after the floor.

        Returns:
            ScoreComponents with the final total.
        """
        weights = self._config.scoring
        penalties = self._config.penalties
        profiles = self._context.profiles
        counters = self._context.counters_for(item.id)

        freshness = self._compute_freshness(item)
        trending = self._compute_trending(item)
        keywords = list(item.keywords) or extract_keywords(f"{item.title} {item.summary}")
        like_affinity = self._compute_profile_match(item, keywords, profiles.like)
        engagement_affinity = self._compute_profile_match(
            item, keywords, profiles.engagement
        )

        weighted_sum = (
            weights.freshness_weight * freshness
            + weights.trending_weight * trending
            + weights.like_weight * like_affinity
            + weights.engagement_weight * engagement_affinity
        )

        seen_penalty = min(counters.views * penalties.seen_per_view, penalties.seen_cap)
        clicked_penalty = (
            penalties.clicked if profiles.engagement.has_acted(item.id) else 0.0
        )
        # Revealed items are merged into the shown set before their first render
        shown_before = (
            self._session.was_shown(item.id)
            and item.id not in self._session.state.just_revealed_ids
        )
        session_penalty = penalties.session_shown if shown_before else 0.0

        floored = max(
            weighted_sum - seen_penalty - clicked_penalty - session_penalty,
            weights.floor_score,
        )

        return ScoreComponents(
            freshness=freshness,
            trending=trending,
            like_affinity=like_affinity,
            engagement_affinity=engagement_affinity,
            weighted_sum=weighted_sum,
            seen_penalty=seen_penalty,
            clicked_penalty=clicked_penalty,
            session_penalty=session_penalty,
            jitter=jitter,
            total=floored + jitter,
        )

    def _compute_freshness(self, item: NewsItem) -> float:
        """Step function of item age; neutral when the publish time is unknown."""
        freshness = self._config.freshness
        age = item.age_hours(self._context.now)
        if age is None:
            return freshness.unknown_value
        for step in freshness.steps:
            if age < step.max_age_hours:
                return step.value
        return freshness.stale_value

    def _compute_trending(self, item: NewsItem) -> float:
        """Share of trending entries found in the item text, saturating at the cap."""
        cap = self._config.scoring.trending_match_cap
        text = item.match_text
        matches = 0
        for phrase in self._context.trending:
            if phrase.text in text:
                matches += 1
                if matches >= cap:
                    break
        return min(matches / cap, 1.0)

    def _compute_profile_match(
        self,
        item: NewsItem,
        keywords: list[str],
        profile: AffinityProfile,
    ) -> float:
        """Source, category and keyword overlap with one profile, in [0, 1]."""
        if profile.is_empty:
            return 0.0
        match = self._config.affinity_match
        source = min(profile.source_count(item.source) / match.source_saturation, 1.0)
        category = min(
            profile.category_count(item.category) / match.category_saturation, 1.0
        )
        keyword = min(
            profile.matched_keywords(keywords) / match.keyword_saturation, 1.0
        )
        return (
            source * match.source_share
            + category * match.category_share
            + keyword * match.keyword_share
        )


def score(item: NewsItem, context: ScoringContext) -> float:
    """Pure function API for scoring one item through the session cache.

    Args:
        item: Item to score.
        context: Shared scoring inputs.

    Returns:
        Cached score for the current epoch.
    """
    return ItemScorer(context).score(item)
