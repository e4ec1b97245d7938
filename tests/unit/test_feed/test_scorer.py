"""Unit tests for the multi-signal scorer."""

import math
from datetime import datetime, timedelta

import pytest

from src.config.schemas.feed import FeedConfig, ScoringConfig
from src.feed.models import (
    AffinityProfile,
    AffinityProfiles,
    NewsItem,
    PhraseKind,
    ScoreComponents,
    TrendingPhrase,
)
from src.feed.scorer import ItemScorer, ScoringContext, score
from src.feed.session import FeedSession
from src.interactions.models import ItemCounters
from tests.helpers.time import FIXED_NOW


NO_JITTER = FeedConfig(scoring=ScoringConfig(jitter_max=0.0))

TRENDING = [
    TrendingPhrase("gulf tensions", 3, PhraseKind.PHRASE),
    TrendingPhrase("oil prices", 2, PhraseKind.PHRASE),
    TrendingPhrase("zelensky", 4, PhraseKind.WORD),
]


def _make_item(
    item_id: str = "item-1",
    title: str = "Harbour expansion approved",
    summary: str = "",
    source: str = "Reuters",
    category: str | None = "world",
    age: timedelta | None = timedelta(minutes=30),
    keywords: tuple[str, ...] = (),
) -> NewsItem:
    """Create a test NewsItem."""
    return NewsItem(
        id=item_id,
        title=title,
        summary=summary,
        source=source,
        category=category,
        published_at=FIXED_NOW - age if age is not None else None,
        keywords=keywords,
    )


def _make_context(
    config: FeedConfig | None = None,
    trending: list[TrendingPhrase] | None = None,
    profiles: AffinityProfiles | None = None,
    counters: dict[str, ItemCounters] | None = None,
    now: datetime = FIXED_NOW,
    seed: int = 42,
) -> ScoringContext:
    """Create a scoring context over a fresh session."""
    return ScoringContext(
        session=FeedSession(config=config or NO_JITTER, seed=seed),
        trending=trending if trending is not None else [],
        profiles=profiles or AffinityProfiles(),
        counters=counters or {},
        now=now,
    )


class TestFreshness:
    """Tests for the freshness step function."""

    @pytest.mark.parametrize(
        ("age", "expected"),
        [
            (timedelta(minutes=30), 1.0),
            (timedelta(hours=2), 0.9),
            (timedelta(hours=5), 0.8),
            (timedelta(hours=10), 0.6),
            (timedelta(hours=20), 0.4),
            (timedelta(hours=30), 0.25),
            (timedelta(hours=72), 0.10),
            (timedelta(hours=-3), 1.0),
        ],
    )
    def test_age_steps(self, age: timedelta, expected: float) -> None:
        """Freshness decays in steps; future items count as brand new."""
        scorer = ItemScorer(_make_context())

        components = scorer.components(_make_item(age=age))

        assert components.freshness == pytest.approx(expected)

    def test_missing_publish_time_is_neutral(self) -> None:
        """Items without a publish time get the neutral value."""
        scorer = ItemScorer(_make_context())

        assert scorer.components(_make_item(age=None)).freshness == pytest.approx(0.3)

    @pytest.mark.parametrize("raw", ["Monday", "12", "unknown"])
    def test_yearless_publish_time_is_neutral(self, raw: str) -> None:
        """Bare weekdays and day numbers are not taken as publish times."""
        scorer = ItemScorer(_make_context())
        item = NewsItem(id="x", title="Harbour expansion approved", published_at=raw)

        assert item.published_at is None
        assert scorer.components(item).freshness == pytest.approx(0.3)


class TestTrendingMatch:
    """Tests for the trending signal."""

    def test_two_of_three_matches(self) -> None:
        """Two matched entries give two thirds."""
        scorer = ItemScorer(_make_context(trending=TRENDING))
        item = _make_item(title="Gulf tensions push oil prices higher")

        assert scorer.components(item).trending == pytest.approx(2 / 3)

    def test_summary_is_searched(self) -> None:
        """Matches in the summary count too."""
        scorer = ItemScorer(_make_context(trending=TRENDING))
        item = _make_item(title="Kyiv talks", summary="Zelensky meets envoys")

        assert scorer.components(item).trending == pytest.approx(1 / 3)

    def test_capped_at_one(self) -> None:
        """More matches than the cap saturate at 1.0."""
        trending = [*TRENDING, TrendingPhrase("envoys", 4, PhraseKind.WORD)]
        scorer = ItemScorer(_make_context(trending=trending))
        item = _make_item(
            title="Gulf tensions push oil prices higher",
            summary="Zelensky meets envoys",
        )

        assert scorer.components(item).trending == 1.0

    def test_no_trending(self) -> None:
        """Without trending entries the signal is zero."""
        scorer = ItemScorer(_make_context())

        assert scorer.components(_make_item()).trending == 0.0


class TestAffinity:
    """Tests for profile matching."""

    def test_full_profile_match(self) -> None:
        """Saturated source, category and keyword matches give 1.0."""
        like = AffinityProfile(
            sources={"Reuters": 5.0},
            categories={"world": 3.0},
            keywords={"gulf": 1.0, "tensions": 1.0, "prices": 1.0},
            acted_ids=frozenset({"other"}),
            total_weight=5.0,
        )
        scorer = ItemScorer(_make_context(profiles=AffinityProfiles(like=like)))
        item = _make_item(keywords=("gulf", "tensions", "prices"))

        components = scorer.components(item)

        assert components.like_affinity == pytest.approx(1.0)
        assert components.engagement_affinity == 0.0

    def test_partial_profile_match(self) -> None:
        """Partial matches scale each share."""
        engagement = AffinityProfile(
            sources={"Reuters": 1.0},
            categories={"sports": 3.0},
            keywords={"harbour": 1.0},
            acted_ids=frozenset({"other"}),
            total_weight=1.0,
        )
        scorer = ItemScorer(
            _make_context(profiles=AffinityProfiles(engagement=engagement))
        )

        components = scorer.components(_make_item())

        expected = (1 / 5) * 0.3 + 0.0 * 0.3 + (1 / 3) * 0.4
        assert components.engagement_affinity == pytest.approx(expected)

    def test_keywords_extracted_when_missing(self) -> None:
        """Items without keywords are matched on title and summary words."""
        like = AffinityProfile(
            keywords={"harbour": 1.0, "expansion": 1.0, "approved": 1.0},
            acted_ids=frozenset({"other"}),
            total_weight=3.0,
        )
        scorer = ItemScorer(_make_context(profiles=AffinityProfiles(like=like)))

        components = scorer.components(_make_item(source="", category=None))

        assert components.like_affinity == pytest.approx(0.4)


class TestPenalties:
    """Tests for penalties and the floor."""

    def test_seen_penalty_scales_with_views(self) -> None:
        """Each view costs 0.15."""
        scorer = ItemScorer(
            _make_context(counters={"item-1": ItemCounters(views=2)})
        )

        assert scorer.components(_make_item()).seen_penalty == pytest.approx(0.3)

    def test_seen_penalty_capped(self) -> None:
        """The seen penalty never exceeds 0.5."""
        scorer = ItemScorer(
            _make_context(counters={"item-1": ItemCounters(views=10)})
        )

        assert scorer.components(_make_item()).seen_penalty == pytest.approx(0.5)

    def test_clicked_penalty(self) -> None:
        """Items in the engagement acted-upon set are penalised."""
        engagement = AffinityProfile(acted_ids=frozenset({"item-1"}), total_weight=1.0)
        scorer = ItemScorer(
            _make_context(profiles=AffinityProfiles(engagement=engagement))
        )

        assert scorer.components(_make_item()).clicked_penalty == pytest.approx(0.6)

    def test_session_shown_penalty(self) -> None:
        """Items rendered earlier this session are penalised."""
        context = _make_context()
        context.session.mark_shown(["item-1"])
        scorer = ItemScorer(context)

        assert scorer.components(_make_item()).session_penalty == pytest.approx(0.3)

    def test_floor_applied(self) -> None:
        """Heavily penalised items bottom out at the floor."""
        scorer = ItemScorer(
            _make_context(counters={"item-1": ItemCounters(views=10)})
        )

        components = scorer.components(_make_item(age=timedelta(days=5)))

        assert components.total == pytest.approx(0.01)

    def test_jitter_added_after_floor(self) -> None:
        """Jitter is added on top of the floored score."""
        scorer = ItemScorer(
            _make_context(counters={"item-1": ItemCounters(views=10)})
        )

        components = scorer.components(_make_item(age=timedelta(days=5)), jitter=0.03)

        assert components.total == pytest.approx(0.04)


class TestScore:
    """Tests for cached scoring."""

    def test_breaking_item_with_trending_matches(self) -> None:
        """A 30-minute-old item matching two of three trending entries."""
        context = _make_context(config=FeedConfig(), trending=TRENDING)
        item = _make_item(title="Gulf tensions push oil prices higher")

        value = score(item, context)

        assert 0.5666 <= value <= 0.6167

    def test_weighted_sum_without_jitter(self) -> None:
        """Breakdown of the breaking-item example."""
        scorer = ItemScorer(_make_context(trending=TRENDING))
        item = _make_item(title="Gulf tensions push oil prices higher")

        components = scorer.components(item)

        assert isinstance(components, ScoreComponents)
        assert components.weighted_sum == pytest.approx(0.40 + 0.25 * 2 / 3)
        assert components.total == pytest.approx(components.weighted_sum)

    def test_idempotent_within_epoch(self) -> None:
        """Repeated scoring returns the cached value."""
        context = _make_context(config=FeedConfig())
        scorer = ItemScorer(context)
        item = _make_item()

        first = scorer.score(item)
        context.session.mark_shown([item.id])

        assert scorer.score(item) == first
        assert context.session.cache.hits == 1

    def test_new_epoch_recomputes(self) -> None:
        """A new epoch picks up the session penalty."""
        context = _make_context()
        scorer = ItemScorer(context)
        item = _make_item()

        first = scorer.score(item)
        context.session.mark_shown([item.id])
        context.session.cache.reset_epoch()

        assert scorer.score(item) == pytest.approx(first - 0.3)

    def test_score_range(self) -> None:
        """Scores stay within the floor and the maximum plus jitter."""
        context = _make_context(config=FeedConfig(), trending=TRENDING)
        scorer = ItemScorer(context)
        items = [
            _make_item(f"item-{i}", age=timedelta(hours=i * 7)) for i in range(10)
        ]

        for item in items:
            value = scorer.score(item)
            assert 0.01 <= value <= 1.05

    def test_failure_yields_floor(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An exception while scoring one item yields the floor for that item."""
        context = _make_context()
        scorer = ItemScorer(context)

        def boom(item: NewsItem, jitter: float = 0.0) -> ScoreComponents:
            raise RuntimeError("bad item")

        monkeypatch.setattr(scorer, "components", boom)

        assert scorer.score(_make_item()) == 0.01
        assert context.session.cache.peek("item-1") == 0.01
        assert scorer.failures == 1

    def test_non_finite_yields_floor(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A non-finite total yields the floor."""
        context = _make_context()
        scorer = ItemScorer(context)
        nan = ScoreComponents(
            freshness=0.0,
            trending=0.0,
            like_affinity=0.0,
            engagement_affinity=0.0,
            weighted_sum=0.0,
            total=math.nan,
        )
        monkeypatch.setattr(scorer, "components", lambda item, jitter=0.0: nan)

        assert scorer.score(_make_item()) == 0.01
