"""Unit tests for feed data models."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from src.feed.models import (
    AffinityProfile,
    NewsItem,
    RankedEntry,
    RenderPass,
    ScoreComponents,
)
from tests.helpers.time import FIXED_NOW


class TestNewsItem:
    """Tests for NewsItem ingestion."""

    def test_transport_aliases(self) -> None:
        """pubDate and image map onto the model fields."""
        item = NewsItem.model_validate(
            {
                "id": "n-1",
                "title": "Ceasefire talks resume",
                "pubDate": "Tue, 13 Jun 2017 00:00:00 GMT",
                "image": "https://example.com/a.jpg",
            }
        )

        assert item.published_at == FIXED_NOW
        assert item.image_url == "https://example.com/a.jpg"

    def test_iso_timestamp(self) -> None:
        """ISO-8601 strings are parsed as aware datetimes."""
        item = NewsItem.model_validate(
            {"id": "n-1", "published_at": "2017-06-12T22:00:00+00:00"}
        )

        assert item.published_at == FIXED_NOW - timedelta(hours=2)

    def test_invalid_timestamp_becomes_none(self) -> None:
        """Unparseable timestamps are treated as missing."""
        item = NewsItem.model_validate({"id": "n-1", "pubDate": "not a date"})

        assert item.published_at is None
        assert item.age_hours(FIXED_NOW) is None

    def test_blank_category_becomes_none(self) -> None:
        """Whitespace-only categories count as absent."""
        item = NewsItem.model_validate({"id": "n-1", "category": "  "})

        assert item.category is None

    def test_unknown_fields_ignored(self) -> None:
        """Extra transport fields never break ingestion."""
        item = NewsItem.model_validate({"id": "n-1", "likes_count": 12})

        assert item.id == "n-1"

    def test_id_required(self) -> None:
        """Items without an identifier are rejected."""
        with pytest.raises(ValidationError):
            NewsItem.model_validate({"id": "", "title": "Untitled"})

    def test_future_item_age_is_zero(self) -> None:
        """Items published after now are treated as brand new."""
        item = NewsItem(id="n-1", published_at=FIXED_NOW + timedelta(hours=1))

        assert item.age_hours(FIXED_NOW) == 0.0

    def test_match_text(self) -> None:
        """Title and summary are lowercased together."""
        item = NewsItem(id="n-1", title="Gulf Tensions", summary="Oil Prices")

        assert item.match_text == "gulf tensions oil prices"


class TestAffinityProfile:
    """Tests for AffinityProfile lookups."""

    def test_empty(self) -> None:
        """An empty profile carries no signal."""
        assert AffinityProfile.empty().is_empty

    def test_lookups(self) -> None:
        """Counts default to zero and keywords are counted once."""
        profile = AffinityProfile(
            sources={"Reuters": 2.0},
            categories={"world": 1.0},
            keywords={"gulf": 1.0},
            acted_ids=frozenset({"x"}),
            total_weight=2.0,
        )

        assert profile.source_count("Reuters") == 2.0
        assert profile.source_count("AP") == 0.0
        assert profile.category_count(None) == 0.0
        assert profile.matched_keywords(["gulf", "gulf", "oil"]) == 1
        assert profile.has_acted("x")
        assert not profile.is_empty


class TestOutputModels:
    """Tests for output models."""

    def test_ranked_entry_frozen(self) -> None:
        """Entries are immutable."""
        entry = RankedEntry(item_id="a", score=0.5, position=0)

        with pytest.raises(ValidationError):
            entry.score = 0.9  # type: ignore[misc]

    def test_render_pass_item_ids(self) -> None:
        """item_ids follows entry order."""
        render = RenderPass(
            entries=[
                RankedEntry(item_id="b", score=0.9, position=0),
                RankedEntry(item_id="a", score=0.5, position=1),
            ]
        )

        assert render.item_ids == ["b", "a"]

    def test_components_to_dict(self) -> None:
        """Breakdowns serialize every field."""
        components = ScoreComponents(
            freshness=1.0,
            trending=0.5,
            like_affinity=0.0,
            engagement_affinity=0.0,
            weighted_sum=0.525,
            total=0.525,
        )

        data = components.to_dict()

        assert data["weighted_sum"] == 0.525
        assert set(data) >= {"seen_penalty", "jitter", "total"}


def test_naive_datetime_assumed_utc() -> None:
    """Naive datetimes are taken as UTC."""
    item = NewsItem(id="n-1", published_at=datetime(2017, 6, 13))  # noqa: DTZ001

    assert item.published_at == datetime(2017, 6, 13, tzinfo=UTC)
