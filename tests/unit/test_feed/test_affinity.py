"""Unit tests for affinity profile builders."""

import json
from datetime import datetime, timedelta

from src.feed.affinity import ProfileBuilder, build_profiles
from src.interactions.models import InteractionLog, InteractionRecord, LikeRecord
from tests.helpers.time import FIXED_NOW


def _make_record(
    item_id: str = "item-1",
    source: str | None = "Reuters",
    category: str | None = "world",
    keywords: tuple[str, ...] = ("tensions",),
    clicks: int = 1,
    reads: int = 0,
    views: int = 0,
    last_touch: datetime | None = FIXED_NOW,
) -> InteractionRecord:
    """Create a test InteractionRecord."""
    return InteractionRecord(
        item_id=item_id,
        source=source,
        category=category,
        keywords=keywords,
        clicks=clicks,
        reads=reads,
        views=views,
        last_touch=last_touch,
    )


def _make_like(
    item_id: str = "item-1",
    source: str | None = "AP",
    category: str | None = "politics",
    keywords: tuple[str, ...] = ("senate",),
    created_at: datetime | None = FIXED_NOW,
) -> LikeRecord:
    """Create a test LikeRecord."""
    return LikeRecord(
        item_id=item_id,
        user_id="user-1",
        source=source,
        category=category,
        keywords=keywords,
        created_at=created_at,
    )


class TestEngagementProfile:
    """Tests for the engagement profile."""

    def test_clicks_and_reads_weighted(self) -> None:
        """Weight is clicks plus meaningful reads."""
        log = InteractionLog(
            records=[
                _make_record("a", clicks=2, reads=1),
                _make_record("b", source="AP", clicks=0, reads=1),
            ]
        )

        profile = build_profiles(log, now=FIXED_NOW).engagement

        assert profile.sources == {"Reuters": 3.0, "AP": 1.0}
        assert profile.categories == {"world": 4.0}
        assert profile.keywords == {"tensions": 4.0}
        assert profile.acted_ids == frozenset({"a", "b"})
        assert profile.total_weight == 4.0

    def test_views_only_records_ignored(self) -> None:
        """Records without clicks or reads carry no engagement."""
        log = InteractionLog(records=[_make_record(clicks=0, reads=0, views=5)])

        profile = build_profiles(log, now=FIXED_NOW).engagement

        assert profile.is_empty
        assert not profile.has_acted("item-1")

    def test_stale_records_dropped(self) -> None:
        """Records untouched for longer than the retention window are ignored."""
        log = InteractionLog(
            records=[
                _make_record("old", last_touch=FIXED_NOW - timedelta(days=8)),
                _make_record("new", last_touch=FIXED_NOW - timedelta(days=1)),
            ]
        )

        profile = build_profiles(log, now=FIXED_NOW).engagement

        assert profile.acted_ids == frozenset({"new"})

    def test_undated_records_dropped(self) -> None:
        """Records without a last touch time cannot be placed in the window."""
        log = InteractionLog(records=[_make_record(last_touch=None)])

        assert build_profiles(log, now=FIXED_NOW).engagement.is_empty

    def test_most_recent_records_kept(self) -> None:
        """Only the newest max_tracked records are considered."""
        log = InteractionLog(
            records=[
                _make_record(f"item-{i}", last_touch=FIXED_NOW - timedelta(hours=i))
                for i in range(5)
            ]
        )

        profile = build_profiles(log, now=FIXED_NOW, max_tracked=2).engagement

        assert profile.acted_ids == frozenset({"item-0", "item-1"})

    def test_missing_source_and_category_skipped(self) -> None:
        """Absent metadata contributes to the total but no bucket."""
        log = InteractionLog(records=[_make_record(source=None, category=None)])

        profile = build_profiles(log, now=FIXED_NOW).engagement

        assert profile.sources == {}
        assert profile.categories == {}
        assert profile.total_weight == 1.0


class TestLikeProfile:
    """Tests for the like profile."""

    def test_likes_aggregated(self) -> None:
        """Each like adds its weight."""
        log = InteractionLog(
            likes=[_make_like("a"), _make_like("b", keywords=("senate", "budget"))]
        )

        profile = build_profiles(log, now=FIXED_NOW).like

        assert profile.sources == {"AP": 2.0}
        assert profile.categories == {"politics": 2.0}
        assert profile.keywords == {"senate": 2.0, "budget": 1.0}

    def test_undated_likes_kept(self) -> None:
        """Likes without a creation time still count."""
        log = InteractionLog(likes=[_make_like(created_at=None)])

        profile = build_profiles(log, now=FIXED_NOW).like

        assert profile.acted_ids == frozenset({"item-1"})

    def test_old_likes_dropped(self) -> None:
        """Likes older than the retention window are ignored."""
        log = InteractionLog(likes=[_make_like(created_at=FIXED_NOW - timedelta(days=30))])

        assert build_profiles(log, now=FIXED_NOW).like.is_empty


class TestProfileBuilderInput:
    """Tests for raw interaction log handling."""

    def test_json_payload_accepted(self) -> None:
        """A JSON document is parsed into a log."""
        payload = json.dumps(
            {
                "records": [
                    {
                        "item_id": "a",
                        "source": "Reuters",
                        "clicks": 1,
                        "last_touch": FIXED_NOW.isoformat(),
                    }
                ]
            }
        )

        profiles = ProfileBuilder(now=FIXED_NOW).build(payload)

        assert profiles.engagement.sources == {"Reuters": 1.0}

    def test_mapping_payload_accepted(self) -> None:
        """A plain mapping is validated into a log."""
        payload = {"likes": [{"item_id": "a", "user_id": "u", "source": "AP"}]}

        profiles = ProfileBuilder(now=FIXED_NOW).build(payload)

        assert profiles.like.sources == {"AP": 1.0}

    def test_malformed_json_yields_empty_profiles(self) -> None:
        """Unparseable input yields empty profiles instead of raising."""
        profiles = ProfileBuilder(now=FIXED_NOW).build("{not json")

        assert profiles.like.is_empty
        assert profiles.engagement.is_empty

    def test_wrong_shape_yields_empty_profiles(self) -> None:
        """Schema violations yield empty profiles."""
        profiles = ProfileBuilder(now=FIXED_NOW).build({"records": "nope"})

        assert profiles.engagement.is_empty

    def test_unsupported_type_yields_empty_profiles(self) -> None:
        """Unsupported payload types yield empty profiles."""
        profiles = ProfileBuilder(now=FIXED_NOW).build(42)  # type: ignore[arg-type]

        assert profiles.engagement.is_empty

    def test_none_yields_empty_profiles(self) -> None:
        """No log means no history."""
        profiles = build_profiles(None, now=FIXED_NOW)

        assert profiles.like.is_empty
        assert profiles.engagement.is_empty
