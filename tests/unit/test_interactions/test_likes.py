"""Unit tests for the like ledger."""

from src.interactions.likes import LikeLedger
from src.interactions.protocols import LikeSource
from tests.helpers.time import FIXED_NOW


def _make_ledger() -> LikeLedger:
    return LikeLedger(clock=lambda: FIXED_NOW)


class TestLikeLedger:
    """Tests for LikeLedger."""

    def test_satisfies_protocol(self) -> None:
        """The ledger is a valid LikeSource."""
        assert isinstance(_make_ledger(), LikeSource)

    def test_toggle(self) -> None:
        """First toggle likes, second unlikes."""
        ledger = _make_ledger()

        assert ledger.toggle_like("a", "u1") is True
        assert ledger.liked_by("a") == ["u1"]

        assert ledger.toggle_like("a", "u1") is False
        assert ledger.liked_by("a") == []

    def test_missing_identifiers(self) -> None:
        """Empty item or user IDs are rejected without raising."""
        ledger = _make_ledger()

        assert ledger.toggle_like("", "u1") is None
        assert ledger.toggle_like("a", "") is None
        assert ledger.like_counts() == {}

    def test_metadata_stored(self) -> None:
        """Likes keep source, category and derived keywords."""
        ledger = _make_ledger()

        ledger.toggle_like(
            "a",
            "u1",
            source="Reuters",
            category="world",
            text="Harbour expansion approved",
        )

        [like] = ledger.likes_for_user("u1")
        assert like.source == "Reuters"
        assert like.category == "world"
        assert like.keywords == ("harbour", "expansion", "approved")
        assert like.created_at == FIXED_NOW

    def test_counts_and_users(self) -> None:
        """Counts aggregate over users; per-user lists stay separate."""
        ledger = _make_ledger()
        ledger.toggle_like("a", "u1")
        ledger.toggle_like("a", "u2")
        ledger.toggle_like("b", "u1")

        assert ledger.like_counts() == {"a": 2, "b": 1}
        assert [like.item_id for like in ledger.likes_for_user("u1")] == ["a", "b"]
        assert [like.item_id for like in ledger.likes_for_user("u2")] == ["a"]
