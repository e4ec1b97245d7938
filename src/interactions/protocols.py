"""Protocol interfaces for the interaction collaborators."""

from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable

from src.interactions.models import InteractionLog, ItemCounters, LikeRecord


@runtime_checkable
class InteractionSource(Protocol):
    """Read/write access to locally observed interactions.

    The feed engine reads the log to build profiles and calls the
    ``track_*`` methods as side effects of rendering and opening items.
    """

    def export_log(self) -> InteractionLog:
        """Return the current interaction records."""
        ...

    def counters_for(self, item_id: str) -> ItemCounters:
        """Return counters for one item."""
        ...

    def track_click(
        self,
        item_id: str,
        *,
        source: str | None = None,
        category: str | None = None,
        keywords: Iterable[str] = (),
    ) -> None:
        """Record that an item was opened."""
        ...

    def track_seen(self, item_ids: Iterable[str]) -> None:
        """Record that items were rendered."""
        ...

    def track_dwell_time(self, item_id: str, seconds: float) -> None:
        """Record time spent on an opened item."""
        ...

    def track_rapid_scroll(self, item_id: str) -> None:
        """Record that an item was scrolled past quickly."""
        ...


@runtime_checkable
class LikeSource(Protocol):
    """Read access to the social backend's like relation."""

    def likes_for_user(self, user_id: str) -> list[LikeRecord]:
        """Return the likes of one user."""
        ...

    def like_counts(self) -> Mapping[str, int]:
        """Return aggregate like counts per item."""
        ...
