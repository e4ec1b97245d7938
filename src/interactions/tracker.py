"""In-memory interaction tracker.

Keeps one record per item combining views, rapid scroll-pasts, clicks and
dwell time. Every write prunes records untouched for the retention window
and evicts all but the most recently touched records.
"""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

import structlog

from src.interactions.constants import (
    MAX_TRACKED,
    READ_THRESHOLD_SECONDS,
    RETENTION_DAYS,
)
from src.interactions.models import InteractionLog, InteractionRecord, ItemCounters


logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(UTC)


class InteractionTracker:
    """Locally observed interactions, keyed by item ID."""

    def __init__(
        self,
        retention_days: int = RETENTION_DAYS,
        max_tracked: int = MAX_TRACKED,
        read_threshold_seconds: float = READ_THRESHOLD_SECONDS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the tracker.

        Args:
            retention_days: Records untouched for longer are dropped.
            max_tracked: Maximum number of records kept.
            read_threshold_seconds: Dwell above this counts as a read.
            clock: Source of the current time.
        """
        self._retention = timedelta(days=retention_days)
        self._max_tracked = max_tracked
        self._read_threshold = read_threshold_seconds
        self._clock = clock
        self._records: dict[str, InteractionRecord] = {}
        self._log = logger.bind(component="interactions", subcomponent="tracker")

    def __len__(self) -> int:
        return len(self._records)

    def get(self, item_id: str) -> InteractionRecord | None:
        """Return the stored record for an item."""
        return self._records.get(item_id)

    def _touch(self, item_id: str, now: datetime, **changes: object) -> None:
        existing = self._records.get(item_id) or InteractionRecord(
            item_id=item_id, first_touch=now
        )
        self._records[item_id] = existing.model_copy(
            update={**changes, "last_touch": now}
        )

    def track_click(
        self,
        item_id: str,
        *,
        source: str | None = None,
        category: str | None = None,
        keywords: Iterable[str] = (),
    ) -> None:
        """Record that an item was opened, keeping known metadata."""
        now = self._clock()
        existing = self._records.get(item_id)
        kw = tuple(keywords)
        self._touch(
            item_id,
            now,
            clicks=(existing.clicks if existing else 0) + 1,
            source=source or (existing.source if existing else None),
            category=category or (existing.category if existing else None),
            keywords=kw or (existing.keywords if existing else ()),
        )
        self._prune(now)

    def track_seen(self, item_ids: Iterable[str]) -> None:
        """Record that items were rendered in the feed."""
        now = self._clock()
        for item_id in item_ids:
            existing = self._records.get(item_id)
            self._touch(item_id, now, views=(existing.views if existing else 0) + 1)
        self._prune(now)

    def track_dwell_time(self, item_id: str, seconds: float) -> None:
        """Record dwell time on an opened item.

        A single observation above the read threshold also counts as a
        meaningful read.
        """
        if seconds <= 0:
            return
        now = self._clock()
        existing = self._records.get(item_id)
        dwell = (existing.dwell_seconds if existing else 0.0) + seconds
        reads = (existing.reads if existing else 0) + (
            1 if seconds > self._read_threshold else 0
        )
        self._touch(item_id, now, dwell_seconds=dwell, reads=reads)
        self._prune(now)

    def track_rapid_scroll(self, item_id: str) -> None:
        """Record that an item was scrolled past quickly."""
        now = self._clock()
        existing = self._records.get(item_id)
        self._touch(
            item_id,
            now,
            rapid_scrolls=(existing.rapid_scrolls if existing else 0) + 1,
        )
        self._prune(now)

    def counters_for(self, item_id: str) -> ItemCounters:
        """Return counters for one item."""
        return ItemCounters.from_record(self._records.get(item_id))

    def export_log(self) -> InteractionLog:
        """Return a snapshot of all records."""
        return InteractionLog(records=list(self._records.values()))

    def _prune(self, now: datetime) -> None:
        cutoff = now - self._retention
        kept = {
            item_id: record
            for item_id, record in self._records.items()
            if record.last_touch is not None and record.last_touch > cutoff
        }
        if len(kept) > self._max_tracked:
            newest = sorted(
                kept.values(),
                key=lambda r: r.last_touch or cutoff,
                reverse=True,
            )[: self._max_tracked]
            kept = {r.item_id: r for r in newest}

        dropped = len(self._records) - len(kept)
        if dropped:
            self._log.debug("interactions_pruned", dropped=dropped, kept=len(kept))
        self._records = kept
