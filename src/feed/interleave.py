"""Freshness interleaving.

Breaking items have no engagement history yet, so a pure score ordering
buries them under established items. The interleaver guarantees them
visible slots: just-revealed items lead, then the best fresh items, then
regular and fresh items alternate.
"""

from datetime import datetime

import structlog

from src.config.schemas.feed import InterleaveConfig
from src.feed.models import NewsItem, ScoredItem
from src.interactions.models import ItemCounters


logger = structlog.get_logger()


def is_fresh(
    item: NewsItem,
    counters: ItemCounters,
    now: datetime,
    config: InterleaveConfig | None = None,
) -> bool:
    """Whether an item belongs to the fresh pool.

    Fresh means published within the fresh window, never clicked, and
    viewed fewer than the allowed number of times. Items without a publish
    time are never fresh.

    Args:
        item: Candidate item.
        counters: Interaction counters for the item.
        now: Reference time.
        config: Interleave configuration.

    Returns:
        True if the item is fresh.
    """
    config = config or InterleaveConfig()
    age = item.age_hours(now)
    if age is None or age >= config.fresh_window_hours:
        return False
    return not counters.clicked and counters.views < config.fresh_max_views


def _publish_key(item: NewsItem) -> tuple[int, float]:
    # Descending publish time, missing times last
    if item.published_at is None:
        return (1, 0.0)
    return (0, -item.published_at.timestamp())


def sort_by_score(entries: list[ScoredItem]) -> list[ScoredItem]:
    """Sort by score descending, then publish time descending, then ID ascending."""
    return sorted(
        entries,
        key=lambda e: (-e.score, *_publish_key(e.item), e.item_id),
    )


def sort_by_recency(entries: list[ScoredItem]) -> list[ScoredItem]:
    """Sort by publish time descending (missing last), then ID ascending."""
    return sorted(entries, key=lambda e: (*_publish_key(e.item), e.item_id))


class FreshnessInterleaver:
    """Builds the pre-diversity ordering from scored items.

    Order:
        1. Just-revealed items, newest first
        2. The top ``lead_fresh_count`` fresh items by score
        3. ``regular_per_fresh`` regular items, then one fresh item,
           repeated until either pool runs out
        4. The remainder of the other pool
    """

    def __init__(self, config: InterleaveConfig | None = None) -> None:
        """Initialize the interleaver.

        Args:
            config: Interleave configuration.
        """
        self._config = config or InterleaveConfig()
        self._log = logger.bind(component="feed", subcomponent="interleave")

    def interleave(self, entries: list[ScoredItem]) -> list[ScoredItem]:
        """Order scored items.

        ``ScoredItem.fresh`` and ``ScoredItem.revealed`` must already be set.

        Args:
            entries: Scored items in any order.

        Returns:
            Interleaved items.
        """
        revealed = sort_by_recency([e for e in entries if e.revealed])
        fresh = sort_by_score([e for e in entries if not e.revealed and e.fresh])
        regular = sort_by_score(
            [e for e in entries if not e.revealed and not e.fresh]
        )

        fresh_total = len(fresh)
        lead = self._config.lead_fresh_count
        result = revealed + fresh[:lead]
        fresh = fresh[lead:]

        step = self._config.regular_per_fresh
        r = f = 0
        while r < len(regular) and f < len(fresh):
            block = regular[r : r + step]
            result.extend(block)
            r += len(block)
            result.append(fresh[f])
            f += 1

        result.extend(regular[r:])
        result.extend(fresh[f:])

        self._log.debug(
            "interleave_complete",
            revealed_count=len(revealed),
            fresh_count=fresh_total,
            regular_count=len(regular),
        )
        return result


def interleave(
    entries: list[ScoredItem],
    config: InterleaveConfig | None = None,
) -> list[ScoredItem]:
    """Pure function API for freshness interleaving.

    Args:
        entries: Scored items with fresh/revealed flags set.
        config: Interleave configuration.

    Returns:
        Interleaved items.
    """
    return FreshnessInterleaver(config).interleave(entries)
