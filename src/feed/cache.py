"""Epoch-scoped score cache.

Scores are memoized for the lifetime of a ranking epoch so that shared
counters mutating in real time (someone else's like arriving, a view being
tracked) never reorder items that are already on screen.
"""

from collections.abc import Callable, Iterable

import structlog


logger = structlog.get_logger()

DEFAULT_MAX_ENTRIES = 1000


class ScoreCache:
    """Per-item score memo valid within one ranking epoch.

    Entries are only discarded by ``reset_epoch``, targeted ``invalidate``
    or size-bound eviction of the oldest half.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        """Initialize an empty cache at epoch 0.

        Args:
            max_entries: Size above which the oldest half is evicted.
        """
        self._max_entries = max_entries
        self._entries: dict[str, float] = {}
        self._epoch = 0
        self._hits = 0
        self._misses = 0
        self._log = logger.bind(component="feed", subcomponent="score_cache")

    @property
    def epoch(self) -> int:
        """Current epoch number."""
        return self._epoch

    @property
    def hits(self) -> int:
        """Cache hits since construction."""
        return self._hits

    @property
    def misses(self) -> int:
        """Cache misses since construction."""
        return self._misses

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def peek(self, item_id: str) -> float | None:
        """Return a cached score without computing."""
        return self._entries.get(item_id)

    def get_score(self, item_id: str, compute_fn: Callable[[], float]) -> float:
        """Return the cached score, computing and storing it on a miss.

        Args:
            item_id: Item identifier.
            compute_fn: Computes the score when no entry exists.

        Returns:
            The score for this epoch.
        """
        cached = self._entries.get(item_id)
        if cached is not None:
            self._hits += 1
            return cached

        self._misses += 1
        value = compute_fn()
        self._entries[item_id] = value
        if len(self._entries) > self._max_entries:
            self._evict_oldest_half()
        return value

    def invalidate(self, item_ids: Iterable[str]) -> int:
        """Discard entries for exactly the given items.

        Returns:
            Number of entries removed.
        """
        removed = 0
        for item_id in item_ids:
            if self._entries.pop(item_id, None) is not None:
                removed += 1
        if removed:
            self._log.debug("score_cache_invalidated", removed=removed)
        return removed

    def reset_epoch(self) -> None:
        """Clear all entries and start a new epoch."""
        cleared = len(self._entries)
        self._entries.clear()
        self._epoch += 1
        self._log.info("score_cache_epoch_reset", epoch=self._epoch, cleared=cleared)

    def _evict_oldest_half(self) -> None:
        evict = len(self._entries) // 2
        for item_id in list(self._entries)[:evict]:
            del self._entries[item_id]
        self._log.info(
            "score_cache_evicted",
            evicted=evict,
            remaining=len(self._entries),
        )
