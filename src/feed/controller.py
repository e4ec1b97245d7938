"""Feed window controller.

Reacts to snapshots from the live-update transport and to user actions,
and produces one RenderPass per render. New arrivals are withheld as
pending until the user reveals them, so the visible list never shifts
under the reader.
"""

import time
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime

import structlog
from pydantic import ValidationError

from src.config.schemas.feed import FeedConfig
from src.feed.affinity import ProfileBuilder
from src.feed.metrics import RankerMetrics
from src.feed.models import AffinityProfiles, NewsItem, RenderPass
from src.feed.ranker import FeedRanker
from src.feed.scorer import ScoringContext
from src.feed.session import FeedSession
from src.feed.trending import extract_trending
from src.interactions.keywords import extract_keywords
from src.interactions.models import InteractionLog, ItemCounters
from src.interactions.protocols import InteractionSource, LikeSource
from src.interactions.tracker import InteractionTracker


logger = structlog.get_logger()

RawItem = NewsItem | Mapping[str, object]


class FeedWindowController:
    """Owns a FeedSession and turns events into render passes."""

    def __init__(
        self,
        session: FeedSession | None = None,
        tracker: InteractionSource | None = None,
        likes: LikeSource | None = None,
        user_id: str | None = None,
        clock: Callable[[], float] = time.monotonic,
        config: FeedConfig | None = None,
        metrics: RankerMetrics | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            session: Session to drive; a new one is created when omitted.
            tracker: Interaction collaborator.
            likes: Like collaborator.
            user_id: User whose likes feed the like profile.
            clock: Monotonic clock in seconds for settle windows.
            config: Feed configuration for a newly created session.
            metrics: Optional metrics instance.
        """
        self._session = session or FeedSession(config=config)
        self._config = self._session.config
        affinity = self._config.affinity
        self._tracker: InteractionSource = tracker or InteractionTracker(
            retention_days=affinity.retention_days,
            max_tracked=affinity.max_tracked,
            read_threshold_seconds=affinity.read_threshold_seconds,
        )
        self._likes = likes
        self._user_id = user_id
        self._clock = clock
        self._metrics = metrics or RankerMetrics.get_instance()

        self._pool: dict[str, NewsItem] = {}
        self._seen_reported: set[str] = set()
        self._last_reveal_at: float | None = None
        self._page_busy_until: float | None = None

        self._log = logger.bind(
            component="feed",
            subcomponent="controller",
            session_id=self._session.session_id,
        )

    @property
    def session(self) -> FeedSession:
        """The driven session."""
        return self._session

    @property
    def tracker(self) -> InteractionSource:
        """The interaction collaborator."""
        return self._tracker

    @property
    def pending_count(self) -> int:
        """Number of new items withheld until reveal."""
        return len(self._session.state.pending_ids)

    @property
    def filter_key(self) -> str | None:
        """Active filter view."""
        return self._session.state.filter_key

    def visible_items(self) -> list[NewsItem]:
        """Items eligible for ranking, excluding pending arrivals."""
        pending = self._session.state.pending_ids
        return [item for item_id, item in self._pool.items() if item_id not in pending]

    def on_snapshot(
        self, items: Iterable[RawItem], now: datetime | None = None
    ) -> RenderPass:
        """Accept a full snapshot from the transport.

        The first snapshot is accepted whole. Later snapshots are diffed
        against the previous ID set and unseen IDs become pending; pending
        IDs missing from the snapshot are dropped.

        Args:
            items: Full snapshot.
            now: Reference time.

        Returns:
            RenderPass for the updated pool.
        """
        state = self._session.state
        state.just_revealed_ids = set()
        self._replace_pool(items)
        ids = list(self._pool)

        if not state.initialized:
            state.initialized = True
            state.pending_ids = {}
            self._log.info("initial_snapshot_accepted", items=len(ids))
        else:
            current = set(ids)
            dropped = [i for i in state.pending_ids if i not in current]
            for item_id in dropped:
                del state.pending_ids[item_id]
            arrived = [
                i
                for i in ids
                if i not in state.known_ids and i not in state.pending_ids
            ]
            for item_id in arrived:
                state.pending_ids[item_id] = None
            if arrived or dropped:
                self._log.info(
                    "snapshot_diffed",
                    items=len(ids),
                    arrived=len(arrived),
                    pending_dropped=len(dropped),
                    pending=len(state.pending_ids),
                )

        state.known_ids = set(ids)
        self._seen_reported &= state.known_ids
        return self.render(now)

    def reveal(self, now: datetime | None = None) -> RenderPass | None:
        """Reveal pending items at the top of the feed.

        Repeated triggers within the settle window are ignored.

        Args:
            now: Reference time.

        Returns:
            RenderPass with scroll-to-top set, or None if ignored or nothing
            was pending.
        """
        t = self._clock()
        settle = self._config.session.settle_ms / 1000.0
        if self._last_reveal_at is not None and t - self._last_reveal_at < settle:
            self._log.debug("reveal_suppressed", since_last=t - self._last_reveal_at)
            return None
        if not self._session.state.pending_ids:
            return None

        self._last_reveal_at = t
        revealed = self._reveal_pending()
        return self.render(now, scroll_to_top=True, revealed_ids=revealed)

    def switch_filter(
        self,
        filter_key: str | None,
        items: Iterable[RawItem],
        now: datetime | None = None,
    ) -> RenderPass:
        """Switch to another filtered view.

        Starts a new epoch, reveals pending items without the settle guard
        and replaces the pool with the filtered items.

        Args:
            filter_key: New filter view.
            items: Items of the new view.
            now: Reference time.

        Returns:
            RenderPass for the new view.
        """
        state = self._session.state
        previous = state.filter_key
        state.filter_key = filter_key
        self._session.cache.reset_epoch()
        revealed = self._reveal_pending()

        self._replace_pool(items)
        state.known_ids = set(self._pool)
        state.initialized = True
        state.just_revealed_ids &= state.known_ids

        self._log.info(
            "filter_switched",
            from_filter=previous,
            to_filter=filter_key,
            items=len(self._pool),
            revealed=len(revealed),
            epoch=self._session.epoch,
        )
        return self.render(
            now,
            scroll_to_top=True,
            revealed_ids=[i for i in revealed if i in state.known_ids],
        )

    def refresh(self, now: datetime | None = None) -> RenderPass:
        """Manual refresh: start a new epoch and re-rank.

        Args:
            now: Reference time.

        Returns:
            RenderPass for the re-ranked pool.
        """
        self._session.cache.reset_epoch()
        self._log.info("feed_refreshed", epoch=self._session.epoch)
        return self.render(now, scroll_to_top=True)

    def advance_page(self) -> bool:
        """Extend the pagination cursor by one page.

        Returns:
            True if the cursor moved.
        """
        t = self._clock()
        if self._page_busy_until is not None and t < self._page_busy_until:
            return False

        state = self._session.state
        if state.display_count >= len(self.visible_items()):
            return False

        state.display_count += self._config.session.page_size
        self._page_busy_until = t + self._config.session.settle_ms / 1000.0
        self._log.debug("page_advanced", display_count=state.display_count)
        return True

    def render(
        self,
        now: datetime | None = None,
        scroll_to_top: bool = False,
        revealed_ids: list[str] | None = None,
    ) -> RenderPass:
        """Rank the visible pool and slice it to the pagination cursor.

        Rendered IDs are marked shown and reported to the tracker once.

        Args:
            now: Reference time.
            scroll_to_top: Whether the UI should scroll to the top.
            revealed_ids: IDs revealed by the triggering action.

        Returns:
            RenderPass for the visible window.
        """
        now = now or datetime.now(UTC)
        visible = self.visible_items()
        context = ScoringContext(
            session=self._session,
            trending=extract_trending(
                visible,
                max_phrases=self._config.trending.max_phrases,
                lookback_hours=self._config.trending.lookback_hours,
                now=now,
            ),
            profiles=self._build_profiles(now),
            counters=self._counters(visible),
            now=now,
        )
        entries = FeedRanker(context, metrics=self._metrics).rank(visible)

        state = self._session.state
        window = entries[: state.display_count]
        window_ids = [entry.item_id for entry in window]

        trimmed = self._session.mark_shown(window_ids)
        if trimmed:
            self._log.debug("shown_ids_trimmed", trimmed=trimmed)

        newly_seen = [i for i in window_ids if i not in self._seen_reported]
        if newly_seen:
            self._tracker.track_seen(newly_seen)
            self._seen_reported.update(newly_seen)

        return RenderPass(
            entries=window,
            pending_count=self.pending_count,
            total_available=len(entries),
            display_count=state.display_count,
            epoch=self._session.epoch,
            scroll_to_top=scroll_to_top,
            revealed_ids=revealed_ids or [],
        )

    def record_open(self, item_id: str) -> None:
        """Forward an item open to the tracker."""
        item = self._pool.get(item_id)
        if item is None:
            self._tracker.track_click(item_id)
            return
        keywords = list(item.keywords) or extract_keywords(
            f"{item.title} {item.summary}"
        )
        self._tracker.track_click(
            item_id,
            source=item.source or None,
            category=item.category,
            keywords=keywords,
        )

    def record_dwell(self, item_id: str, seconds: float) -> None:
        """Forward time spent on an opened item to the tracker."""
        self._tracker.track_dwell_time(item_id, seconds)

    def record_rapid_scroll(self, item_id: str) -> None:
        """Forward a rapid scroll-past to the tracker."""
        self._tracker.track_rapid_scroll(item_id)

    def _replace_pool(self, items: Iterable[RawItem]) -> None:
        pool: dict[str, NewsItem] = {}
        rejected = 0
        for raw in items:
            if isinstance(raw, NewsItem):
                item = raw
            else:
                try:
                    item = NewsItem.model_validate(raw)
                except ValidationError as e:
                    rejected += 1
                    self._log.warning(
                        "snapshot_item_invalid", error_count=e.error_count()
                    )
                    continue
            pool.setdefault(item.id, item)
        self._pool = pool
        if rejected:
            self._log.warning("snapshot_items_rejected", rejected=rejected)

    def _reveal_pending(self) -> list[str]:
        state = self._session.state
        revealed = list(state.pending_ids)
        state.pending_ids = {}
        if not revealed:
            return revealed

        state.just_revealed_ids = set(revealed)
        self._session.cache.invalidate(revealed)
        self._session.mark_shown(revealed)
        self._log.info("pending_revealed", revealed=len(revealed))
        return revealed

    def _build_profiles(self, now: datetime) -> AffinityProfiles:
        log = self._tracker.export_log()
        if self._likes is not None and self._user_id is not None:
            log = InteractionLog(
                records=log.records,
                likes=self._likes.likes_for_user(self._user_id),
            )
        builder = ProfileBuilder(
            retention_days=self._config.affinity.retention_days,
            max_tracked=self._config.affinity.max_tracked,
            now=now,
        )
        return builder.build(log)

    def _counters(self, items: list[NewsItem]) -> dict[str, ItemCounters]:
        return {item.id: self._tracker.counters_for(item.id) for item in items}
