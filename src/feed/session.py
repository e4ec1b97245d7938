"""Feed session state owned by the window controller."""

import random
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

from src.config.schemas.feed import FeedConfig
from src.feed.cache import ScoreCache


@dataclass
class SessionState:
    """Mutable per-session bookkeeping.

    Attributes:
        shown_ids: IDs rendered this run, oldest first.
        pending_ids: IDs that arrived but are withheld until reveal.
        just_revealed_ids: IDs to render at the top for one cycle.
        known_ids: IDs of the last accepted snapshot.
        display_count: Pagination cursor.
        filter_key: Active filter view.
        initialized: Whether the initial snapshot has been accepted.
    """

    shown_ids: dict[str, None] = field(default_factory=dict)
    pending_ids: dict[str, None] = field(default_factory=dict)
    just_revealed_ids: set[str] = field(default_factory=set)
    known_ids: set[str] = field(default_factory=set)
    display_count: int = 0
    filter_key: str | None = None
    initialized: bool = False

    def mark_shown(self, item_ids: Iterable[str], max_size: int, keep: int) -> int:
        """Record rendered IDs, trimming to the most recent ``keep`` when oversized.

        Returns:
            Number of IDs trimmed.
        """
        for item_id in item_ids:
            self.shown_ids.pop(item_id, None)
            self.shown_ids[item_id] = None

        if len(self.shown_ids) <= max_size:
            return 0
        trimmed = len(self.shown_ids) - keep
        self.shown_ids = dict.fromkeys(list(self.shown_ids)[trimmed:])
        return trimmed

    def was_shown(self, item_id: str) -> bool:
        """Whether an item was rendered earlier this session."""
        return item_id in self.shown_ids


class FeedSession:
    """Score cache, session state and jitter source for one feed session.

    Sessions are plain values: tests and concurrent views each construct
    their own, nothing is shared through module globals.
    """

    def __init__(
        self,
        config: FeedConfig | None = None,
        session_id: str | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Feed configuration.
            session_id: Identifier for log correlation.
            seed: Seed for the jitter RNG.
            rng: Explicit RNG, overrides ``seed``.
        """
        self.config = config or FeedConfig()
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.cache = ScoreCache(max_entries=self.config.session.cache_max_entries)
        self.state = SessionState(display_count=self.config.session.page_size)
        self._rng = rng or random.Random(seed)  # noqa: S311

    @property
    def epoch(self) -> int:
        """Current score cache epoch."""
        return self.cache.epoch

    def draw_jitter(self) -> float:
        """One uniform draw in [0, jitter_max]."""
        return self._rng.uniform(0.0, self.config.scoring.jitter_max)

    def was_shown(self, item_id: str) -> bool:
        """Whether an item was rendered earlier this session."""
        return self.state.was_shown(item_id)

    def mark_shown(self, item_ids: Iterable[str]) -> int:
        """Record rendered IDs using the configured bounds."""
        return self.state.mark_shown(
            item_ids,
            max_size=self.config.session.shown_max,
            keep=self.config.session.shown_keep,
        )
