"""Feed ranking orchestrator."""

import time
import uuid
from collections.abc import Collection, Sequence

import structlog

from src.feed.diversity import DiversityEnforcer
from src.feed.interleave import FreshnessInterleaver, is_fresh
from src.feed.metrics import RankerMetrics
from src.feed.models import NewsItem, RankedEntry, ScoredItem
from src.feed.scorer import ItemScorer, ScoringContext
from src.feed.state_machine import RankerState, RankerStateMachine


logger = structlog.get_logger()


class FeedRanker:
    """Orchestrates one ranking pass over the visible pool.

    Implements a state machine flow:
        POOL_READY -> SCORED -> INTERLEAVED -> DIVERSIFIED

    Scores come from the session's epoch cache, so repeated passes within
    an epoch only reorder items whose pool membership changed.
    """

    def __init__(
        self,
        context: ScoringContext,
        just_revealed: Collection[str] | None = None,
        metrics: RankerMetrics | None = None,
        run_id: str | None = None,
    ) -> None:
        """Initialize the ranker.

        Args:
            context: Shared scoring inputs.
            just_revealed: IDs to lead the ordering; defaults to the
                session's just-revealed set.
            metrics: Optional metrics instance.
            run_id: Pass identifier for logging and state.
        """
        self._context = context
        self._config = context.config
        self._run_id = run_id or uuid.uuid4().hex[:12]
        self._just_revealed = frozenset(
            context.session.state.just_revealed_ids
            if just_revealed is None
            else just_revealed
        )
        self._metrics = metrics or RankerMetrics.get_instance()
        self._state_machine = RankerStateMachine(self._run_id)
        self._log = logger.bind(
            component="feed",
            subcomponent="ranker",
            run_id=self._run_id,
            session_id=context.session.session_id,
        )

    @property
    def state(self) -> RankerState:
        """Get current ranker state."""
        return self._state_machine.state

    def rank(self, items: Sequence[NewsItem]) -> list[RankedEntry]:
        """Rank items and return the ordered entries.

        Args:
            items: Visible pool.

        Returns:
            Ordered entries with their cached scores.
        """
        ordered = self.order(items)
        return [
            RankedEntry(item_id=entry.item_id, score=entry.score, position=position)
            for position, entry in enumerate(ordered)
        ]

    def order(self, items: Sequence[NewsItem]) -> list[ScoredItem]:
        """Score, interleave and diversify the pool.

        Args:
            items: Visible pool.

        Returns:
            Ordered scored items.
        """
        self._log.info(
            "ranking_started",
            items_in=len(items),
            epoch=self._context.session.epoch,
        )
        self._metrics.start_pass(len(items))

        # Phase 1: Score every item through the epoch cache
        start_score = time.perf_counter()
        scored = self._score_items(items)
        self._state_machine.to_scored()
        self._metrics.record_scoring_duration(
            (time.perf_counter() - start_score) * 1000
        )

        # Phase 2: Interleave fresh and regular pools
        start_order = time.perf_counter()
        interleaved = FreshnessInterleaver(self._config.interleave).interleave(scored)
        self._state_machine.to_interleaved()

        # Phase 3: Bound same-source and same-category runs
        diversity = DiversityEnforcer(self._config.diversity).enforce(interleaved)
        self._state_machine.to_diversified()
        self._metrics.record_ordering_duration(
            (time.perf_counter() - start_order) * 1000
        )
        self._metrics.record_swaps(diversity.source_swaps, diversity.category_swaps)

        fresh_count = sum(1 for s in scored if s.fresh and not s.revealed)
        revealed_count = sum(1 for s in scored if s.revealed)
        self._metrics.record_pools(fresh=fresh_count, revealed=revealed_count)

        self._log.info(
            "ranking_complete",
            items_in=len(items),
            items_out=len(diversity.entries),
            fresh_count=fresh_count,
            revealed_count=revealed_count,
            source_swaps=diversity.source_swaps,
            category_swaps=diversity.category_swaps,
            score_percentiles=self._metrics.get_score_percentiles(),
        )
        return diversity.entries

    def _score_items(self, items: Sequence[NewsItem]) -> list[ScoredItem]:
        """Score every item and tag fresh and revealed entries.

        Args:
            items: Items to score.

        Returns:
            Scored items in input order.
        """
        scorer = ItemScorer(self._context)
        now = self._context.now
        interleave_config = self._config.interleave
        scored: list[ScoredItem] = []
        seen: set[str] = set()

        for item in items:
            if item.id in seen:
                continue
            seen.add(item.id)
            value = scorer.score(item)
            self._metrics.record_score(value)
            scored.append(
                ScoredItem(
                    item=item,
                    score=value,
                    fresh=is_fresh(
                        item,
                        self._context.counters_for(item.id),
                        now,
                        interleave_config,
                    ),
                    revealed=item.id in self._just_revealed,
                )
            )

        if scorer.failures:
            self._metrics.record_scoring_failures(scorer.failures)
            self._log.warning("scoring_failures", failed=scorer.failures)
        return scored


def rank(
    items: Sequence[NewsItem],
    context: ScoringContext,
    just_revealed: Collection[str] | None = None,
    run_id: str = "pure",
) -> list[RankedEntry]:
    """Pure function API for feed ranking.

    Args:
        items: Visible pool.
        context: Shared scoring inputs.
        just_revealed: IDs to lead the ordering.
        run_id: Pass identifier.

    Returns:
        Ordered entries with their cached scores.
    """
    ranker = FeedRanker(
        context=context,
        just_revealed=just_revealed,
        metrics=RankerMetrics(),
        run_id=run_id,
    )
    return ranker.rank(items)
