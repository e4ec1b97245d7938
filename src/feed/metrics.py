"""Metrics collection for feed ranking."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RankerMetrics:
    """Metrics for ranking passes.

    Attributes:
        passes: Ranking passes completed.
        items_in: Items in the most recent pass.
        fresh_count: Fresh items in the most recent pass.
        revealed_count: Just-revealed items in the most recent pass.
        source_swaps: Source-cap swaps across passes.
        category_swaps: Category-cap swaps across passes.
        scoring_failures: Items that fell back to the floor score.
        score_values: Scores from the most recent pass.
        scoring_duration_ms: Time spent scoring in the most recent pass.
        ordering_duration_ms: Time spent interleaving and diversifying.
    """

    passes: int = 0
    items_in: int = 0
    fresh_count: int = 0
    revealed_count: int = 0
    source_swaps: int = 0
    category_swaps: int = 0
    scoring_failures: int = 0
    score_values: list[float] = field(default_factory=list)
    scoring_duration_ms: float = 0.0
    ordering_duration_ms: float = 0.0

    _instance: ClassVar["RankerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def start_pass(self, items_in: int) -> None:
        """Begin a ranking pass.

        Args:
            items_in: Number of items in the pool.
        """
        self.passes += 1
        self.items_in = items_in
        self.score_values = []

    def record_pools(self, fresh: int, revealed: int) -> None:
        """Record pool sizes for the current pass."""
        self.fresh_count = fresh
        self.revealed_count = revealed

    def record_swaps(self, source: int, category: int) -> None:
        """Accumulate diversity swaps."""
        self.source_swaps += source
        self.category_swaps += category

    def record_score(self, score: float) -> None:
        """Record a score for percentile calculation."""
        self.score_values.append(score)

    def record_scoring_failures(self, count: int) -> None:
        """Record items that fell back to the floor score."""
        self.scoring_failures += count

    def record_scoring_duration(self, duration_ms: float) -> None:
        """Record scoring duration."""
        self.scoring_duration_ms = duration_ms

    def record_ordering_duration(self, duration_ms: float) -> None:
        """Record interleave plus diversity duration."""
        self.ordering_duration_ms = duration_ms

    def get_score_percentiles(self) -> dict[str, float]:
        """Calculate score percentiles (p50/p90/p99).

        Returns:
            Dictionary with p50, p90, p99 values.
        """
        if not self.score_values:
            return {"p50": 0.0, "p90": 0.0, "p99": 0.0}

        sorted_scores = sorted(self.score_values)
        n = len(sorted_scores)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_scores[min(idx, n - 1)]

        return {
            "p50": percentile(50),
            "p90": percentile(90),
            "p99": percentile(99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary."""
        return {
            "passes": self.passes,
            "items_in": self.items_in,
            "fresh_count": self.fresh_count,
            "revealed_count": self.revealed_count,
            "source_swaps": self.source_swaps,
            "category_swaps": self.category_swaps,
            "scoring_failures": self.scoring_failures,
            "scoring_duration_ms": self.scoring_duration_ms,
            "ordering_duration_ms": self.ordering_duration_ms,
            "score_percentiles": self.get_score_percentiles(),
        }
