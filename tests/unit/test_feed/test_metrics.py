"""Unit tests for ranker metrics."""

from src.feed.metrics import RankerMetrics


class TestRankerMetrics:
    """Tests for RankerMetrics."""

    def test_singleton_and_reset(self) -> None:
        """get_instance returns the same object until reset."""
        RankerMetrics.reset()
        first = RankerMetrics.get_instance()

        assert RankerMetrics.get_instance() is first

        RankerMetrics.reset()
        assert RankerMetrics.get_instance() is not first

    def test_start_pass_clears_scores(self) -> None:
        """Scores are tracked per pass, swaps accumulate."""
        metrics = RankerMetrics()
        metrics.start_pass(3)
        metrics.record_score(0.5)
        metrics.record_swaps(source=1, category=2)

        metrics.start_pass(2)
        metrics.record_swaps(source=1, category=0)

        assert metrics.passes == 2
        assert metrics.items_in == 2
        assert metrics.score_values == []
        assert metrics.source_swaps == 2
        assert metrics.category_swaps == 2

    def test_percentiles(self) -> None:
        """Percentiles index into the sorted scores."""
        metrics = RankerMetrics()
        for i in range(100):
            metrics.record_score(i / 100)

        assert metrics.get_score_percentiles() == {"p50": 0.5, "p90": 0.9, "p99": 0.99}

    def test_percentiles_empty(self) -> None:
        """No scores report zeros."""
        assert RankerMetrics().get_score_percentiles() == {
            "p50": 0.0,
            "p90": 0.0,
            "p99": 0.0,
        }

    def test_to_dict(self) -> None:
        """Serialization includes counters and percentiles."""
        metrics = RankerMetrics()
        metrics.start_pass(4)
        metrics.record_pools(fresh=2, revealed=1)
        metrics.record_scoring_failures(1)

        data = metrics.to_dict()

        assert data["items_in"] == 4
        assert data["fresh_count"] == 2
        assert data["revealed_count"] == 1
        assert data["scoring_failures"] == 1
        assert "score_percentiles" in data
