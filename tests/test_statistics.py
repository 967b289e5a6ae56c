"""
Tests for outlier rejection and aggregation.
"""

import pytest
from datetime import date, timedelta
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.valuation_engine import Aggregator, Comparable, OutlierFilter, ScoredComparable
from core.valuation_engine.statistics import nearest_rank_percentile, weighted_average


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic tests."""
    return date(2024, 6, 1)


@pytest.fixture
def create_scored(reference_date):
    """Factory fixture for scored comparables with explicit weights."""
    def _create(
        price: float,
        days_ago: int = 0,
        similarity: int = 100,
        recency_weight: float = 1.0,
    ) -> ScoredComparable:
        comparable = Comparable(
            name=f"Test Game #{price}",
            price=price,
            sold_at=reference_date - timedelta(days=days_ago),
        )
        return ScoredComparable(
            comparable=comparable,
            similarity=similarity,
            recency_weight=recency_weight,
        )
    return _create


@pytest.fixture
def aggregator():
    return Aggregator()


# =============================================================================
# Test: Helpers
# =============================================================================

class TestWeightedAverage:
    def test_weights_applied(self, create_scored):
        scored = [create_scored(100, similarity=100), create_scored(200, similarity=50)]

        # (100 * 1.0 + 200 * 0.5) / 1.5
        assert weighted_average(scored) == pytest.approx(133.333, abs=0.001)

    def test_empty_is_none(self):
        assert weighted_average([]) is None

    def test_zero_weight_is_none(self, create_scored):
        assert weighted_average([create_scored(100, similarity=0)]) is None


class TestNearestRankPercentile:
    @pytest.mark.parametrize("percentile,expected", [
        (25, 40),
        (50, 41),
        (75, 42),
        (0, 38),
        (100, 45),
    ])
    def test_five_values(self, percentile, expected):
        assert nearest_rank_percentile([38, 40, 41, 42, 45], percentile) == expected

    def test_single_value(self):
        assert nearest_rank_percentile([7], 75) == 7

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            nearest_rank_percentile([], 50)


# =============================================================================
# Test: Outlier Filter
# =============================================================================

class TestOutlierFilter:
    def test_extreme_price_removed(self, create_scored):
        scored = [create_scored(p) for p in (100, 102, 98, 101, 99, 500)]

        kept = OutlierFilter().reject(scored)

        assert [s.effective_price for s in kept] == [100, 102, 98, 101, 99]

    def test_fewer_than_four_unchanged(self, create_scored):
        scored = [create_scored(p) for p in (10, 10, 1000)]

        assert OutlierFilter().reject(scored) == scored

    def test_identical_prices_all_kept(self, create_scored):
        scored = [create_scored(25) for _ in range(6)]

        assert len(OutlierFilter().reject(scored)) == 6

    def test_looser_threshold_keeps_more(self, create_scored):
        scored = [create_scored(p) for p in (100, 102, 98, 101, 99, 500)]

        assert len(OutlierFilter(z_threshold=3.0).reject(scored)) == 6

    def test_kept_prices_within_gate(self, create_scored):
        prices = [12, 55, 18, 30, 22, 95, 27, 24, 19, 400]
        scored = [create_scored(p) for p in prices]
        mean = sum(prices) / len(prices)
        std = (sum((p - mean) ** 2 for p in prices) / len(prices)) ** 0.5

        for s in OutlierFilter().reject(scored):
            assert abs(s.effective_price - mean) <= 2.0 * std


# =============================================================================
# Test: Aggregator
# =============================================================================

class TestAggregator:
    def test_rolling_windows(self, aggregator, create_scored, reference_date):
        scored = [
            create_scored(100, days_ago=10),
            create_scored(200, days_ago=60),
            create_scored(300, days_ago=120),
            create_scored(400, days_ago=200),
        ]

        rolling = aggregator.rolling_averages(scored, reference_date)

        assert rolling.days_30 == pytest.approx(100)
        assert rolling.days_90 == pytest.approx(150)
        assert rolling.days_180 == pytest.approx(200)

    def test_window_boundary_is_inclusive(self, aggregator, create_scored, reference_date):
        rolling = aggregator.rolling_averages([create_scored(80, days_ago=30)], reference_date)

        assert rolling.days_30 == pytest.approx(80)

    def test_empty_windows_are_none(self, aggregator, create_scored, reference_date):
        rolling = aggregator.rolling_averages([create_scored(80, days_ago=365)], reference_date)

        assert rolling.days_30 is None
        assert rolling.days_90 is None
        assert rolling.days_180 is None

    def test_zero_weights_fall_back_to_mean(self, aggregator, create_scored):
        scored = [create_scored(10, similarity=0), create_scored(30, similarity=0)]

        assert aggregator.weighted_average(scored) == pytest.approx(20)

    def test_price_range_rounds_half_up(self, aggregator, create_scored):
        scored = [create_scored(p) for p in (10.5, 20.5, 30.5, 40.5)]

        price_range = aggregator.price_range(scored)

        assert (price_range.low, price_range.median, price_range.high) == (11, 21, 31)

    def test_aggregate_combines_all(self, aggregator, create_scored, reference_date):
        scored = [create_scored(p, days_ago=5) for p in (38, 40, 41, 42, 45)]

        stats = aggregator.aggregate(scored, reference_date)

        assert stats.weighted_average == pytest.approx(41.2)
        assert stats.price_range.median == 41
        assert stats.rolling_averages.days_30 == pytest.approx(41.2)

    def test_aggregate_empty_rejected(self, aggregator, reference_date):
        with pytest.raises(ValueError):
            aggregator.aggregate([], reference_date)
