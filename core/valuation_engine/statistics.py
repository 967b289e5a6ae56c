"""
Statistical Analysis for the Valuation Engine

Implements:
- Outlier rejection (two-sided z-score gate)
- Weighted averages with unweighted fallback
- Rolling averages over trailing windows
- Nearest-rank percentile price range
"""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Final, List, Optional, Sequence, Tuple

from .models import PriceRange, RollingAverages, ScoredComparable, round_half_up


# =============================================================================
# Configuration Constants
# =============================================================================

# Fewer comparables than this gives no meaningful spread
MIN_COMPS_FOR_OUTLIER_REJECTION = 4
DEFAULT_OUTLIER_Z_THRESHOLD = 2.0

ROLLING_WINDOWS_DAYS: Final[Tuple[int, ...]] = (30, 90, 180)

RANGE_PERCENTILES: Final[Tuple[int, int, int]] = (25, 50, 75)


# =============================================================================
# Helpers
# =============================================================================

def weighted_average(scored: Sequence[ScoredComparable]) -> Optional[float]:
    """
    Weighted mean of effective prices.

    Returns:
        The weighted mean, or None when there are no items or the
        total weight is zero
    """
    total_weight = sum(s.combined_weight for s in scored)
    if not scored or total_weight <= 0:
        return None
    return sum(s.effective_price * s.combined_weight for s in scored) / total_weight


def mean_price(scored: Sequence[ScoredComparable]) -> float:
    """Unweighted arithmetic mean of effective prices."""
    return sum(s.effective_price for s in scored) / len(scored)


def nearest_rank_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """
    Nearest-rank percentile: index ceil(p/100 * n) - 1, clamped to the list.

    Args:
        sorted_values: Values in ascending order (must be non-empty)
        percentile: Percentile in [0, 100]
    """
    if not sorted_values:
        raise ValueError("cannot take a percentile of an empty list")
    index = math.ceil(percentile / 100 * len(sorted_values)) - 1
    index = max(0, min(index, len(sorted_values) - 1))
    return sorted_values[index]


# =============================================================================
# Outlier Filter
# =============================================================================

class OutlierFilter:
    """
    Removes statistically extreme prices before averaging.

    Keeps prices within mean +/- z * population standard deviation.
    A fixed policy, not adaptive.
    """

    def __init__(self, z_threshold: float = DEFAULT_OUTLIER_Z_THRESHOLD):
        self._z_threshold = z_threshold

    def reject(self, scored: List[ScoredComparable]) -> List[ScoredComparable]:
        """
        Remove outliers.

        Args:
            scored: Scored comparables

        Returns:
            Comparables inside the gate, in input order (unchanged when
            fewer than four are given)
        """
        if len(scored) < MIN_COMPS_FOR_OUTLIER_REJECTION:
            return list(scored)

        prices = [s.effective_price for s in scored]
        mean = sum(prices) / len(prices)
        std_dev = math.sqrt(sum((p - mean) ** 2 for p in prices) / len(prices))

        lower_bound = mean - self._z_threshold * std_dev
        upper_bound = mean + self._z_threshold * std_dev

        return [s for s in scored if lower_bound <= s.effective_price <= upper_bound]


# =============================================================================
# Aggregator
# =============================================================================

@dataclass(frozen=True)
class AggregateStatistics:
    """Aggregate statistics over the outlier-free comparable set."""
    weighted_average: float
    rolling_averages: RollingAverages
    price_range: PriceRange


class Aggregator:
    """Computes the weighted average, rolling averages and price range."""

    def aggregate(self, scored: List[ScoredComparable], now: date) -> AggregateStatistics:
        """
        Aggregate a non-empty set of scored comparables.

        Args:
            scored: Outlier-free comparables (must be non-empty)
            now: Reference date for the rolling windows
        """
        if not scored:
            raise ValueError("cannot aggregate an empty comparable set")

        return AggregateStatistics(
            weighted_average=self.weighted_average(scored),
            rolling_averages=self.rolling_averages(scored, now),
            price_range=self.price_range(scored),
        )

    def weighted_average(self, scored: List[ScoredComparable]) -> float:
        """Weighted mean, falling back to the plain mean when all weights are zero."""
        average = weighted_average(scored)
        if average is None:
            return mean_price(scored)
        return average

    def rolling_averages(self, scored: List[ScoredComparable], now: date) -> RollingAverages:
        """Weighted averages of sales within each trailing window."""
        days_30, days_90, days_180 = (
            self._window_average(scored, now, days) for days in ROLLING_WINDOWS_DAYS
        )
        return RollingAverages(days_30=days_30, days_90=days_90, days_180=days_180)

    def price_range(self, scored: List[ScoredComparable]) -> PriceRange:
        """25th / 50th / 75th nearest-rank percentiles of effective prices."""
        prices = sorted(s.effective_price for s in scored)
        low, median, high = (
            round_half_up(nearest_rank_percentile(prices, p)) for p in RANGE_PERCENTILES
        )
        return PriceRange(low=low, median=median, high=high)

    @staticmethod
    def _window_average(
        scored: List[ScoredComparable],
        now: date,
        days: int,
    ) -> Optional[float]:
        cutoff = now - timedelta(days=days)
        return weighted_average([s for s in scored if s.sold_at >= cutoff])
