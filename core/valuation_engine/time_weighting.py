"""
Time Decay Weighting for the Valuation Engine

Recent sales are more predictive than old ones. Sale age is converted to
a weight by linear interpolation between fixed anchors.
"""

from datetime import date, datetime
from typing import Final, Tuple


# (age in days, weight), ascending by age
DECAY_ANCHORS: Final[Tuple[Tuple[int, float], ...]] = (
    (0, 1.00),
    (7, 0.95),
    (14, 0.90),
    (30, 0.85),
    (60, 0.70),
    (90, 0.55),
    (180, 0.35),
    (365, 0.15),
)


def _as_date(value: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def sale_age_days(sold_at: date, now: date) -> int:
    """Whole days between the sale and now (negative for future-dated sales)."""
    return (_as_date(now) - _as_date(sold_at)).days


class TimeWeighter:
    """
    Converts sale recency into a decay weight in (0, 1].

    Ages between anchors are linearly interpolated. Ages past the last
    anchor keep the last anchor's weight. Future-dated sales weigh 1.0.
    """

    def __init__(self, anchors: Tuple[Tuple[int, float], ...] = DECAY_ANCHORS):
        if not anchors:
            raise ValueError("at least one decay anchor is required")
        self._anchors = tuple(sorted(anchors))

    def weight(self, sold_at: date, now: date) -> float:
        """
        Weight for a sale made on sold_at, as seen from now.

        Args:
            sold_at: Sale date
            now: Reference date of the valuation

        Returns:
            Decay weight in (0, 1]
        """
        return self.weight_for_age(sale_age_days(sold_at, now))

    def weight_for_age(self, age_days: int) -> float:
        """Weight for a sale age expressed in days."""
        anchors = self._anchors

        if age_days < anchors[0][0]:
            return 1.0

        for (lower_days, lower_weight), (upper_days, upper_weight) in zip(anchors, anchors[1:]):
            if lower_days <= age_days < upper_days:
                ratio = (age_days - lower_days) / (upper_days - lower_days)
                return lower_weight - (lower_weight - upper_weight) * ratio

        return anchors[-1][1]
