"""
Tests for recency decay weighting.
"""

import pytest
from datetime import date, datetime, timedelta
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.valuation_engine import TimeWeighter
from core.valuation_engine.time_weighting import DECAY_ANCHORS, sale_age_days


@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic tests."""
    return date(2024, 6, 1)


@pytest.fixture
def weighter():
    return TimeWeighter()


class TestAnchors:
    """Weights at and between the decay anchors."""

    @pytest.mark.parametrize("age,expected", list(DECAY_ANCHORS))
    def test_anchor_weights(self, weighter, age, expected):
        assert weighter.weight_for_age(age) == pytest.approx(expected)

    def test_interpolates_between_anchors(self, weighter):
        # Halfway between (30, 0.85) and (60, 0.70)
        assert weighter.weight_for_age(45) == pytest.approx(0.775)

    def test_clamps_after_last_anchor(self, weighter):
        assert weighter.weight_for_age(1000) == pytest.approx(0.15)

    def test_future_dated_sale_weighs_fully(self, weighter, reference_date):
        assert weighter.weight(reference_date + timedelta(days=5), reference_date) == 1.0


class TestDecayProperties:
    """Properties that hold for every sale age."""

    def test_monotonic_non_increasing(self, weighter):
        weights = [weighter.weight_for_age(age) for age in range(0, 500)]

        assert all(a >= b for a, b in zip(weights, weights[1:]))

    def test_bounded(self, weighter):
        for age in range(-10, 500, 7):
            assert 0 < weighter.weight_for_age(age) <= 1.0

    def test_unsorted_anchors_are_sorted(self):
        weighter = TimeWeighter(anchors=((100, 0.5), (0, 1.0)))

        assert weighter.weight_for_age(50) == pytest.approx(0.75)

    def test_empty_anchors_rejected(self):
        with pytest.raises(ValueError):
            TimeWeighter(anchors=())


class TestSaleAge:
    def test_age_in_days(self, reference_date):
        assert sale_age_days(date(2024, 5, 2), reference_date) == 30

    def test_datetimes_use_calendar_date(self, reference_date):
        assert sale_age_days(datetime(2024, 5, 31, 23, 59), reference_date) == 1
