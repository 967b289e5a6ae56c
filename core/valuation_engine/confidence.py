"""
Confidence Estimation for the Valuation Engine

Confidence combines three independent contributions:
- Sample size (up to 40 points)
- Match quality (up to 40 points)
- Data freshness (up to 20 points)
"""

from dataclasses import dataclass
from typing import Final, List, Tuple

from .models import ConfidenceTier, ScoredComparable, round_half_up


# =============================================================================
# Configuration Constants
# =============================================================================

POINTS_PER_COMPARABLE = 8
MAX_SAMPLE_POINTS = 40
SIMILARITY_POINTS = 40
RECENCY_POINTS = 20

# (tier, minimum comparables, minimum average similarity), checked in order
TIER_THRESHOLDS: Final[Tuple[Tuple[ConfidenceTier, int, float], ...]] = (
    (ConfidenceTier.HIGH, 5, 70.0),
    (ConfidenceTier.MEDIUM, 3, 50.0),
)


@dataclass(frozen=True)
class ConfidenceAssessment:
    """Confidence tier and score for a set of comparables."""
    tier: ConfidenceTier
    score: int  # 0-100
    sample_size: int
    outliers_removed: int = 0


class ConfidenceEstimator:
    """Derives a confidence tier and numeric score from the final comparable set."""

    def estimate(
        self,
        scored: List[ScoredComparable],
        pre_outlier_count: int,
    ) -> ConfidenceAssessment:
        """
        Assess confidence.

        Args:
            scored: Comparables that survived outlier rejection
            pre_outlier_count: Number of comparables before outlier rejection

        Returns:
            ConfidenceAssessment

        Raises:
            ValueError: If scored is empty (callers short-circuit before this)
        """
        if not scored:
            raise ValueError("confidence requires at least one comparable")

        count = len(scored)
        avg_similarity = sum(s.similarity for s in scored) / count
        avg_recency = sum(s.recency_weight for s in scored) / count

        raw_score = (
            min(count * POINTS_PER_COMPARABLE, MAX_SAMPLE_POINTS)
            + (avg_similarity / 100) * SIMILARITY_POINTS
            + avg_recency * RECENCY_POINTS
        )
        score = max(0, min(100, round_half_up(raw_score)))

        return ConfidenceAssessment(
            tier=self.tier_for(count, avg_similarity),
            score=score,
            sample_size=count,
            outliers_removed=max(0, pre_outlier_count - count),
        )

    @staticmethod
    def tier_for(count: int, avg_similarity: float) -> ConfidenceTier:
        """Highest tier whose thresholds are met, else Low."""
        for tier, min_count, min_similarity in TIER_THRESHOLDS:
            if count >= min_count and avg_similarity >= min_similarity:
                return tier
        return ConfidenceTier.LOW
