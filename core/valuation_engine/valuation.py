"""
Valuation Engine

Pipeline order:
1. FILTER - Keep comparables matching the target condition bucket
2. SCORE - Similarity against the target, recency weight from sale age
3. RELEVANCE - Drop comparables below the similarity floor
4. QUALITY CONTROL - Remove price outliers
5. AGGREGATE - Rolling averages, weighted average, price range
6. ADJUST - Grade multiplier for professionally graded items
7. CONFIDENCE - Tier and score
8. EXPLAIN - Methodology note
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Final, List, Optional, Sequence, Tuple

from .conditions import ConditionClassifier, ConditionFilter, KeywordConditionClassifier
from .confidence import ConfidenceEstimator
from .models import (
    Comparable,
    ConfidenceTier,
    EmptyReason,
    PriceAdjustment,
    RollingAverages,
    ScoredComparable,
    TargetItem,
    ValuationResult,
    format_grade,
    round_half_up,
)
from .similarity import SimilarityScorer
from .statistics import DEFAULT_OUTLIER_Z_THRESHOLD, Aggregator, OutlierFilter
from .time_weighting import TimeWeighter


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Constants
# =============================================================================

DEFAULT_BASELINE_GRADE = 8.5  # Assumed grade of a typical graded sale
DEFAULT_MIN_SIMILARITY = 20

# Below one standard deviation the gate can reject every comparable
MIN_OUTLIER_Z_THRESHOLD = 1.0

# (minimum grade, price multiplier), descending by grade
GRADE_MULTIPLIERS: Final[Tuple[Tuple[float, float], ...]] = (
    (10.0, 8.0),
    (9.8, 5.0),
    (9.6, 3.0),
    (9.4, 2.0),
    (9.2, 1.6),
    (9.0, 1.3),
    (8.5, 1.1),
    (8.0, 1.0),
    (7.5, 0.8),
    (7.0, 0.6),
    (6.0, 0.4),
    (5.0, 0.3),
)
FLOOR_GRADE_MULTIPLIER = 0.3

GRADE_ADJUSTMENT_KIND = "grade"

# Methodology notes for empty results
NO_DATA_NOTE = "No comparable sales data available"
NO_SIMILAR_MATCH_NOTE = "No sufficiently similar comparables found"


@dataclass(frozen=True)
class ValuationPolicy:
    """
    Policy knobs for the valuation pipeline.

    Fixed values, not fitted to data. Overridable via Config.
    """
    baseline_grade: float = DEFAULT_BASELINE_GRADE
    outlier_z_threshold: float = DEFAULT_OUTLIER_Z_THRESHOLD
    min_similarity: int = DEFAULT_MIN_SIMILARITY

    def __post_init__(self) -> None:
        """Reject knobs that would empty the comparable set or break scoring."""
        if not math.isfinite(self.baseline_grade):
            raise ValueError("baseline_grade must be a finite number")
        z = self.outlier_z_threshold
        if not math.isfinite(z) or z < MIN_OUTLIER_Z_THRESHOLD:
            raise ValueError(
                f"outlier_z_threshold must be finite and >= {MIN_OUTLIER_Z_THRESHOLD}, "
                f"got {self.outlier_z_threshold!r}"
            )
        if not 0 <= self.min_similarity <= 100:
            raise ValueError(f"min_similarity must be between 0 and 100, got {self.min_similarity!r}")


def grade_multiplier(grade: float) -> float:
    """Multiplier of the highest grade threshold at or below the given grade."""
    for threshold, multiplier in GRADE_MULTIPLIERS:
        if grade >= threshold:
            return multiplier
    return FLOOR_GRADE_MULTIPLIER


def no_condition_match_note(target: TargetItem) -> str:
    """Empty-result note when no comparable shares the target's condition."""
    bucket = target.condition_bucket.label if target.condition_bucket else "matching"
    return f"No {bucket} condition sales found"


class ValuationEngine:
    """
    Complete valuation pipeline for a collectible and its comparable sales.

    Stateless between calls: every call depends only on its arguments,
    so one engine can be shared across threads.
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        policy: Optional[ValuationPolicy] = None,
        classifier: Optional[ConditionClassifier] = None,
    ):
        """
        Initialize valuation engine.

        Args:
            reference_date: Fixed "now" for calculations (default: today, per call)
            policy: Policy knobs (default: ValuationPolicy())
            classifier: Condition keyword strategy (default: video games)
        """
        self._reference_date = reference_date
        self._policy = policy or ValuationPolicy()

        classifier = classifier or KeywordConditionClassifier()
        self._condition_filter = ConditionFilter(classifier)
        self._scorer = SimilarityScorer(classifier)
        self._time_weighter = TimeWeighter()
        self._outlier_filter = OutlierFilter(self._policy.outlier_z_threshold)
        self._aggregator = Aggregator()
        self._confidence = ConfidenceEstimator()

    @property
    def policy(self) -> ValuationPolicy:
        return self._policy

    def valuate(
        self,
        target: TargetItem,
        comparables: Sequence[Comparable],
        now: Optional[date] = None,
    ) -> ValuationResult:
        """
        Perform complete valuation for a target item.

        Args:
            target: The item being valued
            comparables: Observed sales from any number of providers
            now: Reference date (default: engine reference date, else today)

        Returns:
            ValuationResult; an empty result names its reason instead of
            fabricating a price
        """
        now = now or self._reference_date or date.today()
        if isinstance(now, datetime):
            now = now.date()
        comparables = list(comparables)

        if not comparables:
            return create_empty_result(EmptyReason.NO_DATA, NO_DATA_NOTE)

        # Step 1: Condition isolation (never compare sealed against loose)
        eligible = self._condition_filter.filter(comparables, target.condition_bucket)
        if not eligible:
            return create_empty_result(
                EmptyReason.NO_CONDITION_MATCH, no_condition_match_note(target)
            )

        # Step 2: Similarity and recency
        scored = [self.score_comparable(c, target, now) for c in eligible]

        # Step 3: Relevance floor
        relevant = [s for s in scored if s.similarity >= self._policy.min_similarity]
        if not relevant:
            return create_empty_result(EmptyReason.NO_SIMILAR_MATCH, NO_SIMILAR_MATCH_NOTE)

        # Step 4: Outliers
        kept = self._outlier_filter.reject(relevant)
        if not kept:
            logger.warning(
                "Outlier gate rejected all %d comparables for %r; keeping them all",
                len(relevant), target.name,
            )
            kept = relevant

        # Step 5: Aggregates
        stats = self._aggregator.aggregate(kept, now)

        # Step 6: Grade adjustment
        estimate, adjustments = self.apply_grade_adjustment(stats.weighted_average, target)

        # Step 7: Confidence
        confidence = self._confidence.estimate(kept, len(relevant))

        # Step 8: Methodology
        methodology = build_methodology(
            used_count=len(kept),
            low_relevance_count=len(scored) - len(relevant),
            outlier_count=len(relevant) - len(kept),
            adjustments=adjustments,
            target=target,
        )

        logger.debug(
            "Valued %r: %d comparables, %d eligible, %d relevant, %d used",
            target.name, len(comparables), len(eligible), len(relevant), len(kept),
        )

        return ValuationResult(
            point_estimate=round_half_up(estimate),
            confidence_tier=confidence.tier,
            confidence_score=confidence.score,
            price_range=stats.price_range,
            rolling_averages=stats.rolling_averages,
            methodology_note=methodology,
            comparables_used=len(kept),
            adjustments=adjustments,
        )

    def score_comparable(
        self,
        comparable: Comparable,
        target: TargetItem,
        now: date,
    ) -> ScoredComparable:
        """Similarity score plus recency weight for one comparable."""
        scored = self._scorer.score(comparable, target)
        return replace(scored, recency_weight=self._time_weighter.weight(comparable.sold_at, now))

    def apply_grade_adjustment(
        self,
        weighted_average: float,
        target: TargetItem,
    ) -> Tuple[float, List[PriceAdjustment]]:
        """
        Scale the weighted average for the target's specific grade.

        Comparable graded sales are assumed to sit at the baseline grade,
        so the factor is multiplier(grade) / multiplier(baseline).

        Returns:
            Tuple of (adjusted value, adjustments applied)
        """
        if not target.is_graded:
            return weighted_average, []

        actual = grade_multiplier(target.grade_value)
        baseline = grade_multiplier(self._policy.baseline_grade)
        if actual == baseline:
            return weighted_average, []

        factor = actual / baseline
        adjustment = PriceAdjustment(
            kind=GRADE_ADJUSTMENT_KIND,
            multiplier=factor,
            rationale=(
                f"Adjusted for {target.grading_authority} "
                f"{format_grade(target.grade_value)} grade"
            ),
        )
        return weighted_average * factor, [adjustment]


def build_methodology(
    used_count: int,
    low_relevance_count: int,
    outlier_count: int,
    adjustments: List[PriceAdjustment],
    target: TargetItem,
) -> str:
    """One-line summary of sample size, exclusions and adjustments."""
    parts = []

    if target.condition_bucket:
        parts.append(f"Based on {used_count} {target.condition_bucket.label} sales")
    else:
        parts.append(f"Based on {used_count} comparable sales")

    exclusions = []
    if low_relevance_count:
        exclusions.append(f"{low_relevance_count} low-relevance")
    if outlier_count:
        noun = "outlier" if outlier_count == 1 else "outliers"
        exclusions.append(f"{outlier_count} {noun}")
    if exclusions:
        parts.append(f"({', '.join(exclusions)} excluded)")

    if adjustments:
        kinds = ", ".join(a.kind for a in adjustments)
        parts.append(f"with {kinds} adjustments applied")

    parts.append("using time-weighted rolling average")

    return " ".join(parts)


def create_empty_result(reason: EmptyReason, note: str) -> ValuationResult:
    """Terminal result for valuations that cannot produce an estimate."""
    return ValuationResult(
        point_estimate=0,
        confidence_tier=ConfidenceTier.LOW,
        confidence_score=0,
        price_range=None,
        rolling_averages=RollingAverages(),
        methodology_note=note,
        comparables_used=0,
        adjustments=[],
        empty_reason=reason,
    )


def calculate_valuation(
    target: TargetItem,
    comparables: Sequence[Comparable],
    now: Optional[date] = None,
    policy: Optional[ValuationPolicy] = None,
) -> ValuationResult:
    """Value a target with a one-off engine."""
    return ValuationEngine(policy=policy).valuate(target, comparables, now=now)
