"""
Valuation Engine v1.0

Turns noisy, multi-source comparable sales into a single price estimate,
a confidence rating and a methodology note for a collectible video game.
"""

from .models import (
    Category,
    ConditionBucket,
    ConfidenceTier,
    EmptyReason,
    TargetItem,
    Comparable,
    ScoredComparable,
    PriceAdjustment,
    PriceRange,
    RollingAverages,
    ValuationResult,
)
from .conditions import (
    ConditionVocabulary,
    ConditionClassifier,
    KeywordConditionClassifier,
    ConditionFilter,
    VIDEO_GAME_VOCABULARY,
)
from .similarity import SimilarityScorer
from .time_weighting import TimeWeighter
from .statistics import OutlierFilter, Aggregator, AggregateStatistics
from .confidence import ConfidenceEstimator, ConfidenceAssessment
from .valuation import (
    ValuationEngine,
    ValuationPolicy,
    calculate_valuation,
    grade_multiplier,
)

__all__ = [
    # Models
    "Category",
    "ConditionBucket",
    "ConfidenceTier",
    "EmptyReason",
    "TargetItem",
    "Comparable",
    "ScoredComparable",
    "PriceAdjustment",
    "PriceRange",
    "RollingAverages",
    "ValuationResult",
    # Condition classification
    "ConditionVocabulary",
    "ConditionClassifier",
    "KeywordConditionClassifier",
    "ConditionFilter",
    "VIDEO_GAME_VOCABULARY",
    # Pipeline stages
    "SimilarityScorer",
    "TimeWeighter",
    "OutlierFilter",
    "Aggregator",
    "AggregateStatistics",
    "ConfidenceEstimator",
    "ConfidenceAssessment",
    # Engine
    "ValuationEngine",
    "ValuationPolicy",
    "calculate_valuation",
    "grade_multiplier",
]

__version__ = "1.0"
