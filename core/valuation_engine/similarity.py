"""
Similarity Scoring for the Valuation Engine

Scores each comparable against the target on two axes:
- Name similarity (40 points)
- Video game attributes (60 points): platform, condition, grading, region
"""

from types import MappingProxyType
from typing import Final, FrozenSet, Mapping, Optional, Tuple

from .conditions import ConditionClassifier, KeywordConditionClassifier
from .models import (
    Comparable,
    ScoredComparable,
    TargetItem,
    format_grade,
    round_half_up,
)


# =============================================================================
# Configuration Constants
# =============================================================================

NAME_POINTS = 40
ATTRIBUTE_POINTS = 60

# Tokens this short ("of", "ii", "64") carry too little signal
MIN_TOKEN_LENGTH = 3
PARTIAL_TOKEN_CREDIT = 0.5

# Attribute factor weights
PLATFORM_WEIGHT = 3.0
CONDITION_WEIGHT = 2.0
GRADING_WEIGHT = 2.0
GRADING_AUTHORITY_CREDIT = 1.5
GRADE_DIGITS_BONUS = 0.5
REGION_WEIGHT = 1.0

# Ratio used when no attribute factor applies: unknown, treat as medium relevance
UNKNOWN_ATTRIBUTE_RATIO = 0.5

REGION_KEYWORDS: Final[Mapping[str, Tuple[str, ...]]] = MappingProxyType({
    "NTSC": ("ntsc", "usa", "us version"),
    "PAL": ("pal", "europe", "uk", "eu"),
    "NTSC-J": ("ntsc-j", "japan", "jp", "japanese"),
})


def _tokens(text: str) -> FrozenSet[str]:
    return frozenset(
        word for word in text.lower().split() if len(word) >= MIN_TOKEN_LENGTH
    )


def name_similarity(comparable_name: str, target_name: str) -> float:
    """
    Fraction of target words found in the comparable's title.

    Exact word matches score 1, substring matches in either direction 0.5.

    Returns:
        Ratio in [0, 1]; 0 when the target has no usable words
    """
    target_words = _tokens(target_name)
    if not target_words:
        return 0.0
    comparable_words = _tokens(comparable_name)

    matched = 0.0
    for word in target_words:
        if word in comparable_words:
            matched += 1
        elif any(word in other or other in word for other in comparable_words):
            matched += PARTIAL_TOKEN_CREDIT

    return matched / len(target_words)


def region_keywords(region_hint: str) -> Tuple[str, ...]:
    """Keywords identifying a region in listing titles. Unknown regions match literally."""
    known = REGION_KEYWORDS.get(region_hint.strip().upper())
    if known is not None:
        return known
    return (region_hint.strip().lower(),)


class SimilarityScorer:
    """
    Scores comparables against the target item.

    The recency weight of the returned ScoredComparable is left at 1.0;
    the TimeWeighter fills it in.
    """

    def __init__(self, classifier: Optional[ConditionClassifier] = None):
        self._classifier = classifier or KeywordConditionClassifier()

    def score(self, comparable: Comparable, target: TargetItem) -> ScoredComparable:
        """
        Score one comparable.

        Args:
            comparable: The observed sale
            target: The item being valued

        Returns:
            ScoredComparable with similarity in [0, 100]
        """
        name_ratio = name_similarity(comparable.name, target.name)
        attribute_ratio = self.attribute_similarity(comparable, target)

        similarity = round_half_up(
            name_ratio * NAME_POINTS + attribute_ratio * ATTRIBUTE_POINTS
        )
        similarity = max(0, min(100, similarity))

        return ScoredComparable(comparable=comparable, similarity=similarity)

    def attribute_similarity(self, comparable: Comparable, target: TargetItem) -> float:
        """
        Weighted share of the target's attributes found in the comparable.

        Returns:
            Ratio in [0, 1], or 0.5 when no attribute applies
        """
        title = comparable.name.lower()
        label = (comparable.condition_label or "").lower()
        achieved = 0.0
        possible = 0.0

        # Platform matching (critical)
        platform = (target.platform_hint or "").strip().lower()
        if platform:
            possible += PLATFORM_WEIGHT
            if platform in title:
                achieved += PLATFORM_WEIGHT

        # Condition bucket
        if target.condition_bucket is not None:
            possible += CONDITION_WEIGHT
            bucket = target.condition_bucket
            if self._classifier.mentions(title, bucket) or self._classifier.mentions(label, bucket):
                achieved += CONDITION_WEIGHT

        # Grading authority and grade
        if target.is_graded:
            possible += GRADING_WEIGHT
            authority = target.grading_authority.strip().lower()
            if authority in title or authority in label:
                achieved += GRADING_AUTHORITY_CREDIT
                grade = format_grade(target.grade_value)
                if grade in title or grade in label:
                    achieved += GRADE_DIGITS_BONUS

        # Region
        if target.region_hint and target.region_hint.strip():
            possible += REGION_WEIGHT
            if any(keyword in title for keyword in region_keywords(target.region_hint)):
                achieved += REGION_WEIGHT

        if possible == 0:
            return UNKNOWN_ATTRIBUTE_RATIO
        return achieved / possible
