"""
Condition Filtering for the Valuation Engine

Keeps sealed compared to sealed, complete to complete, loose to loose.
Classification is keyword based and lives behind ConditionClassifier so the
vocabulary can be swapped for other collectible categories without touching
scoring or aggregation.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, List, Mapping, Optional, Tuple

from .models import Comparable, ConditionBucket


logger = logging.getLogger(__name__)

# Text fields a comparable can be classified from
FIELD_LABEL = "label"
FIELD_NAME = "name"


# =============================================================================
# Vocabulary
# =============================================================================

KeywordMap = Mapping[ConditionBucket, Tuple[str, ...]]


@dataclass(frozen=True)
class ConditionVocabulary:
    """
    Keyword sets used to recognise condition buckets in free text.

    match_* keywords confirm a bucket; marker_* keywords signal that a text
    clearly belongs to a bucket and so contradicts any other target bucket.
    Provider condition labels ("Very Good", "Acceptable") use a different
    vocabulary than listing titles, hence the separate label and name sets.
    attribute_keywords feed the similarity scorer.
    """
    match_label: KeywordMap
    match_name: KeywordMap
    marker_label: KeywordMap
    marker_name: KeywordMap
    attribute_keywords: KeywordMap


VIDEO_GAME_VOCABULARY: Final[ConditionVocabulary] = ConditionVocabulary(
    match_label=MappingProxyType({
        ConditionBucket.SEALED: ("new", "sealed", "new/sealed", "factory sealed"),
        ConditionBucket.COMPLETE: ("cib", "complete", "very good", "good"),
        ConditionBucket.LOOSE: ("loose", "acceptable", "cart", "disc"),
    }),
    match_name=MappingProxyType({
        ConditionBucket.SEALED: (
            "sealed", "new", "factory sealed", "brand new", "mint sealed", "new/sealed",
        ),
        ConditionBucket.COMPLETE: (
            "cib", "complete", "complete in box", "with box", "with manual", "box and manual",
        ),
        ConditionBucket.LOOSE: (
            "loose", "cart only", "cartridge only", "disc only", "game only", "no box", "no manual",
        ),
    }),
    marker_label=MappingProxyType({
        ConditionBucket.SEALED: ("sealed", "new"),
        ConditionBucket.COMPLETE: (),
        ConditionBucket.LOOSE: ("loose",),
    }),
    marker_name=MappingProxyType({
        ConditionBucket.SEALED: ("sealed", "factory new"),
        ConditionBucket.COMPLETE: ("cib", "complete in box"),
        ConditionBucket.LOOSE: ("loose", "cart only", "disc only"),
    }),
    attribute_keywords=MappingProxyType({
        ConditionBucket.SEALED: ("sealed", "new", "factory", "wata", "vga"),
        ConditionBucket.COMPLETE: ("cib", "complete", "box"),
        ConditionBucket.LOOSE: ("loose", "cart", "disc only", "cartridge"),
    }),
)


def _contains_any(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


# =============================================================================
# Classifier Interface
# =============================================================================

class ConditionClassifier(ABC):
    """
    Narrow interface for recognising condition buckets in free text.

    Subclasses must implement:
    - matches: text confirms the given bucket
    - contradicts: text clearly belongs to some other bucket
    - mentions: text carries any attribute keyword for the bucket
    """

    @abstractmethod
    def matches(self, text: str, bucket: ConditionBucket, field: str = FIELD_NAME) -> bool:
        ...

    @abstractmethod
    def contradicts(self, text: str, bucket: ConditionBucket, field: str = FIELD_NAME) -> bool:
        ...

    @abstractmethod
    def mentions(self, text: str, bucket: ConditionBucket) -> bool:
        ...

    def classify(self, text: str, field: str = FIELD_NAME) -> Optional[ConditionBucket]:
        """
        Classify text into a single bucket.

        Returns:
            The only bucket the text matches, or None when the text matches
            no bucket or more than one (unknown / ambiguous)
        """
        if not text:
            return None
        found = [bucket for bucket in ConditionBucket if self.matches(text, bucket, field)]
        return found[0] if len(found) == 1 else None


class KeywordConditionClassifier(ConditionClassifier):
    """Case-insensitive substring matching against a ConditionVocabulary."""

    def __init__(self, vocabulary: ConditionVocabulary = VIDEO_GAME_VOCABULARY):
        self._vocabulary = vocabulary

    @property
    def vocabulary(self) -> ConditionVocabulary:
        return self._vocabulary

    def matches(self, text: str, bucket: ConditionBucket, field: str = FIELD_NAME) -> bool:
        keywords = self._pick(self._vocabulary.match_label, self._vocabulary.match_name, field)
        return _contains_any(text.lower(), keywords.get(bucket, ()))

    def contradicts(self, text: str, bucket: ConditionBucket, field: str = FIELD_NAME) -> bool:
        markers = self._pick(self._vocabulary.marker_label, self._vocabulary.marker_name, field)
        lowered = text.lower()
        return any(
            _contains_any(lowered, markers.get(other, ()))
            for other in ConditionBucket
            if other is not bucket
        )

    def mentions(self, text: str, bucket: ConditionBucket) -> bool:
        return _contains_any(text.lower(), self._vocabulary.attribute_keywords.get(bucket, ()))

    @staticmethod
    def _pick(label_map: KeywordMap, name_map: KeywordMap, field: str) -> KeywordMap:
        if field == FIELD_LABEL:
            return label_map
        if field == FIELD_NAME:
            return name_map
        raise ValueError(f"Unknown text field: {field}")


# =============================================================================
# Condition Filter
# =============================================================================

class ConditionFilter:
    """
    Discards comparables whose condition differs from the target bucket.

    Decision order for each comparable:
    1. Condition label matches the target bucket -> include
    2. Condition label clearly signals another bucket -> exclude
    3. Listing title matches -> include
    4. Listing title clearly signals another bucket -> exclude
    5. Nothing determinable -> include (providers usually condition-scope results)
    """

    def __init__(self, classifier: Optional[ConditionClassifier] = None):
        self._classifier = classifier or KeywordConditionClassifier()

    @property
    def classifier(self) -> ConditionClassifier:
        return self._classifier

    def filter(
        self,
        comparables: List[Comparable],
        target_bucket: Optional[ConditionBucket],
    ) -> List[Comparable]:
        """
        Filter comparables to the target condition bucket.

        Args:
            comparables: Candidate sales
            target_bucket: Bucket of the item being valued (None = no filtering)

        Returns:
            Comparables eligible for the target bucket, in input order
        """
        if target_bucket is None:
            return list(comparables)

        kept = [c for c in comparables if self.is_eligible(c, target_bucket)]
        logger.debug(
            "Condition filter kept %d of %d comparables for %s",
            len(kept), len(comparables), target_bucket.value,
        )
        return kept

    def is_eligible(self, comparable: Comparable, target_bucket: ConditionBucket) -> bool:
        """Apply the decision order to a single comparable."""
        label = comparable.condition_label or ""
        if label:
            if self._classifier.matches(label, target_bucket, FIELD_LABEL):
                return True
            if self._classifier.contradicts(label, target_bucket, FIELD_LABEL):
                return False

        name = comparable.name or ""
        if self._classifier.matches(name, target_bucket, FIELD_NAME):
            return True
        if self._classifier.contradicts(name, target_bucket, FIELD_NAME):
            return False

        return True
