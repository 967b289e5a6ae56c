"""
Tests for condition classification and filtering.

Verifies the decision order: label match, label contradiction, title
match, title contradiction, then inclusion when nothing is determinable.
"""

import pytest
from datetime import date
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.valuation_engine import (
    Comparable,
    ConditionBucket,
    ConditionClassifier,
    ConditionFilter,
    KeywordConditionClassifier,
)
from core.valuation_engine.conditions import FIELD_LABEL, FIELD_NAME


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def classifier():
    return KeywordConditionClassifier()


@pytest.fixture
def condition_filter():
    return ConditionFilter()


@pytest.fixture
def create_comp():
    """Factory fixture for comparables that differ only in their text fields."""
    def _create(name: str, condition_label: str = "") -> Comparable:
        return Comparable(
            name=name,
            price=40.0,
            sold_at=date(2024, 5, 1),
            source_label="eBay",
            condition_label=condition_label,
        )
    return _create


# =============================================================================
# Test: Keyword Classifier
# =============================================================================

class TestKeywordClassifier:
    """Tests for keyword matching against the video game vocabulary."""

    @pytest.mark.parametrize("text,expected", [
        ("Factory Sealed", ConditionBucket.SEALED),
        ("Super Mario Bros CIB", ConditionBucket.COMPLETE),
        ("Complete in Box", ConditionBucket.COMPLETE),
        ("Cartridge Only", ConditionBucket.LOOSE),
        ("Game only, no manual", ConditionBucket.LOOSE),
    ])
    def test_classify_titles(self, classifier, text, expected):
        assert classifier.classify(text, FIELD_NAME) == expected

    @pytest.mark.parametrize("text,expected", [
        ("New", ConditionBucket.SEALED),
        ("Very Good", ConditionBucket.COMPLETE),
        ("Acceptable", ConditionBucket.LOOSE),
    ])
    def test_classify_provider_labels(self, classifier, text, expected):
        assert classifier.classify(text, FIELD_LABEL) == expected

    def test_empty_text_is_unknown(self, classifier):
        assert classifier.classify("") is None

    def test_ambiguous_text_is_unknown(self, classifier):
        """Text matching more than one bucket has no single classification."""
        assert classifier.classify("new cib") is None

    def test_matching_is_case_insensitive(self, classifier):
        assert classifier.matches("FACTORY SEALED", ConditionBucket.SEALED)

    def test_contradiction_uses_other_buckets_markers(self, classifier):
        assert classifier.contradicts("Loose cart", ConditionBucket.COMPLETE)
        assert not classifier.contradicts("Loose cart", ConditionBucket.LOOSE)

    def test_unknown_field_rejected(self, classifier):
        with pytest.raises(ValueError):
            classifier.matches("sealed", ConditionBucket.SEALED, field="description")

    def test_mentions_uses_attribute_keywords(self, classifier):
        assert classifier.mentions("graded wata 9.4", ConditionBucket.SEALED)
        assert classifier.mentions("with box", ConditionBucket.COMPLETE)
        assert not classifier.mentions("with box", ConditionBucket.LOOSE)


# =============================================================================
# Test: Filter Decision Order
# =============================================================================

class TestConditionFilter:
    """Tests for comparable eligibility."""

    def test_label_match_includes(self, condition_filter, create_comp):
        comp = create_comp("Super Mario Bros NES", condition_label="Very Good")

        assert condition_filter.is_eligible(comp, ConditionBucket.COMPLETE)

    def test_label_contradiction_excludes(self, condition_filter, create_comp):
        comp = create_comp("Super Mario Bros NES", condition_label="New")

        assert not condition_filter.is_eligible(comp, ConditionBucket.COMPLETE)

    def test_label_wins_over_title(self, condition_filter, create_comp):
        """A matching label includes even when the title says otherwise."""
        comp = create_comp("Super Mario Bros NES Loose", condition_label="Very Good")

        assert condition_filter.is_eligible(comp, ConditionBucket.COMPLETE)

    def test_uninformative_label_falls_through_to_title(self, condition_filter, create_comp):
        included = create_comp("Super Mario Bros NES CIB", condition_label="Used")
        excluded = create_comp("Super Mario Bros NES Loose", condition_label="Used")

        assert condition_filter.is_eligible(included, ConditionBucket.COMPLETE)
        assert not condition_filter.is_eligible(excluded, ConditionBucket.COMPLETE)

    def test_title_contradiction_excludes(self, condition_filter, create_comp):
        comp = create_comp("Super Mario Bros NES cart only")

        assert not condition_filter.is_eligible(comp, ConditionBucket.SEALED)

    def test_undeterminable_is_included(self, condition_filter, create_comp):
        """Nothing in label or title: providers usually condition-scope results."""
        comp = create_comp("Super Mario Bros NES")

        for bucket in ConditionBucket:
            assert condition_filter.is_eligible(comp, bucket)

    def test_filter_keeps_input_order(self, condition_filter, create_comp):
        comps = [
            create_comp("Mario CIB #1"),
            create_comp("Mario Loose"),
            create_comp("Mario CIB #2"),
        ]

        kept = condition_filter.filter(comps, ConditionBucket.COMPLETE)

        assert [c.name for c in kept] == ["Mario CIB #1", "Mario CIB #2"]

    def test_no_target_bucket_passes_everything(self, condition_filter, create_comp):
        comps = [create_comp("Mario Loose"), create_comp("Mario Sealed")]

        assert condition_filter.filter(comps, None) == comps


# =============================================================================
# Test: Pluggable Classifier
# =============================================================================

class TestCustomClassifier:
    """The filter works with any ConditionClassifier implementation."""

    class _ExcludeEverything(ConditionClassifier):
        def matches(self, text, bucket, field=FIELD_NAME):
            return False

        def contradicts(self, text, bucket, field=FIELD_NAME):
            return True

        def mentions(self, text, bucket):
            return False

    def test_custom_classifier_used(self, create_comp):
        condition_filter = ConditionFilter(self._ExcludeEverything())

        kept = condition_filter.filter(
            [create_comp("Mario CIB", condition_label="Very Good")],
            ConditionBucket.COMPLETE,
        )

        assert kept == []

    def test_classify_on_custom_classifier(self):
        assert self._ExcludeEverything().classify("anything") is None
