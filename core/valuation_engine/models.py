"""
Data models for the Valuation Engine

Defines the target item being valued, the comparable sales used as
evidence, and the valuation result handed back to callers.
"""

import math
import numbers
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


# Sentinel grading authority meaning "not professionally graded"
RAW_GRADING_AUTHORITY = "raw"


class Category(Enum):
    """Collectible category. Video games are the only supported domain."""
    VIDEO_GAMES = "video-games"


class ConditionBucket(Enum):
    """
    Physical completeness of a game.

    Sealed <-> Sealed only
    Complete <-> Complete only
    Loose <-> Loose only
    """
    SEALED = "sealed"
    COMPLETE = "complete"
    LOOSE = "loose"

    @classmethod
    def from_string(cls, value: str) -> Optional["ConditionBucket"]:
        """Convert string to ConditionBucket, case-insensitive. Accepts 'cib'."""
        if not value:
            return None
        normalised = value.lower().strip()
        if normalised == "cib":
            return cls.COMPLETE
        for member in cls:
            if member.value == normalised:
                return member
        return None

    @property
    def label(self) -> str:
        """Upper-case label used in methodology notes (e.g. 'SEALED')."""
        return self.value.upper()


class ConfidenceTier(Enum):
    """
    Qualitative confidence in a valuation.

    High: >= 5 comps, average similarity >= 70
    Medium: >= 3 comps, average similarity >= 50
    Low: anything else, and every empty result
    """
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class EmptyReason(Enum):
    """Why a valuation produced no estimate."""
    NO_DATA = "no_data"
    NO_CONDITION_MATCH = "no_condition_match"
    NO_SIMILAR_MATCH = "no_similar_match"


def format_grade(grade: float) -> str:
    """Render a grade the way it appears in listing titles (9.0 -> '9', 9.4 -> '9.4')."""
    return f"{grade:g}"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def round_half_up_cents(value: float) -> float:
    """Round to two decimal places with halves going up (0.125 -> 0.13)."""
    return math.floor(value * 100 + 0.5) / 100


@dataclass(frozen=True)
class TargetItem:
    """
    The item being valued.

    grade_value is present if and only if grading_authority is present
    and is not the 'raw' sentinel.
    """
    name: str
    condition_bucket: ConditionBucket
    category: Category = Category.VIDEO_GAMES

    # Optional attributes narrowing the match
    platform_hint: Optional[str] = None
    region_hint: Optional[str] = None

    # Professional grading (absent means raw/ungraded)
    grading_authority: Optional[str] = None
    grade_value: Optional[float] = None
    seal_quality: Optional[str] = None  # Only meaningful when sealed and graded

    def __post_init__(self) -> None:
        """Validate the grading invariant at construction time."""
        if not self.name or not self.name.strip():
            raise ValueError("name is required")
        if not isinstance(self.condition_bucket, ConditionBucket):
            raise ValueError("condition_bucket must be a ConditionBucket")

        has_authority = bool(self.grading_authority) and not self._authority_is_raw()
        if has_authority and self.grade_value is None:
            raise ValueError(
                f"grade_value is required when graded by {self.grading_authority}"
            )
        if not has_authority and self.grade_value is not None:
            raise ValueError("grade_value requires a non-raw grading_authority")
        if self.grade_value is not None and not math.isfinite(self.grade_value):
            raise ValueError("grade_value must be a finite number")

    def _authority_is_raw(self) -> bool:
        return (self.grading_authority or "").strip().lower() == RAW_GRADING_AUTHORITY

    @property
    def is_graded(self) -> bool:
        """Whether the item carries a professional grade."""
        return (
            bool(self.grading_authority)
            and not self._authority_is_raw()
            and self.grade_value is not None
        )


@dataclass(frozen=True)
class Comparable:
    """
    One observed sale used as evidence for the target's value.

    The condition label is free text from the provider and may be empty,
    inconsistent, or contradict the listing title.
    """
    name: str
    price: float  # Sale price in valuation currency; Decimal and int are stored as float
    sold_at: date
    source_label: str = ""
    condition_label: str = ""
    url: Optional[str] = None

    def __post_init__(self) -> None:
        """Reject prices and dates that would poison downstream aggregates."""
        if isinstance(self.sold_at, datetime):
            object.__setattr__(self, "sold_at", self.sold_at.date())
        elif not isinstance(self.sold_at, date):
            raise ValueError(f"sold_at must be a date, got {self.sold_at!r}")

        if isinstance(self.price, bool) or not isinstance(self.price, (numbers.Real, Decimal)):
            raise ValueError(f"price must be a number, got {self.price!r}")
        object.__setattr__(self, "price", float(self.price))
        if not math.isfinite(self.price) or self.price <= 0:
            raise ValueError(f"price must be a positive finite number, got {self.price!r}")

        if self.condition_label is None:
            object.__setattr__(self, "condition_label", "")

    @classmethod
    def from_dict(cls, data: dict) -> "Comparable":
        """
        Build a Comparable from a plain dictionary.

        Args:
            data: Mapping with name, price, sold_at (ISO date string or date),
                and optional source_label, condition_label, url

        Raises:
            ValueError: If the date cannot be parsed or the price is invalid
        """
        sold_at = data.get("sold_at")
        if isinstance(sold_at, str):
            try:
                sold_at = date.fromisoformat(sold_at[:10])
            except ValueError:
                raise ValueError(f"Unparsable sold_at: {sold_at!r}") from None

        try:
            price = float(data.get("price"))
        except (TypeError, ValueError):
            raise ValueError(f"Unparsable price: {data.get('price')!r}") from None

        return cls(
            name=str(data.get("name", "")),
            price=price,
            sold_at=sold_at,
            source_label=str(data.get("source_label", "") or ""),
            condition_label=str(data.get("condition_label", "") or ""),
            url=data.get("url"),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "name": self.name,
            "price": self.price,
            "sold_at": self.sold_at.isoformat(),
            "source_label": self.source_label,
            "condition_label": self.condition_label,
            "url": self.url,
        }


@dataclass(frozen=True)
class ScoredComparable:
    """
    A comparable with its derived weights.

    Recomputed on every valuation call, never persisted.
    """
    comparable: Comparable
    similarity: int  # 0-100
    recency_weight: float = 1.0  # (0, 1]

    @property
    def combined_weight(self) -> float:
        """Similarity and recency folded into one averaging weight."""
        return self.similarity / 100 * self.recency_weight

    @property
    def effective_price(self) -> float:
        """Price used in statistics. Currently the raw sale price."""
        return self.comparable.price

    @property
    def sold_at(self) -> date:
        return self.comparable.sold_at


@dataclass(frozen=True)
class PriceAdjustment:
    """One multiplicative correction applied to the weighted average."""
    kind: str
    multiplier: float
    rationale: str

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "multiplier": self.multiplier,
            "rationale": self.rationale,
        }


@dataclass(frozen=True)
class PriceRange:
    """25th / 50th / 75th percentile of the post-outlier price set."""
    low: int
    median: int
    high: int

    def to_dict(self) -> dict:
        return {"low": self.low, "median": self.median, "high": self.high}


@dataclass(frozen=True)
class RollingAverages:
    """Weighted averages over trailing windows. None when a window has no data."""
    days_30: Optional[float] = None
    days_90: Optional[float] = None
    days_180: Optional[float] = None

    def to_dict(self) -> dict:
        def _money(value: Optional[float]) -> Optional[float]:
            return None if value is None else round_half_up_cents(value)

        return {
            "30d": _money(self.days_30),
            "90d": _money(self.days_90),
            "180d": _money(self.days_180),
        }


@dataclass
class ValuationResult:
    """
    Complete valuation result for a target item.

    An empty result always carries an empty_reason and a methodology note
    naming it, so callers can tell it apart from a genuine zero estimate.
    """
    point_estimate: int
    confidence_tier: ConfidenceTier
    confidence_score: int  # 0-100
    price_range: Optional[PriceRange]
    rolling_averages: RollingAverages
    methodology_note: str

    comparables_used: int = 0
    adjustments: List[PriceAdjustment] = field(default_factory=list)
    empty_reason: Optional[EmptyReason] = None

    @property
    def is_empty(self) -> bool:
        """Whether the engine declined to produce an estimate."""
        return self.empty_reason is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "point_estimate": self.point_estimate,
            "confidence_tier": self.confidence_tier.value,
            "confidence_score": self.confidence_score,
            "range": self.price_range.to_dict() if self.price_range else None,
            "rolling_averages": self.rolling_averages.to_dict(),
            "adjustments_applied": [a.to_dict() for a in self.adjustments],
            "methodology_note": self.methodology_note,
            "comparables_used": self.comparables_used,
            "empty_reason": self.empty_reason.value if self.empty_reason else None,
        }
