"""
Request schemas for the valuation API.

Request bodies are validated here, at the boundary, and converted into the
engine's typed TargetItem and Comparable records. Nothing untyped reaches
the Valuation Engine.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from core.valuation_engine import Category, Comparable, ConditionBucket, TargetItem


# Upper bound on items in one batch request
MAX_BATCH_ITEMS = 100


class TargetItemIn(BaseModel):
    """The item being valued. Accepts snake_case or the app's camelCase keys."""

    name: str = Field(..., min_length=1)
    condition_bucket: str = Field(
        ..., validation_alias=AliasChoices("condition_bucket", "conditionType", "condition")
    )
    category: str = Category.VIDEO_GAMES.value
    platform_hint: Optional[str] = Field(
        None, validation_alias=AliasChoices("platform_hint", "platform")
    )
    region_hint: Optional[str] = Field(
        None, validation_alias=AliasChoices("region_hint", "region")
    )
    grading_authority: Optional[str] = Field(
        None, validation_alias=AliasChoices("grading_authority", "gradingCompany")
    )
    grade_value: Optional[float] = Field(
        None, allow_inf_nan=False, validation_alias=AliasChoices("grade_value", "grade")
    )
    seal_quality: Optional[str] = Field(
        None, validation_alias=AliasChoices("seal_quality", "sealRating")
    )

    @field_validator("condition_bucket")
    @classmethod
    def check_condition_bucket(cls, value: str) -> str:
        if ConditionBucket.from_string(value) is None:
            raise ValueError("condition_bucket must be one of: sealed, complete (cib), loose")
        return value

    @field_validator("category")
    @classmethod
    def check_category(cls, value: str) -> str:
        if value != Category.VIDEO_GAMES.value:
            raise ValueError(f"unsupported category: {value}")
        return value

    @model_validator(mode="after")
    def check_grading(self) -> "TargetItemIn":
        # TargetItem enforces the grade / authority invariant
        self.to_target()
        return self

    def to_target(self) -> TargetItem:
        """Convert to the engine's TargetItem."""
        return TargetItem(
            name=self.name,
            condition_bucket=ConditionBucket.from_string(self.condition_bucket),
            category=Category(self.category),
            platform_hint=self.platform_hint or None,
            region_hint=self.region_hint or None,
            grading_authority=self.grading_authority or None,
            grade_value=self.grade_value,
            seal_quality=self.seal_quality or None,
        )


class ComparableIn(BaseModel):
    """One observed sale. Malformed dates and non-positive prices are rejected."""

    name: str
    price: float = Field(..., gt=0, allow_inf_nan=False)
    sold_at: date
    source_label: str = ""
    condition_label: Optional[str] = ""
    url: Optional[str] = None

    def to_comparable(self) -> Comparable:
        """Convert to the engine's Comparable."""
        return Comparable(
            name=self.name,
            price=self.price,
            sold_at=self.sold_at,
            source_label=self.source_label,
            condition_label=self.condition_label or "",
            url=self.url,
        )


class ValuationRequest(BaseModel):
    """
    Valuation request.

    Comparables may be supplied directly, as raw provider payloads
    (PriceCharting / eBay responses), or both.
    """

    target: TargetItemIn
    comparables: List[ComparableIn] = Field(default_factory=list)
    pricecharting: Optional[Dict[str, Any]] = None
    ebay: Optional[Union[Dict[str, Any], List[Any]]] = None
    now: Optional[date] = None

    def to_comparables(self) -> List[Comparable]:
        return [c.to_comparable() for c in self.comparables]


class BatchValuationRequest(BaseModel):
    """Several independent valuation requests sharing an optional reference date."""

    items: List[ValuationRequest] = Field(..., min_length=1, max_length=MAX_BATCH_ITEMS)
    now: Optional[date] = None
