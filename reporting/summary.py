"""
Plain-text valuation summaries for the command line.
"""

from typing import List

from core.price_lookup import PriceLookupResult
from core.valuation_engine import TargetItem
from core.valuation_engine.models import format_grade
from utils.formatting import format_currency, format_multiplier, format_percent


def describe_target(target: TargetItem) -> str:
    """One-line description, e.g. 'Super Mario Bros. [NES, NTSC] COMPLETE, WATA 9.4'."""
    hints = [h for h in (target.platform_hint, target.region_hint) if h]
    text = target.name
    if hints:
        text += f" [{', '.join(hints)}]"
    text += f" {target.condition_bucket.label}"
    if target.is_graded:
        text += f", {target.grading_authority} {format_grade(target.grade_value)}"
    return text


def format_summary(target: TargetItem, result: PriceLookupResult, currency: str = "USD") -> str:
    """
    Render a lookup result as a short text report.

    Args:
        target: The item that was valued
        result: Lookup result from PriceLookupService
        currency: Currency code for amounts

    Returns:
        Multi-line summary
    """
    valuation = result.valuation
    lines: List[str] = [describe_target(target)]

    if valuation.is_empty:
        lines.append(f"  No estimate: {valuation.methodology_note}")
    else:
        lines.append(f"  Estimate:    {format_currency(valuation.point_estimate, currency)}")
        price_range = valuation.price_range
        if price_range:
            lines.append(
                "  Range:       "
                f"{format_currency(price_range.low, currency)} / "
                f"{format_currency(price_range.median, currency)} / "
                f"{format_currency(price_range.high, currency)}"
            )
        lines.append(
            f"  Confidence:  {valuation.confidence_tier.value} "
            f"({valuation.confidence_score}/100)"
        )

        rolling = valuation.rolling_averages
        lines.append(
            "  Rolling:     "
            f"30d {format_currency(rolling.days_30, currency, 2)}, "
            f"90d {format_currency(rolling.days_90, currency, 2)}, "
            f"180d {format_currency(rolling.days_180, currency, 2)}"
        )

        for adjustment in valuation.adjustments:
            lines.append(
                f"  Adjustment:  {adjustment.kind} {format_multiplier(adjustment.multiplier)} "
                f"({format_percent((adjustment.multiplier - 1) * 100)}) - {adjustment.rationale}"
            )
        lines.append(f"  Method:      {valuation.methodology_note}")

    lines.append(f"  Source:      {result.source}")
    if result.rejections:
        lines.append(f"  Rejected:    {len(result.rejections)} provider records")
    return "\n".join(lines)
