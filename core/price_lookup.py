"""
Price Lookup - Multi-Provider Valuation

Merges comparables normalised from several providers' payloads, runs the
Valuation Engine and reports which providers contributed. Payloads are
fetched by the caller; this module performs no network I/O.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Sequence

from .ingestion import EbayAdapter, PriceChartingAdapter, RejectionRecord
from .valuation_engine import (
    Comparable,
    EmptyReason,
    TargetItem,
    ValuationEngine,
    ValuationPolicy,
    ValuationResult,
)
from .valuation_engine.valuation import create_empty_result


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

# Comparables returned to callers as display evidence
MAX_EVIDENCE_COMPARABLES = 10

SOURCE_PRICECHARTING = "pricecharting"
SOURCE_EBAY = "ebay"
SOURCE_COMBINED = "combined"
SOURCE_MANUAL = "manual"
SOURCE_NONE = "none"

NO_PRICING_DATA_NOTE = "No pricing data found for this game"


@dataclass
class PriceLookupResult:
    """
    Valuation enriched with its evidence and provenance.

    Contains the full ValuationResult from the engine plus the
    comparables and providers it was built from.
    """
    valuation: ValuationResult
    comparables: List[Comparable]
    source: str
    last_updated: datetime
    rejections: List[RejectionRecord] = field(default_factory=list)

    @property
    def point_estimate(self) -> int:
        return self.valuation.point_estimate

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        data = self.valuation.to_dict()
        data.update({
            "comparables": [c.to_dict() for c in self.comparables],
            "source": self.source,
            "last_updated": self.last_updated.isoformat(),
            "rejections": [r.to_dict() for r in self.rejections],
        })
        return data


class PriceLookupService:
    """
    Values a target from PriceCharting, eBay and caller-supplied comparables.

    Provider payloads are optional; any combination may be given.
    """

    def __init__(
        self,
        reference_date: Optional[date] = None,
        policy: Optional[ValuationPolicy] = None,
    ):
        """
        Initialize the lookup service.

        Args:
            reference_date: Fixed "now" (default: today, per call)
            policy: Valuation policy knobs
        """
        self._reference_date = reference_date
        self._engine = ValuationEngine(reference_date=reference_date, policy=policy)

    @property
    def engine(self) -> ValuationEngine:
        return self._engine

    def lookup(
        self,
        target: TargetItem,
        pricecharting: Any = None,
        ebay: Any = None,
        comparables: Sequence[Comparable] = (),
        now: Optional[date] = None,
    ) -> PriceLookupResult:
        """
        Value a target from provider payloads and explicit comparables.

        Args:
            target: The item being valued
            pricecharting: Decoded PriceCharting response, if fetched
            ebay: Decoded eBay Browse response, if fetched
            comparables: Comparables already normalised by the caller
            now: Reference date

        Returns:
            PriceLookupResult; when nothing usable was supplied, an empty
            valuation saying no pricing data was found
        """
        now = now or self._reference_date or date.today()
        collected: List[Comparable] = []
        rejections: List[RejectionRecord] = []
        contributors: List[str] = []

        if pricecharting is not None:
            adapter = PriceChartingAdapter()
            found = adapter.normalise(pricecharting, target, now)
            rejections.extend(adapter.rejections)
            if found:
                collected.extend(found)
                contributors.append(SOURCE_PRICECHARTING)

        if ebay is not None:
            adapter = EbayAdapter()
            found = adapter.normalise(ebay, target, now)
            rejections.extend(adapter.rejections)
            if found:
                collected.extend(found)
                contributors.append(SOURCE_EBAY)

        manual = list(comparables)
        collected.extend(manual)

        source = resolve_source(contributors, bool(manual))
        logger.info(
            "Price lookup for %r: %d comparables from %s, %d rejected",
            target.name, len(collected), source, len(rejections),
        )

        if not collected:
            valuation = create_empty_result(EmptyReason.NO_DATA, NO_PRICING_DATA_NOTE)
        else:
            valuation = self._engine.valuate(target, collected, now=now)

        return PriceLookupResult(
            valuation=valuation,
            comparables=collected[:MAX_EVIDENCE_COMPARABLES],
            source=source,
            last_updated=datetime.now(timezone.utc),
            rejections=rejections,
        )


def resolve_source(contributors: List[str], has_manual: bool) -> str:
    """Name the provenance of a lookup's comparables."""
    if len(contributors) > 1:
        return SOURCE_COMBINED
    if contributors:
        return SOURCE_COMBINED if has_manual else contributors[0]
    if has_manual:
        return SOURCE_MANUAL
    return SOURCE_NONE
