"""
Provider Adapter Interface - Abstract Base for Market Data Providers

All providers must implement this interface to feed the Valuation Engine.
Adapters normalise already-fetched provider payloads into Comparable
records and track the records they reject. They never perform network I/O.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional

from core.ingestion.registry import ProviderRegistration
from core.ingestion.schema import RejectionRecord, parse_price, parse_sold_date
from core.valuation_engine.models import Comparable, TargetItem


logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """
    Abstract interface for market-data provider integrations.

    Adapters are responsible for:
    1. Reading the provider's response shape
    2. Converting prices to decimal currency units
    3. Mapping provider condition labels to free-text condition labels
    4. Rejecting records that cannot be normalised (never passing them on)

    Subclasses must implement:
    - provider_registration: property returning ProviderRegistration
    - normalise: payload -> list of Comparable
    """

    def __init__(self) -> None:
        """Initialise adapter with rejection tracking."""
        self._rejections: list[RejectionRecord] = []

    @property
    @abstractmethod
    def provider_registration(self) -> ProviderRegistration:
        """Return the provider's registration record."""
        ...

    @abstractmethod
    def normalise(
        self,
        payload: Any,
        target: TargetItem,
        now: date,
    ) -> list[Comparable]:
        """
        Normalise a provider payload into comparables.

        Args:
            payload: Decoded JSON response from the provider
            target: The item being valued (selects condition-specific prices)
            now: Reference date, used when the provider reports no sale date

        Returns:
            Comparables that passed normalisation
        """
        ...

    @property
    def provider_name(self) -> str:
        return self.provider_registration.provider_name

    # =========================================================================
    # Record Construction
    # =========================================================================

    def build_comparable(
        self,
        record_id: str,
        raw_data: dict[str, Any],
        name: Any,
        price: Any,
        sold_at: Any,
        condition_label: str = "",
        url: Optional[str] = None,
    ) -> Optional[Comparable]:
        """
        Validate raw fields and create a Comparable if valid.

        Returns:
            Comparable if valid, None if rejected (rejection recorded)
        """
        if not isinstance(name, str) or not name.strip():
            self._reject(record_id, "MISSING_NAME", raw_data)
            return None

        if price is None or price == "":
            self._reject(record_id, "MISSING_PRICE", raw_data)
            return None
        parsed_price = parse_price(price)
        if parsed_price is None:
            self._reject(record_id, "INVALID_PRICE", raw_data)
            return None

        parsed_date = parse_sold_date(sold_at)
        if parsed_date is None:
            self._reject(record_id, "INVALID_SOLD_DATE", raw_data)
            return None

        return Comparable(
            name=name.strip(),
            price=parsed_price,
            sold_at=parsed_date,
            source_label=self.provider_name,
            condition_label=condition_label or "",
            url=url,
        )

    # =========================================================================
    # Rejection Handling
    # =========================================================================

    @property
    def rejections(self) -> list[RejectionRecord]:
        """Get all rejection records from this adapter session."""
        return self._rejections.copy()

    def clear_rejections(self) -> None:
        """Clear rejection records (e.g., after processing)."""
        self._rejections.clear()

    def _reject(
        self,
        record_id: str,
        rejection_code: str,
        raw_data: Optional[dict] = None,
    ) -> None:
        """Record a rejection."""
        record = RejectionRecord.create(
            provider_id=self.provider_registration.provider_id,
            record_id=record_id,
            rejection_code=rejection_code,
            raw_data=raw_data,
        )
        self._rejections.append(record)
        logger.warning(
            "Rejected record %s from %s: %s",
            record_id,
            self.provider_registration.provider_id,
            rejection_code,
        )

    # =========================================================================
    # Quality Metrics
    # =========================================================================

    def get_quality_metrics(self) -> dict[str, Any]:
        """
        Get quality metrics for this adapter session.

        Returns dict with:
        - provider_id: Provider identifier
        - total_rejected: Failed normalisation
        - rejections_by_code: Breakdown by rejection code
        """
        rejections_by_code: dict[str, int] = {}
        for r in self._rejections:
            rejections_by_code[r.rejection_code] = (
                rejections_by_code.get(r.rejection_code, 0) + 1
            )

        return {
            "provider_id": self.provider_registration.provider_id,
            "total_rejected": len(self._rejections),
            "rejections_by_code": rejections_by_code,
        }
