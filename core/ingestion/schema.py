"""
Ingestion Schema - Shared Types for Provider Normalisation

Defines provider classification, rejection records and the parsing
helpers every provider adapter uses to turn raw payload fields into
Comparable values.
"""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Final, Optional


class ProviderKind(Enum):
    """How a market-data provider arrives at its prices."""

    PRICE_GUIDE = "Price Guide"
    MARKETPLACE = "Marketplace"
    AUCTION = "Auction"


# =============================================================================
# Rejection Handling
# =============================================================================


REJECTION_CODES: Final[dict[str, str]] = {
    "MISSING_NAME": "Required field 'name' / 'title' not provided",
    "MISSING_PRICE": "Required price field not provided",
    "INVALID_PRICE": "Price is not a positive finite number",
    "INVALID_SOLD_DATE": "Sale date could not be parsed",
    "NO_CONDITION_PRICE": "No price for the target's condition",
    "NO_PRODUCTS": "Response contained no products",
}


@dataclass(frozen=True)
class RejectionRecord:
    """
    Record of a provider record that failed normalisation.

    Used for audit trail and data quality monitoring.
    """

    provider_id: str
    record_id: str
    rejection_code: str
    rejection_reason: str
    raw_data_hash: str
    rejected_at: datetime

    @classmethod
    def create(
        cls,
        provider_id: str,
        record_id: str,
        rejection_code: str,
        raw_data: Optional[dict] = None,
    ) -> "RejectionRecord":
        """Create a rejection record with automatic hash and timestamp."""
        reason = REJECTION_CODES.get(rejection_code, f"Unknown code: {rejection_code}")

        if raw_data:
            data_str = str(sorted(raw_data.items(), key=lambda item: str(item[0])))
            raw_hash = hashlib.sha256(data_str.encode()).hexdigest()[:16]
        else:
            raw_hash = "no_data"

        return cls(
            provider_id=provider_id,
            record_id=record_id,
            rejection_code=rejection_code,
            rejection_reason=reason,
            raw_data_hash=raw_hash,
            rejected_at=datetime.now(timezone.utc),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "provider_id": self.provider_id,
            "record_id": self.record_id,
            "rejection_code": self.rejection_code,
            "rejection_reason": self.rejection_reason,
        }


# =============================================================================
# Parsing Helpers
# =============================================================================


def parse_sold_date(raw: Any) -> Optional[date]:
    """
    Parse a provider sale date.

    Accepts date objects, ISO dates ("2024-05-01") and ISO timestamps
    ("2024-05-01T12:30:00.000Z").

    Returns:
        The calendar date, or None when unparsable
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None

    text = raw.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def parse_price(raw: Any) -> Optional[float]:
    """
    Parse a decimal price from a number or numeric string.

    Returns:
        A positive finite float, or None
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def cents_to_units(raw: Any) -> Optional[float]:
    """Convert an integer cent amount to decimal currency units."""
    value = parse_price(raw)
    if value is None:
        return None
    return round(value / 100, 2)
