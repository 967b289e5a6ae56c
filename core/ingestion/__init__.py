"""
Ingestion Layer

Normalises already-fetched market-data provider payloads into the
Comparable records the Valuation Engine consumes. Every provider must
normalise to Comparable; records that cannot be normalised are rejected
and recorded, never passed on.
"""

from core.ingestion.schema import (
    ProviderKind,
    RejectionRecord,
    REJECTION_CODES,
    parse_sold_date,
    parse_price,
    cents_to_units,
)
from core.ingestion.registry import (
    ProviderRegistration,
    PRICECHARTING,
    EBAY,
    get_provider,
    get_active_providers,
    register_provider,
)
from core.ingestion.adapter import ProviderAdapter
from core.ingestion.pricecharting import PriceChartingAdapter, find_best_match
from core.ingestion.ebay import EbayAdapter

__all__ = [
    # Schema
    "ProviderKind",
    "RejectionRecord",
    "REJECTION_CODES",
    "parse_sold_date",
    "parse_price",
    "cents_to_units",
    # Provider registration
    "ProviderRegistration",
    "PRICECHARTING",
    "EBAY",
    "get_provider",
    "get_active_providers",
    "register_provider",
    # Adapters
    "ProviderAdapter",
    "PriceChartingAdapter",
    "EbayAdapter",
    "find_best_match",
]
