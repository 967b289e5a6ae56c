"""
Collectibles Valuation - Core Business Logic

This module provides the valuation pipeline:
1. Ingestion (provider payloads -> Comparable)
2. Condition isolation (sealed / complete / loose)
3. Similarity and recency weighting
4. Outlier rejection and aggregation
5. Grade adjustment and confidence
6. Price lookup (multi-provider valuation with provenance)
"""

# Valuation Engine v1.0
from .valuation_engine import (
    Category,
    ConditionBucket,
    ConfidenceTier,
    EmptyReason,
    TargetItem,
    Comparable,
    ScoredComparable,
    PriceAdjustment,
    PriceRange,
    RollingAverages,
    ValuationResult,
    ValuationEngine,
    ValuationPolicy,
    calculate_valuation,
)

# Ingestion Layer
from .ingestion import (
    ProviderAdapter,
    PriceChartingAdapter,
    EbayAdapter,
    RejectionRecord,
    REJECTION_CODES,
    ProviderRegistration,
    get_provider,
    get_active_providers,
)

# Price Lookup - Multi-Provider Valuation
from .price_lookup import PriceLookupService, PriceLookupResult

__all__ = [
    # Valuation Engine
    "Category",
    "ConditionBucket",
    "ConfidenceTier",
    "EmptyReason",
    "TargetItem",
    "Comparable",
    "ScoredComparable",
    "PriceAdjustment",
    "PriceRange",
    "RollingAverages",
    "ValuationResult",
    "ValuationEngine",
    "ValuationPolicy",
    "calculate_valuation",
    # Ingestion Layer
    "ProviderAdapter",
    "PriceChartingAdapter",
    "EbayAdapter",
    "RejectionRecord",
    "REJECTION_CODES",
    "ProviderRegistration",
    "get_provider",
    "get_active_providers",
    # Price Lookup
    "PriceLookupService",
    "PriceLookupResult",
]
