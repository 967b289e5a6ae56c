"""
Provider Registry - Market Data Provider Registration

Every provider whose records feed the Valuation Engine is registered
here with its identity and how it reports prices.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from core.ingestion.schema import ProviderKind


@dataclass(frozen=True)
class ProviderRegistration:
    """
    Immutable provider registration record.

    Provider labels are display-only; they never influence scoring.
    """

    provider_id: str
    provider_name: str
    provider_kind: ProviderKind
    url: str

    # Prices arrive as integer cents rather than decimal units
    prices_in_cents: bool = False
    # An adapter exists that normalises this provider's payloads
    has_adapter: bool = False
    active: bool = True

    def __post_init__(self) -> None:
        """Validate registration constraints."""
        if not self.provider_id:
            raise ValueError("provider_id is required")
        if not self.provider_name:
            raise ValueError("provider_name is required")
        if not re.match(r"^[a-z0-9_]+$", self.provider_id):
            raise ValueError(
                f"provider_id must be lowercase alphanumeric with underscores: {self.provider_id}"
            )

    def to_dict(self) -> dict[str, object]:
        return {
            "provider_id": self.provider_id,
            "name": self.provider_name,
            "type": self.provider_kind.value,
            "url": self.url,
            "has_adapter": self.has_adapter,
        }


# =============================================================================
# Provider Registry
# =============================================================================

_PROVIDER_REGISTRY: dict[str, ProviderRegistration] = {}


def register_provider(registration: ProviderRegistration) -> None:
    """
    Register a new market-data provider.

    Raises:
        ValueError: If provider_id is already registered
    """
    if registration.provider_id in _PROVIDER_REGISTRY:
        raise ValueError(f"Provider already registered: {registration.provider_id}")
    _PROVIDER_REGISTRY[registration.provider_id] = registration


def get_provider(provider_id: str) -> Optional[ProviderRegistration]:
    """Get a registered provider by ID, or None."""
    return _PROVIDER_REGISTRY.get(provider_id)


def get_active_providers() -> list[ProviderRegistration]:
    """Get all active registered providers, in registration order."""
    return [p for p in _PROVIDER_REGISTRY.values() if p.active]


# =============================================================================
# Known Providers
# =============================================================================

PRICECHARTING = ProviderRegistration(
    provider_id="pricecharting",
    provider_name="PriceCharting",
    provider_kind=ProviderKind.PRICE_GUIDE,
    url="https://pricecharting.com",
    prices_in_cents=True,
    has_adapter=True,
)

EBAY = ProviderRegistration(
    provider_id="ebay",
    provider_name="eBay",
    provider_kind=ProviderKind.MARKETPLACE,
    url="https://ebay.com",
    has_adapter=True,
)

HERITAGE_AUCTIONS = ProviderRegistration(
    provider_id="heritage",
    provider_name="Heritage Auctions",
    provider_kind=ProviderKind.AUCTION,
    url="https://ha.com",
)

GOLDIN = ProviderRegistration(
    provider_id="goldin",
    provider_name="Goldin",
    provider_kind=ProviderKind.AUCTION,
    url="https://goldin.co",
)

for _registration in (PRICECHARTING, EBAY, HERITAGE_AUCTIONS, GOLDIN):
    register_provider(_registration)
