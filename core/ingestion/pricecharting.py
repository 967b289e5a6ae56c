"""
PriceCharting Adapter

PriceCharting publishes condition-specific guide prices (loose, complete,
new/sealed, graded) in integer cents. Only the price matching the target's
condition is turned into a comparable, so a loose price can never stand
in for a sealed copy.
"""

from __future__ import annotations

import logging
from datetime import date
from types import MappingProxyType
from typing import Any, Final, Mapping, Optional

from core.ingestion.adapter import ProviderAdapter
from core.ingestion.registry import PRICECHARTING, ProviderRegistration
from core.ingestion.schema import cents_to_units, parse_price
from core.valuation_engine.models import Comparable, ConditionBucket, TargetItem


logger = logging.getLogger(__name__)


# Payload field and condition label for each bucket
CONDITION_PRICE_FIELDS: Final[Mapping[ConditionBucket, tuple[str, str]]] = MappingProxyType({
    ConditionBucket.SEALED: ("new-price", "New/Sealed"),
    ConditionBucket.COMPLETE: ("cib-price", "CIB"),
    ConditionBucket.LOOSE: ("loose-price", "Loose"),
})
GRADED_PRICE_FIELD = "graded-price"
GRADED_LABEL = "Graded"

# Product match scoring
EXACT_NAME_SCORE = 100
CONTAINS_NAME_SCORE = 50
CONTAINED_NAME_SCORE = 30
CONSOLE_MATCH_SCORE = 40
HAS_CONDITION_PRICE_SCORE = 20


class PriceChartingAdapter(ProviderAdapter):
    """Normalises PriceCharting `/products` and `/product` responses."""

    @property
    def provider_registration(self) -> ProviderRegistration:
        return PRICECHARTING

    def normalise(
        self,
        payload: Any,
        target: TargetItem,
        now: date,
    ) -> list[Comparable]:
        """
        Turn a PriceCharting response into at most one comparable.

        Accepts a search response ({"products": [...]}) or a single
        product response ({"product": {...}}). Guide prices carry no sale
        date, so the comparable is dated now.
        """
        product = self.select_product(payload, target)
        if product is None:
            self._reject("response", "NO_PRODUCTS", payload if isinstance(payload, dict) else None)
            return []

        record_id = str(product.get("id", product.get("product-name", "unknown")))
        picked = self.condition_price(product, target)
        if picked is None:
            self._reject(record_id, "NO_CONDITION_PRICE", product)
            return []

        field_name, label = picked
        price = self.guide_price(product.get(field_name))
        if price is None:
            self._reject(record_id, "INVALID_PRICE", product)
            return []

        comparable = self.build_comparable(
            record_id=record_id,
            raw_data=product,
            name=self._listing_name(product, label),
            price=price,
            sold_at=now,
            condition_label=label,
        )
        return [comparable] if comparable else []

    def guide_price(self, raw: Any) -> Optional[float]:
        """Decimal price from a payload field, converting from cents when registered so."""
        if self.provider_registration.prices_in_cents:
            return cents_to_units(raw)
        return parse_price(raw)

    def select_product(self, payload: Any, target: TargetItem) -> Optional[dict]:
        """Single product as-is, else the best-matching product of a search."""
        if not isinstance(payload, dict):
            return None
        if isinstance(payload.get("product"), dict):
            return payload["product"]

        products = [p for p in payload.get("products") or [] if isinstance(p, dict)]
        if not products:
            return None
        return find_best_match(products, target)

    @staticmethod
    def condition_price(product: dict, target: TargetItem) -> Optional[tuple[str, str]]:
        """
        Field and label of the price matching the target's condition.

        Graded targets use the graded price when published, else the price
        for their condition bucket.
        """
        if target.is_graded and product.get(GRADED_PRICE_FIELD):
            return GRADED_PRICE_FIELD, GRADED_LABEL

        field_name, label = CONDITION_PRICE_FIELDS[target.condition_bucket]
        if product.get(field_name):
            return field_name, label
        return None

    @staticmethod
    def _listing_name(product: dict, label: str) -> str:
        name = str(product.get("product-name", "")).strip()
        console = str(product.get("console-name", "") or "").strip()
        if not name:
            return ""
        if console:
            return f"{name} {console} ({label})"
        return f"{name} ({label})"


def find_best_match(products: list[dict], target: TargetItem) -> dict:
    """
    Pick the product that best matches the target.

    Scores exact / partial name matches, console match, and whether the
    product publishes the price the target's condition needs. Falls back
    to the first product when nothing scores.
    """
    search = target.name.strip().lower()
    platform = (target.platform_hint or "").strip().lower()
    condition_field, _ = CONDITION_PRICE_FIELDS[target.condition_bucket]

    best_product = products[0]
    best_score = 0
    for product in products:
        product_name = str(product.get("product-name", "")).lower()
        console_name = str(product.get("console-name", "") or "").lower()
        score = 0

        if product_name == search:
            score += EXACT_NAME_SCORE
        elif search and search in product_name:
            score += CONTAINS_NAME_SCORE
        elif product_name and product_name in search:
            score += CONTAINED_NAME_SCORE

        if platform and platform in console_name:
            score += CONSOLE_MATCH_SCORE

        if product.get(condition_field):
            score += HAS_CONDITION_PRICE_SCORE

        if score > best_score:
            best_product, best_score = product, score

    logger.debug(
        "PriceCharting best match for %r: %r (score %d)",
        target.name, best_product.get("product-name"), best_score,
    )
    return best_product
