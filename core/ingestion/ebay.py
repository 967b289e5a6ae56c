"""
eBay Adapter

Maps eBay Browse API item summaries to comparables. Titles are seller
free text, and the item condition ("New", "Very Good", "Acceptable")
becomes the comparable's condition label.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from core.ingestion.adapter import ProviderAdapter
from core.ingestion.registry import EBAY, ProviderRegistration
from core.valuation_engine.models import Comparable, TargetItem


class EbayAdapter(ProviderAdapter):
    """Normalises eBay Browse API `item_summary/search` responses."""

    @property
    def provider_registration(self) -> ProviderRegistration:
        return EBAY

    def normalise(
        self,
        payload: Any,
        target: TargetItem,
        now: date,
    ) -> list[Comparable]:
        """
        Turn item summaries into comparables.

        Accepts the full response ({"itemSummaries": [...]}) or the bare
        list of summaries. Items without an end date are treated as sold now.
        """
        if isinstance(payload, dict):
            items = payload.get("itemSummaries") or []
        elif isinstance(payload, list):
            items = payload
        else:
            items = []

        comparables = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                continue
            record_id = str(item.get("itemId") or f"item-{index}")

            price = item.get("price")
            price_value = price.get("value") if isinstance(price, dict) else price

            comparable = self.build_comparable(
                record_id=record_id,
                raw_data=item,
                name=item.get("title"),
                price=price_value,
                sold_at=item.get("itemEndDate") or now,
                condition_label=str(item.get("condition") or ""),
                url=item.get("itemWebUrl"),
            )
            if comparable:
                comparables.append(comparable)

        return comparables
