"""
Tests for the ingestion layer.

Covers:
- Provider registry
- Parsing helpers and rejection records
- PriceCharting condition-specific prices
- eBay item summaries and per-record rejection
"""

import pytest
from datetime import date
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.ingestion import (
    EbayAdapter,
    PriceChartingAdapter,
    ProviderKind,
    ProviderRegistration,
    RejectionRecord,
    cents_to_units,
    find_best_match,
    get_active_providers,
    get_provider,
    parse_price,
    parse_sold_date,
    register_provider,
)
from core.valuation_engine import ConditionBucket, TargetItem


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def reference_date():
    """Fixed reference date for deterministic tests."""
    return date(2024, 6, 1)


@pytest.fixture
def complete_target():
    return TargetItem(
        name="Super Mario Bros.",
        condition_bucket=ConditionBucket.COMPLETE,
        platform_hint="NES",
    )


@pytest.fixture
def pricecharting_search():
    """PriceCharting /products response, prices in cents."""
    return {
        "status": "success",
        "products": [
            {
                "id": "1001",
                "product-name": "Super Mario Bros. 3",
                "console-name": "NES",
                "loose-price": 2500,
                "cib-price": 6500,
            },
            {
                "id": "6910",
                "product-name": "Super Mario Bros.",
                "console-name": "NES",
                "loose-price": 1500,
                "cib-price": 4200,
                "new-price": 250000,
                "graded-price": 500000,
            },
        ],
    }


@pytest.fixture
def ebay_response():
    """eBay Browse API item_summary/search response."""
    return {
        "total": 5,
        "itemSummaries": [
            {
                "itemId": "v1|100|0",
                "title": "Super Mario Bros NES CIB Complete",
                "price": {"value": "45.00", "currency": "USD"},
                "condition": "Very Good",
                "itemWebUrl": "https://www.ebay.com/itm/100",
                "itemEndDate": "2024-05-20T10:00:00.000Z",
            },
            {
                "itemId": "v1|101|0",
                "title": "",
                "price": {"value": "40.00", "currency": "USD"},
            },
            {
                "itemId": "v1|102|0",
                "title": "Super Mario Bros NES",
                "price": {"value": "-3", "currency": "USD"},
            },
            {
                "itemId": "v1|103|0",
                "title": "Super Mario Bros NES",
                "price": {"value": "39.99", "currency": "USD"},
                "itemEndDate": "last tuesday",
            },
            {
                "itemId": "v1|104|0",
                "title": "Super Mario Bros NES",
            },
        ],
    }


# =============================================================================
# Test: Provider Registry
# =============================================================================

class TestProviderRegistry:
    def test_known_providers_registered(self):
        ids = [p.provider_id for p in get_active_providers()]

        assert ids[:2] == ["pricecharting", "ebay"]
        assert "heritage" in ids
        assert "goldin" in ids

    def test_pricecharting_reports_cents(self):
        provider = get_provider("pricecharting")

        assert provider.prices_in_cents
        assert provider.has_adapter
        assert provider.provider_kind == ProviderKind.PRICE_GUIDE

    def test_unknown_provider(self):
        assert get_provider("nope") is None

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError):
            register_provider(get_provider("ebay"))

    def test_invalid_provider_id_rejected(self):
        with pytest.raises(ValueError):
            ProviderRegistration(
                provider_id="Bad-ID",
                provider_name="Bad",
                provider_kind=ProviderKind.AUCTION,
                url="https://example.com",
            )

    def test_to_dict(self):
        data = get_provider("ebay").to_dict()

        assert data == {
            "provider_id": "ebay",
            "name": "eBay",
            "type": "Marketplace",
            "url": "https://ebay.com",
            "has_adapter": True,
        }


# =============================================================================
# Test: Parsing Helpers
# =============================================================================

class TestParsing:
    @pytest.mark.parametrize("raw,expected", [
        ("2024-05-01", date(2024, 5, 1)),
        ("2024-05-01T12:30:00.000Z", date(2024, 5, 1)),
        (date(2024, 5, 1), date(2024, 5, 1)),
        ("", None),
        ("May 1st", None),
        (None, None),
        (20240501, None),
    ])
    def test_parse_sold_date(self, raw, expected):
        assert parse_sold_date(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("41.50", 41.5),
        (12, 12.0),
        ("abc", None),
        (0, None),
        (-1, None),
        (True, None),
        (None, None),
        ("inf", None),
    ])
    def test_parse_price(self, raw, expected):
        assert parse_price(raw) == expected

    def test_cents_to_units(self):
        assert cents_to_units(4199) == 41.99
        assert cents_to_units(0) is None

    def test_rejection_record(self):
        record = RejectionRecord.create("ebay", "v1|1|0", "INVALID_PRICE", {"price": "-3"})

        assert record.rejection_reason == "Price is not a positive finite number"
        assert len(record.raw_data_hash) == 16
        assert record.to_dict()["record_id"] == "v1|1|0"

    def test_rejection_record_without_data(self):
        record = RejectionRecord.create("ebay", "x", "SOMETHING_ELSE")

        assert record.raw_data_hash == "no_data"
        assert record.rejection_reason == "Unknown code: SOMETHING_ELSE"


# =============================================================================
# Test: PriceCharting
# =============================================================================

class TestPriceChartingAdapter:
    """Only the price matching the target's condition is used."""

    def test_complete_price_selected(self, pricecharting_search, complete_target, reference_date):
        comps = PriceChartingAdapter().normalise(
            pricecharting_search, complete_target, reference_date
        )

        assert len(comps) == 1
        comp = comps[0]
        assert comp.price == 42.0
        assert comp.name == "Super Mario Bros. NES (CIB)"
        assert comp.condition_label == "CIB"
        assert comp.source_label == "PriceCharting"
        assert comp.sold_at == reference_date

    def test_sealed_price_selected(self, pricecharting_search, reference_date):
        target = TargetItem("Super Mario Bros.", ConditionBucket.SEALED, platform_hint="NES")

        comps = PriceChartingAdapter().normalise(pricecharting_search, target, reference_date)

        assert comps[0].price == 2500.0
        assert comps[0].condition_label == "New/Sealed"

    def test_graded_target_uses_graded_price(self, pricecharting_search, reference_date):
        target = TargetItem(
            "Super Mario Bros.",
            ConditionBucket.SEALED,
            platform_hint="NES",
            grading_authority="WATA",
            grade_value=9.4,
        )

        comps = PriceChartingAdapter().normalise(pricecharting_search, target, reference_date)

        assert comps[0].price == 5000.0
        assert comps[0].condition_label == "Graded"

    def test_graded_target_falls_back_to_bucket_price(self, reference_date):
        target = TargetItem(
            "Zelda",
            ConditionBucket.LOOSE,
            grading_authority="VGA",
            grade_value=85,
        )
        payload = {"product": {"id": "7", "product-name": "Zelda", "loose-price": 3000}}

        comps = PriceChartingAdapter().normalise(payload, target, reference_date)

        assert comps[0].price == 30.0
        assert comps[0].condition_label == "Loose"

    def test_missing_condition_price_rejected(self, reference_date):
        target = TargetItem("Zelda", ConditionBucket.SEALED)
        payload = {"product": {"id": "7", "product-name": "Zelda", "loose-price": 3000}}
        adapter = PriceChartingAdapter()

        comps = adapter.normalise(payload, target, reference_date)

        assert comps == []
        assert [r.rejection_code for r in adapter.rejections] == ["NO_CONDITION_PRICE"]

    @pytest.mark.parametrize("payload", [{"products": []}, {"status": "error"}, None, []])
    def test_no_products_rejected(self, complete_target, reference_date, payload):
        adapter = PriceChartingAdapter()

        assert adapter.normalise(payload, complete_target, reference_date) == []
        assert adapter.rejections[0].rejection_code == "NO_PRODUCTS"

    def test_unparsable_price_rejected(self, complete_target, reference_date):
        payload = {"product": {"id": "9", "product-name": "Mario", "cib-price": "n/a"}}
        adapter = PriceChartingAdapter()

        assert adapter.normalise(payload, complete_target, reference_date) == []
        assert adapter.get_quality_metrics()["rejections_by_code"] == {"INVALID_PRICE": 1}

    def test_best_match_prefers_exact_name(self, pricecharting_search, complete_target):
        best = find_best_match(pricecharting_search["products"], complete_target)

        assert best["id"] == "6910"

    def test_best_match_falls_back_to_first(self):
        target = TargetItem("Zelda", ConditionBucket.SEALED)
        products = [{"product-name": "Tetris"}, {"product-name": "Metroid"}]

        assert find_best_match(products, target)["product-name"] == "Tetris"

    def test_registration_in_units_skips_cent_conversion(self, complete_target, reference_date):
        """A feed registered with decimal prices is used as published."""

        class UnitPricedAdapter(PriceChartingAdapter):
            @property
            def provider_registration(self):
                return ProviderRegistration(
                    provider_id="pricecharting_units",
                    provider_name="PriceCharting",
                    provider_kind=ProviderKind.PRICE_GUIDE,
                    url="https://www.pricecharting.com",
                    prices_in_cents=False,
                    has_adapter=True,
                )

        payload = {"product": {"id": "6910", "product-name": "Super Mario Bros.", "cib-price": 42.5}}

        comps = UnitPricedAdapter().normalise(payload, complete_target, reference_date)

        assert [c.price for c in comps] == [42.5]

    def test_cents_registration_converts(self, complete_target, reference_date):
        payload = {"product": {"id": "6910", "product-name": "Super Mario Bros.", "cib-price": 4250}}

        comps = PriceChartingAdapter().normalise(payload, complete_target, reference_date)

        assert PriceChartingAdapter().provider_registration.prices_in_cents
        assert [c.price for c in comps] == [42.5]


# =============================================================================
# Test: eBay
# =============================================================================

class TestEbayAdapter:
    """Valid items become comparables, invalid ones are rejected individually."""

    def test_valid_item_normalised(self, ebay_response, complete_target, reference_date):
        comps = EbayAdapter().normalise(ebay_response, complete_target, reference_date)

        assert len(comps) == 1
        comp = comps[0]
        assert comp.name == "Super Mario Bros NES CIB Complete"
        assert comp.price == 45.0
        assert comp.sold_at == date(2024, 5, 20)
        assert comp.condition_label == "Very Good"
        assert comp.source_label == "eBay"
        assert comp.url == "https://www.ebay.com/itm/100"

    def test_invalid_items_rejected(self, ebay_response, complete_target, reference_date):
        adapter = EbayAdapter()
        adapter.normalise(ebay_response, complete_target, reference_date)

        codes = {r.record_id: r.rejection_code for r in adapter.rejections}
        assert codes == {
            "v1|101|0": "MISSING_NAME",
            "v1|102|0": "INVALID_PRICE",
            "v1|103|0": "INVALID_SOLD_DATE",
            "v1|104|0": "MISSING_PRICE",
        }

    def test_quality_metrics(self, ebay_response, complete_target, reference_date):
        adapter = EbayAdapter()
        adapter.normalise(ebay_response, complete_target, reference_date)

        metrics = adapter.get_quality_metrics()

        assert metrics["provider_id"] == "ebay"
        assert metrics["total_rejected"] == 4

    def test_bare_list_without_end_date(self, complete_target, reference_date):
        items = [{"title": "Super Mario Bros NES", "price": {"value": "30"}}, "junk"]

        comps = EbayAdapter().normalise(items, complete_target, reference_date)

        assert len(comps) == 1
        assert comps[0].sold_at == reference_date

    def test_clear_rejections(self, ebay_response, complete_target, reference_date):
        adapter = EbayAdapter()
        adapter.normalise(ebay_response, complete_target, reference_date)
        adapter.clear_rejections()

        assert adapter.rejections == []

    def test_unexpected_payload_yields_nothing(self, complete_target, reference_date):
        assert EbayAdapter().normalise("oops", complete_target, reference_date) == []
