"""
Tests for the catalog filter/sort engine and the catalog stores.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from state.catalog import (
    FabricCatalog,
    FabricFilters,
    FabricSort,
    TailorCatalog,
    TailorFilters,
    TailorSort,
    filter_fabrics,
    filter_tailors,
    parse_price_range,
)
from utils.errors import ApiError, ValidationError


class TestParsePriceRange:

    def test_closed_range(self):
        assert parse_price_range("1000-2500") == (Decimal("1000"), Decimal("2500"))

    def test_open_ended(self):
        assert parse_price_range("5000") == (Decimal("5000"), None)
        assert parse_price_range("5000-") == (Decimal("5000"), None)

    def test_zero_maximum_is_open_ended(self):
        assert parse_price_range("5000-0") == (Decimal("5000"), None)

    @pytest.mark.parametrize("value", [
        "abc", "10-x", "2500-1000", "-", "NaN", "NaN-100", "100-NaN", "sNaN", "Infinity",
    ])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_price_range(value)


class TestFabricFilters:

    def test_price_range_is_inclusive(self, fabrics):
        result = filter_fabrics(fabrics, FabricFilters(price_range="1000-2500"))
        assert [f.price for f in result] == [Decimal("1500")]

        result = filter_fabrics(fabrics, FabricFilters(price_range="500-1500"))
        assert {f.id for f in result} == {"f1", "f2"}

    def test_filters_are_conjunctive(self, fabrics):
        spec = FabricFilters(city="mumbai", color="navy")
        result = filter_fabrics(fabrics, spec)

        assert [f.id for f in result] == ["f1"]
        assert all(spec.matches(f) for f in result)

    def test_category_is_exact_color_is_substring(self, fabrics):
        assert filter_fabrics(fabrics, FabricFilters(category="Sil")) == []
        assert [f.id for f in filter_fabrics(fabrics, FabricFilters(color="grey"))] == ["f3"]

    def test_sorts(self, fabrics):
        low = filter_fabrics(fabrics, FabricFilters(sort_by=FabricSort.PRICE_LOW))
        high = filter_fabrics(fabrics, FabricFilters(sort_by="price-high"))
        stock = filter_fabrics(fabrics, FabricFilters(sort_by=FabricSort.STOCK))

        assert [f.id for f in low] == ["f1", "f2", "f3"]
        assert [f.id for f in high] == ["f3", "f2", "f1"]
        assert [f.id for f in stock] == ["f1", "f2", "f3"]

    @pytest.mark.parametrize("sort_by", list(FabricSort))
    def test_sort_is_idempotent(self, fabrics, sort_by):
        spec = FabricFilters(sort_by=sort_by)
        once = filter_fabrics(fabrics, spec)
        assert filter_fabrics(once, spec) == once

    def test_invalid_range_rejected_at_construction(self):
        with pytest.raises(ValidationError):
            FabricFilters(price_range="3000-100")

    def test_nan_range_rejected_at_construction(self):
        with pytest.raises(ValidationError):
            FabricFilters(price_range="NaN")

    def test_zero_maximum_keeps_everything_above_minimum(self, fabrics):
        result = filter_fabrics(fabrics, FabricFilters(price_range="1000-0"))
        assert {f.id for f in result} == {"f2", "f3"}


class TestTailorFilters:

    def test_specialization_matches_any_skill(self, tailors):
        result = filter_tailors(tailors, TailorFilters(specialization="suits"))
        assert {t.id for t in result} == {"t1", "t2"}

    def test_thresholds(self, tailors):
        result = filter_tailors(tailors, TailorFilters(experience="5", rating="4.5"))
        assert [t.id for t in result] == ["t1"]

    def test_sort_by_experience(self, tailors):
        result = filter_tailors(tailors, TailorFilters(sort_by=TailorSort.EXPERIENCE))
        assert [t.experience for t in result] == [12, 6, 2]

    def test_invalid_threshold(self):
        with pytest.raises(ValidationError):
            TailorFilters(rating="high")

    @pytest.mark.parametrize("rating", ["nan", "inf", "-inf"])
    def test_non_finite_rating_rejected(self, rating):
        with pytest.raises(ValidationError):
            TailorFilters(rating=rating)

    @pytest.mark.parametrize("sort_by", list(TailorSort))
    def test_sort_is_idempotent(self, tailors, sort_by):
        spec = TailorFilters(sort_by=sort_by)
        once = filter_tailors(tailors, spec)
        assert filter_tailors(once, spec) == once


class TestCatalogStore:
    """``filtered`` is always derived from ``all`` and ``filters``."""

    def test_clear_filters_restores_full_list(self, fabrics):
        catalog = FabricCatalog(MagicMock())
        catalog.set_items(fabrics)

        assert catalog.set_filters(price_range="1000-2500")
        assert len(catalog.filtered) == 1

        catalog.clear_filters()
        assert catalog.filtered == FabricSort.NAME.apply(fabrics)
        assert catalog.active_filters == {}

    def test_invalid_filter_keeps_previous_spec(self, fabrics):
        catalog = FabricCatalog(MagicMock())
        catalog.set_items(fabrics)
        catalog.set_filters(category="Silk")

        assert catalog.set_filters(price_range="nope") is False
        assert catalog.filters.category == "Silk"
        assert catalog.filters.price_range == ""
        assert catalog.error

    def test_view_tracks_new_items(self, fabrics):
        catalog = FabricCatalog(MagicMock())
        catalog.set_filters(city="Mumbai")
        catalog.set_items(fabrics[:1])
        assert len(catalog.filtered) == 1

        catalog.set_items(fabrics)
        assert {f.id for f in catalog.filtered} == {"f1", "f3"}

    def test_load_parses_payload(self):
        client = MagicMock()
        client.get_tailors.return_value = [
            {"_id": "t9", "name": "Zed", "city": "Goa", "specialization": "Blazers", "experience": 3, "rating": 4},
        ]
        catalog = TailorCatalog(client)

        assert catalog.load() is True
        assert catalog.all[0].specialization == ["Blazers"]
        assert catalog.loading is False

    def test_load_failure_keeps_items(self, tailors):
        client = MagicMock()
        client.get_tailors.side_effect = ApiError("Backend not connected")
        catalog = TailorCatalog(client)
        catalog.set_items(tailors)

        assert catalog.load() is False
        assert catalog.all == tailors
        assert catalog.error == "Backend not connected"

    def test_options(self, tailors):
        catalog = TailorCatalog(MagicMock())
        catalog.set_items(tailors)
        assert catalog.options("city") == ["Delhi", "Mumbai", "Pune"]
        assert "Wedding Suits" in catalog.options("specialization")

    def test_load_malformed_payload_sets_error(self, fabrics):
        client = MagicMock()
        client.get_fabrics.return_value = [{"_id": "f9", "name": "Odd", "price": 100, "stock": "lots"}]
        catalog = FabricCatalog(client)
        catalog.set_items(fabrics)

        assert catalog.load() is False
        assert catalog.all == fabrics
        assert catalog.error == "Unexpected fabrics data from server"
        assert catalog.loading is False

    def test_load_walks_every_page(self):
        pages = {
            1: [{"_id": f"f{i}", "name": f"Fabric {i}", "price": 100} for i in range(20)],
            2: [{"_id": "f20", "name": "Fabric 20", "price": 100}],
        }
        client = MagicMock()
        client.get_fabrics.side_effect = lambda params: pages.get(params["page"], [])
        catalog = FabricCatalog(client)

        assert catalog.load({"category": "Wool"}) is True
        assert len(catalog.all) == 21
        first = client.get_fabrics.call_args_list[0].args[0]
        assert first["category"] == "Wool"
        assert first["page"] == 1
