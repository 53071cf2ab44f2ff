from decimal import Decimal

import pytest

from taqueria.menu.pricing import (
    compute_price,
    format_money,
    legacy_marker_price,
    rescale_total,
    unit_price,
)
from taqueria.schemas import Ingredient


class TestComputePrice:
    def test_default_and_extra_selected(self, ingredient_catalog):
        total = compute_price(Decimal("10.00"), {"a", "b"}, ingredient_catalog, 2)
        assert total == Decimal("25.00")

    def test_deselecting_default_is_free(self, ingredient_catalog):
        total = compute_price(Decimal("10.00"), {"b"}, ingredient_catalog, 2)
        assert total == Decimal("25.00")

    def test_deselecting_extra_removes_its_price(self, ingredient_catalog):
        total = compute_price(Decimal("10.00"), set(), ingredient_catalog, 2)
        assert total == Decimal("20.00")

    def test_unknown_ids_are_ignored(self, ingredient_catalog):
        total = compute_price("10.00", {"b", "zzz"}, ingredient_catalog, 1)
        assert total == Decimal("12.50")

    def test_default_with_price_is_still_free(self):
        catalog = [Ingredient(id="x", name="Salsa", is_default=True, price=Decimal("3.00"))]
        assert compute_price("5.00", {"x"}, catalog, 1) == Decimal("5.00")

    def test_monotonic_in_extras(self):
        catalog = [
            Ingredient(id=str(i), name=f"Extra {i}", price=Decimal("0.75"))
            for i in range(4)
        ]
        totals = [
            compute_price("8.00", {str(i) for i in range(n)}, catalog, 1)
            for n in range(5)
        ]
        assert totals == sorted(totals)

    def test_quantity_must_be_positive(self, ingredient_catalog):
        with pytest.raises(ValueError):
            compute_price("10.00", set(), ingredient_catalog, 0)

    def test_legacy_and_structured_extras_sum(self, ingredient_catalog):
        total = compute_price(
            "10.00", {"b"}, ingredient_catalog, 1,
            selected_legacy_ingredients=["Guacamole (+$2)", "Cilantro"],
        )
        assert total == Decimal("14.50")

    def test_no_float_drift(self):
        catalog = [Ingredient(id="c", name="Crema", price=Decimal("0.10"))]
        assert compute_price("0.20", {"c"}, catalog, 3) == Decimal("0.90")


class TestLegacyMarker:
    @pytest.mark.parametrize("label,expected", [
        ("Guacamole (+$2)", Decimal("2")),
        ("Chipotle Mayo (+$0.50)", Decimal("0.50")),
        ("Sour Cream (+$1)", Decimal("1")),
        ("Cilantro", Decimal("0")),
        ("Extra $2", Decimal("0")),
        ("Queso (+$1) ", Decimal("1")),
        ("Salsa (+$1) on the side", Decimal("0")),
    ])
    def test_marker_price(self, label, expected):
        assert legacy_marker_price(label) == expected

    def test_unit_price_counts_every_marked_label(self):
        assert unit_price("9.00", selected_legacy_ingredients=["A (+$1)", "B (+$1.25)"]) == Decimal("11.25")


class TestRescale:
    def test_rescales_from_snapshot(self):
        assert rescale_total(Decimal("25.00"), 2, 3) == Decimal("37.50")

    def test_rounds_to_cents(self):
        assert rescale_total(Decimal("10.00"), 3, 1) == Decimal("3.33")

    def test_old_quantity_must_be_positive(self):
        with pytest.raises(ValueError):
            rescale_total(Decimal("10.00"), 0, 1)


def test_format_money():
    assert format_money(Decimal("4")) == "4.00"
    assert format_money("13.9") == "13.90"
