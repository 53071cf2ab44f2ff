from decimal import Decimal

from taqueria.menu.ingredients import (
    IngredientSelection,
    add_ingredient,
    default_selection,
    remove_ingredient,
)
from taqueria.schemas import Ingredient


class TestCatalogEdits:
    def test_add_assigns_unique_ids(self):
        catalog = add_ingredient([], "Queso", Decimal("1.00"))
        catalog = add_ingredient(catalog, "Queso", Decimal("1.00"))
        assert len(catalog) == 2
        assert catalog[0].id != catalog[1].id

    def test_add_strips_name(self):
        catalog = add_ingredient([], "  Crema  ", "0.50", is_default=True)
        assert catalog[0].name == "Crema"
        assert catalog[0].is_default is True
        assert catalog[0].price == Decimal("0.50")

    def test_blank_name_is_noop(self, ingredient_catalog):
        assert add_ingredient(ingredient_catalog, "   ") == ingredient_catalog

    def test_add_does_not_mutate_input(self, ingredient_catalog):
        before = list(ingredient_catalog)
        add_ingredient(ingredient_catalog, "Lime")
        assert ingredient_catalog == before

    def test_remove(self, ingredient_catalog):
        assert [i.id for i in remove_ingredient(ingredient_catalog, "a")] == ["b"]

    def test_remove_unknown_is_noop(self, ingredient_catalog):
        assert remove_ingredient(ingredient_catalog, "missing") == ingredient_catalog


class TestIngredientSelection:
    def test_seeds_defaults_only(self, ingredient_catalog):
        selection = IngredientSelection(ingredient_catalog, key="tacos")
        assert selection.selected == frozenset({"a"})
        assert default_selection(ingredient_catalog) == {"a"}

    def test_resync_same_catalog_keeps_choices(self, ingredient_catalog):
        selection = IngredientSelection(ingredient_catalog, key="tacos")
        selection.deselect("a")
        selection.select("b")

        refetched = [ing.model_copy() for ing in ingredient_catalog]
        assert selection.sync(refetched, key="tacos") is False
        assert selection.selected == frozenset({"b"})

    def test_resync_picks_up_new_prices(self, ingredient_catalog):
        selection = IngredientSelection(ingredient_catalog, key="tacos")
        selection.select("b")
        repriced = [ingredient_catalog[0], ingredient_catalog[1].model_copy(update={"price": Decimal("3.00")})]
        selection.sync(repriced, key="tacos")
        assert selection.extra_cost() == Decimal("3.00")

    def test_category_change_reseeds(self, ingredient_catalog):
        selection = IngredientSelection(ingredient_catalog, key="tacos")
        selection.deselect("a")
        assert selection.sync(ingredient_catalog, key="burritos") is True
        assert selection.selected == frozenset({"a"})

    def test_added_ingredient_reseeds(self, ingredient_catalog):
        selection = IngredientSelection(ingredient_catalog, key="tacos")
        selection.deselect("a")
        grown = ingredient_catalog + [Ingredient(id="c", name="Lime", is_default=True)]
        assert selection.sync(grown, key="tacos") is True
        assert selection.selected == frozenset({"a", "c"})

    def test_reseed_listeners(self, ingredient_catalog):
        seen = []
        selection = IngredientSelection()
        selection.on_reseed(seen.append)
        selection.sync(ingredient_catalog, key="tacos")
        selection.sync(ingredient_catalog, key="tacos")
        assert seen == [frozenset({"a"})]

    def test_select_ignores_unknown_ids(self, ingredient_catalog):
        selection = IngredientSelection(ingredient_catalog, key="tacos")
        selection.select("nope")
        assert "nope" not in selection.selected

    def test_toggle(self, ingredient_catalog):
        selection = IngredientSelection(ingredient_catalog, key="tacos")
        assert selection.toggle("b") is True
        assert selection.extra_cost() == Decimal("2.50")
        assert selection.toggle("b") is False
        assert selection.extra_cost() == Decimal("0")
