"""
Ingredient Catalog Model

Per-category ingredient lists and the selection state used while a
customer customizes an item.
"""

import logging
import uuid
from decimal import Decimal
from typing import Callable, Hashable, Iterable, Optional

from taqueria.menu.pricing import Money, ingredient_extra_cost, to_decimal
from taqueria.schemas import Ingredient

logger = logging.getLogger(__name__)


def new_ingredient_id() -> str:
    return uuid.uuid4().hex[:12]


def add_ingredient(
    catalog: Iterable[Ingredient],
    name: str,
    price: Money = Decimal("0.00"),
    is_default: bool = False,
) -> list[Ingredient]:
    """
    Return a new catalog with the ingredient appended.

    Blank names are rejected by returning the catalog unchanged.
    """
    catalog = list(catalog)
    name = name.strip()
    if not name:
        return catalog

    catalog.append(
        Ingredient(
            id=new_ingredient_id(),
            name=name,
            is_default=is_default,
            price=to_decimal(price),
        )
    )
    return catalog


def remove_ingredient(catalog: Iterable[Ingredient], ingredient_id: str) -> list[Ingredient]:
    """Return a new catalog without the ingredient; unknown ids are ignored."""
    return [ing for ing in catalog if ing.id != ingredient_id]


def default_selection(catalog: Iterable[Ingredient]) -> set[str]:
    """Every default ingredient starts selected, every extra unselected."""
    return {ing.id for ing in catalog if ing.is_default}


class IngredientSelection:
    """
    Selected-ingredient state for the customization view.

    The selection is seeded from the catalog's defaults only when the
    catalog identity changes (a different category, or ingredients added
    or removed). Re-syncing the same catalog keeps the user's choices, so
    a deselected default stays deselected across refetches.

    Example:
        >>> selection = IngredientSelection()
        >>> selection.sync(category.ingredients, key=category.name)
        >>> selection.toggle("guac")
        >>> selection.extra_cost()
    """

    def __init__(self, catalog: Iterable[Ingredient] = (), key: Hashable = None):
        self._catalog: tuple[Ingredient, ...] = ()
        self._identity: Optional[tuple] = None
        self._selected: set[str] = set()
        self._listeners: list[Callable[[frozenset[str]], None]] = []
        self.sync(catalog, key=key)

    @staticmethod
    def identity_of(catalog: Iterable[Ingredient], key: Hashable = None) -> tuple:
        return (key, tuple(ing.id for ing in catalog))

    def on_reseed(self, callback: Callable[[frozenset[str]], None]) -> None:
        """Register a callback invoked with the new selection after each reseed."""
        self._listeners.append(callback)

    def sync(self, catalog: Iterable[Ingredient], key: Hashable = None) -> bool:
        """
        Point the selection at a catalog.

        Returns:
            bool: True if the catalog identity changed and defaults were reseeded
        """
        catalog = tuple(catalog)
        identity = self.identity_of(catalog, key)
        # Same ingredients: take fresh prices/flags, keep the user's choices
        self._catalog = catalog
        if identity == self._identity:
            return False

        self._identity = identity
        self._selected = default_selection(catalog)
        logger.debug(f"Ingredient selection reseeded for {key!r}: {sorted(self._selected)}")
        for callback in self._listeners:
            callback(frozenset(self._selected))
        return True

    @property
    def catalog(self) -> tuple[Ingredient, ...]:
        return self._catalog

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    def is_selected(self, ingredient_id: str) -> bool:
        return ingredient_id in self._selected

    def select(self, ingredient_id: str) -> None:
        if any(ing.id == ingredient_id for ing in self._catalog):
            self._selected.add(ingredient_id)

    def deselect(self, ingredient_id: str) -> None:
        self._selected.discard(ingredient_id)

    def toggle(self, ingredient_id: str) -> bool:
        """Flip an ingredient; returns whether it is now selected."""
        if ingredient_id in self._selected:
            self.deselect(ingredient_id)
            return False
        self.select(ingredient_id)
        return ingredient_id in self._selected

    def extra_cost(self) -> Decimal:
        return ingredient_extra_cost(self._selected, self._catalog)
