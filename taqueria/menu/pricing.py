"""
Pricing Engine

Computes a cart line's price from the base price, the selected
structured ingredients and any selected legacy ingredient strings.

Rules:
    - Default ingredients are free whether selected or not.
    - Each selected non-default ingredient adds its price.
    - Legacy strings such as "Guacamole (+$2)" add the marked amount.
    - total = (base + extras) * quantity
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from taqueria.schemas import Ingredient

Money = Union[Decimal, str, int, float]

CENTS = Decimal("0.01")

# Trailing "(+$2)" or "(+$1.50)"
LEGACY_PRICE_MARKER = re.compile(r"\(\+\$(\d+(?:\.\d+)?)\)\s*$")


def to_decimal(value: Money) -> Decimal:
    """Convert a price to Decimal without binary float drift."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid price: {value!r}")


def format_money(value: Money) -> str:
    """Two-decimal string, the form prices are stored and shown in."""
    return str(to_decimal(value).quantize(CENTS))


def legacy_marker_price(label: str) -> Decimal:
    """Extra cost encoded in a legacy ingredient label, 0 when unmarked."""
    match = LEGACY_PRICE_MARKER.search(label)
    if not match:
        return Decimal("0")
    return Decimal(match.group(1))


def ingredient_extra_cost(
    selected_ids: Iterable[str],
    catalog: Iterable[Ingredient],
) -> Decimal:
    """Sum of prices of selected non-default ingredients present in the catalog."""
    selected = set(selected_ids)
    return sum(
        (to_decimal(ing.price) for ing in catalog if ing.id in selected and not ing.is_default),
        Decimal("0"),
    )


def legacy_extra_cost(selected_labels: Iterable[str]) -> Decimal:
    return sum((legacy_marker_price(label) for label in selected_labels), Decimal("0"))


def unit_price(
    base_price: Money,
    selected_ingredient_ids: Iterable[str] = (),
    ingredient_catalog: Iterable[Ingredient] = (),
    selected_legacy_ingredients: Iterable[str] = (),
) -> Decimal:
    return (
        to_decimal(base_price)
        + ingredient_extra_cost(selected_ingredient_ids, ingredient_catalog)
        + legacy_extra_cost(selected_legacy_ingredients)
    )


def compute_price(
    base_price: Money,
    selected_ingredient_ids: Iterable[str],
    ingredient_catalog: Iterable[Ingredient],
    quantity: int,
    selected_legacy_ingredients: Optional[Iterable[str]] = None,
) -> Decimal:
    """
    Total price for a cart line.

    Args:
        base_price: Menu item price
        selected_ingredient_ids: Ids of the ingredients currently selected
        ingredient_catalog: The category's ingredients
        quantity: Number of units, at least 1
        selected_legacy_ingredients: Selected free-text ingredient labels

    Returns:
        Decimal: (base price + extra cost) * quantity

    Example:
        >>> compute_price("10.00", {"b"}, [Ingredient(id="b", name="Queso", price="2.50")], 2)
        Decimal('25.00')
    """
    if quantity < 1:
        raise ValueError("quantity must be at least 1")

    per_unit = unit_price(
        base_price,
        selected_ingredient_ids,
        ingredient_catalog,
        selected_legacy_ingredients or (),
    )
    return per_unit * quantity


def rescale_total(total_price: Money, old_quantity: int, new_quantity: int) -> Decimal:
    """
    Re-derive a line total for a new quantity from its per-unit snapshot.

    The catalog is not consulted: the unit price is fixed at add-to-cart time.
    """
    if old_quantity < 1:
        raise ValueError("old_quantity must be at least 1")
    return (to_decimal(total_price) / old_quantity * new_quantity).quantize(CENTS, ROUND_HALF_UP)
