"""
Cart and item customization.

A `Customization` holds the choices a customer makes for one menu item
(meat, size, ingredients, quantity) and prices them through the pricing
engine. `Cart` is an ordered sequence of the resulting CartItems.
"""

import logging
import secrets
import time
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from taqueria.menu.errors import ValidationError
from taqueria.menu.ingredients import IngredientSelection
from taqueria.menu.pricing import compute_price, format_money, rescale_total
from taqueria.schemas import CartItem, Ingredient, MenuItemResponse, OrderCreate, OrderResponse

if TYPE_CHECKING:
    from taqueria.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)


def generate_order_id() -> str:
    """Human-meaningful order id, e.g. ORD-1718040000000-3fa9."""
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(2)}"


class Customization:
    """
    Choices for one menu item before it is added to the cart.

    Starts with the first meat and size selected, every default
    ingredient included and quantity 1.
    """

    def __init__(self, item: MenuItemResponse, ingredient_catalog: Iterable[Ingredient] = ()):
        self.item = item
        self.selection = IngredientSelection(ingredient_catalog, key=item.category)
        self.selected_meat: Optional[str] = item.meats[0] if item.meats else None
        self.selected_size: Optional[str] = item.sizes[0] if item.sizes else None
        self.legacy_selected: list[str] = []
        self.quantity = 1

    def sync_catalog(self, ingredient_catalog: Iterable[Ingredient]) -> bool:
        """Feed a (possibly refetched) category catalog; reseeds only on identity change."""
        return self.selection.sync(ingredient_catalog, key=self.item.category)

    def toggle_legacy(self, label: str, checked: bool) -> None:
        if checked and label not in self.legacy_selected:
            self.legacy_selected.append(label)
        elif not checked and label in self.legacy_selected:
            self.legacy_selected.remove(label)

    def increment(self) -> None:
        self.quantity += 1

    def decrement(self) -> None:
        self.quantity = max(1, self.quantity - 1)

    def total_price(self) -> Decimal:
        return compute_price(
            self.item.price,
            self.selection.selected,
            self.selection.catalog,
            self.quantity,
            self.legacy_selected,
        )

    def to_cart_item(self) -> CartItem:
        item = self.item
        return CartItem(
            cart_id=f"{item.id}-{uuid.uuid4().hex}",
            menu_item_id=item.id,
            name=item.name,
            translation=item.translation,
            category=item.category,
            price=item.price,
            description=item.description,
            image=item.image,
            meats=list(item.meats) if item.meats else None,
            sizes=list(item.sizes) if item.sizes else None,
            ingredients=list(item.ingredients) if item.ingredients else None,
            selected_meat=self.selected_meat,
            selected_size=self.selected_size,
            selected_ingredient_ids=sorted(self.selection.selected),
            selected_legacy_ingredients=list(self.legacy_selected),
            quantity=self.quantity,
            total_price=self.total_price(),
        )


class Cart:
    """Ordered list of cart lines. The same configuration may appear twice."""

    def __init__(self):
        self._items: list[CartItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    def get(self, cart_id: str) -> Optional[CartItem]:
        return next((line for line in self._items if line.cart_id == cart_id), None)

    def add(self, customization: Customization) -> CartItem:
        line = customization.to_cart_item()
        self._items.append(line)
        logger.debug(f"Cart line added: {line.cart_id} ({line.name} x{line.quantity})")
        return line

    def remove(self, cart_id: str) -> None:
        self._items = [line for line in self._items if line.cart_id != cart_id]

    def update_quantity(self, cart_id: str, quantity: int) -> Optional[CartItem]:
        """
        Change a line's quantity.

        The line total is rescaled from its own per-unit snapshot; it is
        never recomputed from the current catalog. Quantity <= 0 removes
        the line and returns None.
        """
        if quantity <= 0:
            self.remove(cart_id)
            return None

        for index, line in enumerate(self._items):
            if line.cart_id == cart_id:
                updated = line.model_copy(update={
                    "quantity": quantity,
                    "total_price": rescale_total(line.total_price, line.quantity, quantity),
                })
                self._items[index] = updated
                return updated
        return None

    @property
    def total(self) -> Decimal:
        return sum((line.total_price for line in self._items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._items)

    def clear(self) -> None:
        self._items = []

    def build_order(
        self,
        phone: str,
        instructions: Optional[str] = None,
        estimated_time: Optional[int] = None,
    ) -> OrderCreate:
        """Freeze copies of the current lines into an order request."""
        return OrderCreate(
            order_id=generate_order_id(),
            phone=phone,
            items=[line.model_copy(deep=True) for line in self._items],
            instructions=instructions or None,
            total=Decimal(format_money(self.total)),
            estimated_time=estimated_time,
        )


async def checkout(
    cart: Cart,
    catalog: "BaseCatalogService",
    phone: str,
    instructions: Optional[str] = None,
) -> OrderResponse:
    """
    Place the cart as an order. The cart is cleared only once the
    catalog has accepted the order.

    Raises:
        ValidationError: Empty cart or malformed phone
        CatalogError: Whatever the catalog raised; the cart is untouched
    """
    if not len(cart):
        raise ValidationError("Your cart is empty", field="items")
    try:
        request = cart.build_order(phone, instructions)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first.get("loc") else None
        raise ValidationError(first["msg"], field=field)

    order = await catalog.create_order(request)
    cart.clear()
    logger.info(f"Order {order.order_id} placed ({format_money(order.total)})")
    return order
