"""
In-Memory Catalog Service

Keeps categories, menu items, orders and settings in dictionaries.
Used in development and tests. Behaves like the catalog API: same
validation, same conflicts, same placeholder item on category creation.

Latency and random failures can be simulated like the other mock
services; tests use `queue_failure` for deterministic errors.
"""

import asyncio
import logging
import random
from datetime import datetime, timezone
from itertools import count
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from taqueria.menu.cart import generate_order_id
from taqueria.menu.errors import (
    CatalogError,
    ConflictError,
    NotFoundError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from taqueria.menu.manager import PLACEHOLDER_ITEM
from taqueria.menu.order_status import can_transition, notify_status_change
from taqueria.menu.ordering import slugify
from taqueria.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    OrderCreate,
    OrderResponse,
    OrderStatus,
)
from taqueria.services.catalog.base import BaseCatalogService
from taqueria.services.catalog.sample_menu import SAMPLE_CATEGORIES, SAMPLE_MENU_ITEMS

logger = logging.getLogger(__name__)


class InMemoryCatalogService(BaseCatalogService):
    """Catalog held in process memory."""

    def __init__(
        self,
        authorized: bool = True,
        notifier: Optional[Callable[[str, str], None]] = None,
        restaurant_name: str = "La Charreada",
        default_estimated_minutes: int = 20,
        failure_rate: float = 0.0,
        latency: tuple[float, float] = (0.0, 0.0),
    ):
        self.authorized = authorized
        self.notifier = notifier
        self.restaurant_name = restaurant_name
        self.default_estimated_minutes = default_estimated_minutes
        self.failure_rate = failure_rate
        self.latency = latency

        self._categories: dict[int, CategoryResponse] = {}
        self._items: dict[int, MenuItemResponse] = {}
        self._orders: dict[str, OrderResponse] = {}
        self._settings: dict[str, str] = {}
        self._category_ids = count(1)
        self._item_ids = count(1)
        self._order_ids = count(1)
        self._queued_failures: list[CatalogError] = []
        self.calls: list[str] = []

    @classmethod
    def with_sample_menu(cls, **kwargs) -> "InMemoryCatalogService":
        """A catalog seeded with the sample categories and items."""
        catalog = cls(**kwargs)
        for data in SAMPLE_CATEGORIES:
            category = CategoryResponse.model_validate({"id": next(catalog._category_ids), **data})
            catalog._categories[category.id] = category
        for data in SAMPLE_MENU_ITEMS:
            item = MenuItemResponse.model_validate({"id": next(catalog._item_ids), **data})
            catalog._items[item.id] = item
        logger.info(
            f"In-memory catalog seeded: {len(catalog._categories)} categories, "
            f"{len(catalog._items)} items"
        )
        return catalog

    @property
    def provider_name(self) -> str:
        return "memory"

    @property
    def is_authorized(self) -> bool:
        return self.authorized

    # ==========================================================================
    # SIMULATION
    # ==========================================================================

    def queue_failure(self, error: CatalogError) -> None:
        """Make the next catalog call raise `error`."""
        self._queued_failures.append(error)

    async def _call(self, name: str, privileged: bool = False) -> None:
        self.calls.append(name)
        low, high = self.latency
        if high > 0:
            await asyncio.sleep(random.uniform(low, high))
        if self._queued_failures:
            raise self._queued_failures.pop(0)
        if self.failure_rate and random.random() < self.failure_rate:
            logger.warning(f"Simulated catalog failure in {name}")
            raise TransportError("Simulated network failure")
        if privileged and not self.authorized:
            raise UnauthorizedError("Owner access required")

    # ==========================================================================
    # CATEGORIES
    # ==========================================================================

    async def list_categories(self) -> list[CategoryResponse]:
        await self._call("list_categories")
        return sorted(self._categories.values(), key=lambda c: (c.order, c.id))

    def _category_by_name(self, name: str) -> Optional[CategoryResponse]:
        return next((c for c in self._categories.values() if c.name == name), None)

    async def create_category(self, data: CategoryCreate) -> CategoryResponse:
        await self._call("create_category")
        name = data.name or slugify(data.translation)
        if not name:
            raise ValidationError("Category name is required", field="name")
        if self._category_by_name(name):
            raise ConflictError(f'Category "{name}" already exists', field="name")

        category = CategoryResponse(
            id=next(self._category_ids),
            name=name,
            translation=data.translation,
            icon=data.icon,
            order=data.order,
            ingredients=[ing.model_copy() for ing in data.ingredients],
        )
        self._categories[category.id] = category

        placeholder = MenuItemResponse(id=next(self._item_ids), category=name, **PLACEHOLDER_ITEM)
        self._items[placeholder.id] = placeholder
        logger.info(f"Category {name!r} created at order {category.order}")
        return category

    async def update_category(self, category_id: int, data: CategoryUpdate) -> CategoryResponse:
        await self._call("update_category")
        category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError(f"Category #{category_id} not found")
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        updated = CategoryResponse.model_validate({**category.model_dump(), **changes})
        self._categories[category_id] = updated
        return updated

    async def delete_category(self, category_id: int) -> None:
        await self._call("delete_category")
        category = self._categories.get(category_id)
        if category is None:
            raise NotFoundError(f"Category #{category_id} not found")
        count_items = sum(1 for item in self._items.values() if item.category == category.name)
        if count_items:
            raise ConflictError(
                f'Cannot delete category "{category.translation}" because it contains '
                f"{count_items} menu item(s). Please move or delete these items first."
            )
        del self._categories[category_id]

    # ==========================================================================
    # MENU ITEMS
    # ==========================================================================

    async def list_menu_items(self) -> list[MenuItemResponse]:
        await self._call("list_menu_items")
        return sorted(self._items.values(), key=lambda i: i.id)

    def _require_category(self, name: str) -> None:
        if self._category_by_name(name) is None:
            raise ValidationError(f"Category {name!r} does not exist", field="category")

    async def create_menu_item(self, data: MenuItemCreate) -> MenuItemResponse:
        await self._call("create_menu_item")
        self._require_category(data.category)
        item = MenuItemResponse(id=next(self._item_ids), **data.model_dump())
        self._items[item.id] = item
        return item

    async def update_menu_item(self, item_id: int, data: MenuItemUpdate) -> MenuItemResponse:
        await self._call("update_menu_item")
        item = self._items.get(item_id)
        if item is None:
            raise NotFoundError(f"Menu item #{item_id} not found")
        changes = data.model_dump(exclude_unset=True)
        if changes.get("category"):
            self._require_category(changes["category"])
        try:
            updated = MenuItemResponse.model_validate({**item.model_dump(), **changes})
        except PydanticValidationError as e:
            first = e.errors()[0]
            field_name = str(first["loc"][0]) if first.get("loc") else None
            raise ValidationError(f"{field_name}: {first['msg']}", field=field_name)
        self._items[item_id] = updated
        return updated

    async def delete_menu_item(self, item_id: int) -> None:
        await self._call("delete_menu_item")
        if self._items.pop(item_id, None) is None:
            raise NotFoundError(f"Menu item #{item_id} not found")

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    async def create_order(self, data: OrderCreate) -> OrderResponse:
        await self._call("create_order")
        order_id = data.order_id or generate_order_id()
        if order_id in self._orders:
            raise ConflictError(f"Order {order_id} already exists", field="orderId")

        order = OrderResponse(
            id=next(self._order_ids),
            order_id=order_id,
            phone=data.phone,
            items=[line.model_copy(deep=True) for line in data.items],
            instructions=data.instructions,
            total=data.total,
            status=data.status,
            timestamp=datetime.now(timezone.utc),
            estimated_time=data.estimated_time or self.default_estimated_minutes,
        )
        self._orders[order_id] = order
        self._notify(order)
        return order

    def _notify(self, order: OrderResponse) -> None:
        if self.notifier is None:
            return
        notify_status_change(
            self.notifier,
            order.phone,
            order.order_id,
            order.status,
            self.restaurant_name,
            order.estimated_time,
        )

    async def list_orders(self) -> list[OrderResponse]:
        await self._call("list_orders", privileged=True)
        return sorted(self._orders.values(), key=lambda o: (o.timestamp, o.id), reverse=True)

    async def update_order_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        await self._call("update_order_status", privileged=True)
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        if not can_transition(order.status, status):
            raise ConflictError(
                f"Order {order_id} cannot move from {order.status.value} to {OrderStatus(status).value}"
            )
        updated = order.model_copy(update={"status": OrderStatus(status)})
        self._orders[order_id] = updated
        self._notify(updated)
        return updated

    async def search_orders_by_phone(self, phone: str) -> list[OrderResponse]:
        await self._call("search_orders_by_phone", privileged=True)
        matches = [o for o in self._orders.values() if phone in o.phone]
        return sorted(matches, key=lambda o: (o.timestamp, o.id), reverse=True)

    # ==========================================================================
    # SETTINGS
    # ==========================================================================

    async def get_setting(self, key: str) -> Optional[str]:
        await self._call("get_setting")
        return self._settings.get(key)

    async def put_setting(self, key: str, value: str) -> None:
        await self._call("put_setting", privileged=True)
        self._settings[key] = value

    async def health_check(self) -> bool:
        return True
