"""
Catalog Service Abstract Base Class

Defines the interface the menu core uses to read and mutate categories,
menu items, orders and settings. Implementations:

    - InMemoryCatalogService: dictionaries in process (development, tests)
    - HttpCatalogService: the catalog API over HTTP (staging, production)

Every failure is raised as a taqueria.menu.errors.CatalogError subclass
so callers handle one taxonomy regardless of transport.
"""

from abc import ABC, abstractmethod
from typing import Optional

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


class BaseCatalogService(ABC):
    """
    Abstract base class for catalog services.

    Privileged operations (listing/searching orders, changing order
    status, writing settings) require owner access; implementations
    raise UnauthorizedError when `is_authorized` is False.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the implementation name (e.g. "memory", "http")."""
        pass

    @property
    @abstractmethod
    def is_authorized(self) -> bool:
        """Whether the current session has owner access."""
        pass

    # ==========================================================================
    # CATEGORIES
    # ==========================================================================

    @abstractmethod
    async def list_categories(self) -> list[CategoryResponse]:
        """All categories sorted by order, then id."""
        pass

    @abstractmethod
    async def create_category(self, data: CategoryCreate) -> CategoryResponse:
        pass

    @abstractmethod
    async def update_category(self, category_id: int, data: CategoryUpdate) -> CategoryResponse:
        pass

    @abstractmethod
    async def delete_category(self, category_id: int) -> None:
        """
        Delete a category.

        Raises:
            NotFoundError: No such category
            ConflictError: Menu items still reference the category
        """
        pass

    # ==========================================================================
    # MENU ITEMS
    # ==========================================================================

    @abstractmethod
    async def list_menu_items(self) -> list[MenuItemResponse]:
        pass

    @abstractmethod
    async def create_menu_item(self, data: MenuItemCreate) -> MenuItemResponse:
        pass

    @abstractmethod
    async def update_menu_item(self, item_id: int, data: MenuItemUpdate) -> MenuItemResponse:
        pass

    @abstractmethod
    async def delete_menu_item(self, item_id: int) -> None:
        pass

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    @abstractmethod
    async def create_order(self, data: OrderCreate) -> OrderResponse:
        pass

    @abstractmethod
    async def list_orders(self) -> list[OrderResponse]:
        """All orders, newest first. Privileged."""
        pass

    @abstractmethod
    async def update_order_status(self, order_id: str, status: OrderStatus) -> OrderResponse:
        """Privileged. Raises ConflictError for a non-forward transition."""
        pass

    @abstractmethod
    async def search_orders_by_phone(self, phone: str) -> list[OrderResponse]:
        """Orders whose phone contains `phone` (case-sensitive substring). Privileged."""
        pass

    # ==========================================================================
    # SETTINGS
    # ==========================================================================

    @abstractmethod
    async def get_setting(self, key: str) -> Optional[str]:
        """Value for `key`, or None when unset."""
        pass

    @abstractmethod
    async def put_setting(self, key: str, value: str) -> None:
        """Privileged upsert."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass
