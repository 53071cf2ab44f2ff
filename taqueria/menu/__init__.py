"""
Menu core: pricing, ingredient selection, cart, staged menu editing,
category and item ordering, and the order status lifecycle.
"""

from taqueria.menu.cart import Cart, Customization, checkout
from taqueria.menu.errors import (
    CatalogError,
    ConflictError,
    NotFoundError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from taqueria.menu.manager import MenuManager, Notice
from taqueria.menu.order_status import OrderBoard
from taqueria.menu.ordering import CategoryOrderList, ItemOrderBook, OrderedSequence, slugify
from taqueria.menu.pricing import compute_price
from taqueria.menu.staging import StagingModel

__all__ = [
    "Cart",
    "Customization",
    "checkout",
    "CatalogError",
    "ConflictError",
    "NotFoundError",
    "TransportError",
    "UnauthorizedError",
    "ValidationError",
    "MenuManager",
    "Notice",
    "OrderBoard",
    "CategoryOrderList",
    "ItemOrderBook",
    "OrderedSequence",
    "slugify",
    "compute_price",
    "StagingModel",
]
