"""
Order Status State Machine

Lifecycle: received -> started -> completed. Transitions only move
forward; skipping a stage is allowed. Every successful transition
notifies the customer, and a failed notification never undoes it.
"""

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from taqueria.menu.errors import ConflictError, NotFoundError
from taqueria.schemas import OrderResponse, OrderStatus

if TYPE_CHECKING:
    from taqueria.services.catalog.base import BaseCatalogService

logger = logging.getLogger(__name__)

LIFECYCLE = (OrderStatus.RECEIVED, OrderStatus.STARTED, OrderStatus.COMPLETED)

Notifier = Callable[[str, str], None]


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """The following stage, or None for completed orders."""
    index = LIFECYCLE.index(OrderStatus(status))
    return LIFECYCLE[index + 1] if index + 1 < len(LIFECYCLE) else None


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return LIFECYCLE.index(OrderStatus(target)) > LIFECYCLE.index(OrderStatus(current))


def status_message(
    status: OrderStatus,
    order_id: str,
    restaurant_name: str,
    estimated_minutes: Optional[int] = None,
) -> str:
    """Customer-facing SMS text for an order entering `status`."""
    status = OrderStatus(status)
    prefix = f"Your {restaurant_name} order {order_id}"
    if status == OrderStatus.RECEIVED:
        return f"{prefix} has been received! Estimated pickup time: {estimated_minutes} minutes."
    if status == OrderStatus.STARTED:
        return f"{prefix} is being prepared! It will be ready in about {estimated_minutes} minutes."
    return f"{prefix} is ready for pickup! Thank you for choosing us!"


def notify_status_change(
    notifier: Notifier,
    phone: str,
    order_id: str,
    status: OrderStatus,
    restaurant_name: str,
    estimated_minutes: Optional[int] = None,
) -> bool:
    """
    Fire-and-forget customer notification.

    Returns:
        bool: True if the notifier accepted the message
    """
    message = status_message(status, order_id, restaurant_name, estimated_minutes)
    try:
        notifier(phone, message)
    except Exception as e:
        logger.warning(f"Notification for order {order_id} failed: {e}")
        return False
    return True


def current_orders(orders: Iterable[OrderResponse]) -> list[OrderResponse]:
    """Every order that is not completed, oldest first."""
    pending = [o for o in orders if o.status != OrderStatus.COMPLETED]
    return sorted(pending, key=lambda o: o.timestamp)


def completed_orders(orders: Iterable[OrderResponse], limit: Optional[int] = None) -> list[OrderResponse]:
    """Completed orders, most recent first, capped at `limit`."""
    done = [o for o in orders if o.status == OrderStatus.COMPLETED]
    done.sort(key=lambda o: o.timestamp, reverse=True)
    return done if limit is None else done[:limit]


def search_by_phone(orders: Iterable[OrderResponse], phone: str) -> list[OrderResponse]:
    """Case-sensitive substring match on the phone as stored."""
    return [o for o in orders if phone in o.phone]


class OrderBoard:
    """Owner's view of orders, refetched after every mutation."""

    def __init__(self, catalog: "BaseCatalogService", completed_limit: int = 10):
        self.catalog = catalog
        self.completed_limit = completed_limit
        self._orders: list[OrderResponse] = []

    @property
    def orders(self) -> list[OrderResponse]:
        return list(self._orders)

    async def refresh(self) -> list[OrderResponse]:
        self._orders = await self.catalog.list_orders()
        return self.orders

    def current(self) -> list[OrderResponse]:
        return current_orders(self._orders)

    def completed(self) -> list[OrderResponse]:
        return completed_orders(self._orders, self.completed_limit)

    async def search(self, phone: str) -> list[OrderResponse]:
        if not phone:
            return []
        return await self.catalog.search_orders_by_phone(phone)

    def _find(self, order_id: str) -> Optional[OrderResponse]:
        return next((o for o in self._orders if o.order_id == order_id), None)

    async def advance(self, order_id: str, target: Optional[OrderStatus] = None) -> OrderResponse:
        """
        Move an order forward, to `target` or to the next stage.

        An order missing from the board triggers a refresh first, so the
        move is always checked against the stored status.

        Raises:
            NotFoundError: The order does not exist
            ConflictError: The order is completed or `target` is not ahead
            CatalogError: Whatever the catalog raised
        """
        order = self._find(order_id)
        if order is None:
            await self.refresh()
            order = self._find(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        target = target or next_status(order.status)
        if target is None or not can_transition(order.status, target):
            raise ConflictError(
                f"Order {order_id} cannot move from {order.status.value} "
                f"to {target.value if target else 'a later status'}"
            )

        updated = await self.catalog.update_order_status(order_id, target)
        logger.info(f"Order {order_id} -> {updated.status.value}")
        await self.refresh()
        return updated
