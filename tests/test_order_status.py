from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from taqueria.menu.errors import ConflictError, NotFoundError, UnauthorizedError
from taqueria.menu.order_status import (
    OrderBoard,
    can_transition,
    completed_orders,
    current_orders,
    next_status,
    notify_status_change,
    search_by_phone,
    status_message,
)
from taqueria.schemas import CartItem, OrderCreate, OrderResponse, OrderStatus
from taqueria.services.catalog.memory import InMemoryCatalogService

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_order(order_id, status=OrderStatus.RECEIVED, minutes_ago=0, phone="555-123-4567"):
    return OrderResponse(
        id=int(order_id.split("-")[-1]),
        order_id=order_id,
        phone=phone,
        items=[],
        total=Decimal("10.00"),
        status=status,
        timestamp=NOW - timedelta(minutes=minutes_ago),
        estimated_time=20,
    )


def order_payload(phone="555-123-4567"):
    line = CartItem(
        cart_id="1-abc",
        menu_item_id=1,
        name="De Al Pastor",
        category="tacos",
        price=Decimal("13.99"),
        quantity=1,
        total_price=Decimal("13.99"),
    )
    return OrderCreate(phone=phone, items=[line], total=Decimal("13.99"))


class TestLifecycle:
    def test_next_status(self):
        assert next_status(OrderStatus.RECEIVED) == OrderStatus.STARTED
        assert next_status(OrderStatus.STARTED) == OrderStatus.COMPLETED
        assert next_status(OrderStatus.COMPLETED) is None

    @pytest.mark.parametrize("current,target,allowed", [
        ("received", "started", True),
        ("received", "completed", True),
        ("started", "completed", True),
        ("started", "received", False),
        ("completed", "started", False),
        ("started", "started", False),
    ])
    def test_can_transition(self, current, target, allowed):
        assert can_transition(current, target) is allowed


class TestMessages:
    def test_received(self):
        assert status_message("received", "ORD-1", "La Charreada", 20) == (
            "Your La Charreada order ORD-1 has been received! Estimated pickup time: 20 minutes."
        )

    def test_started(self):
        assert status_message("started", "ORD-1", "La Charreada", 15) == (
            "Your La Charreada order ORD-1 is being prepared! It will be ready in about 15 minutes."
        )

    def test_completed(self):
        assert status_message("completed", "ORD-1", "La Charreada") == (
            "Your La Charreada order ORD-1 is ready for pickup! Thank you for choosing us!"
        )

    def test_notifier_failure_is_swallowed(self):
        def broken(phone, message):
            raise RuntimeError("carrier down")

        assert notify_status_change(broken, "555", "ORD-1", "completed", "La Charreada") is False

    def test_notifier_receives_message(self):
        sent = []
        assert notify_status_change(lambda p, m: sent.append((p, m)), "555", "ORD-1", "started", "X", 5)
        assert sent == [("555", "Your X order ORD-1 is being prepared! It will be ready in about 5 minutes.")]


class TestOrderLists:
    def test_current_oldest_first(self):
        orders = [
            make_order("ORD-1", minutes_ago=1),
            make_order("ORD-2", OrderStatus.STARTED, minutes_ago=30),
            make_order("ORD-3", OrderStatus.COMPLETED, minutes_ago=60),
        ]
        assert [o.order_id for o in current_orders(orders)] == ["ORD-2", "ORD-1"]

    def test_completed_newest_first_and_capped(self):
        orders = [make_order(f"ORD-{i}", OrderStatus.COMPLETED, minutes_ago=i) for i in range(1, 6)]
        assert [o.order_id for o in completed_orders(orders, limit=2)] == ["ORD-1", "ORD-2"]

    def test_search_is_substring_on_stored_phone(self):
        orders = [make_order("ORD-1", phone="555-123-4567"), make_order("ORD-2", phone="5551234567")]
        assert [o.order_id for o in search_by_phone(orders, "123-45")] == ["ORD-1"]


@pytest.mark.anyio
class TestOrderBoard:
    async def test_advance_to_next_stage(self, catalog, sms_outbox):
        order = await catalog.create_order(order_payload())
        board = OrderBoard(catalog)
        await board.refresh()

        updated = await board.advance(order.order_id)

        assert updated.status == OrderStatus.STARTED
        assert [o.status for o in board.current()] == [OrderStatus.STARTED]
        assert sms_outbox[-1][1].endswith("is being prepared! It will be ready in about 20 minutes.")

    async def test_skip_to_completed(self, catalog):
        order = await catalog.create_order(order_payload())
        board = OrderBoard(catalog)
        await board.refresh()

        await board.advance(order.order_id, OrderStatus.COMPLETED)
        assert board.current() == []
        assert [o.order_id for o in board.completed()] == [order.order_id]

    async def test_backward_move_is_rejected_locally(self, catalog):
        order = await catalog.create_order(order_payload())
        board = OrderBoard(catalog)
        await board.refresh()
        await board.advance(order.order_id, OrderStatus.COMPLETED)

        calls = len(catalog.calls)
        with pytest.raises(ConflictError):
            await board.advance(order.order_id)
        assert len(catalog.calls) == calls

    async def test_unknown_order(self, catalog):
        board = OrderBoard(catalog)
        with pytest.raises(NotFoundError):
            await board.advance("ORD-404")
        assert "update_order_status" not in catalog.calls

    async def test_order_missing_from_board_uses_stored_status(self, catalog):
        board = OrderBoard(catalog)
        await board.refresh()
        order = await catalog.create_order(order_payload())
        await catalog.update_order_status(order.order_id, OrderStatus.STARTED)

        updated = await board.advance(order.order_id)

        assert updated.status == OrderStatus.COMPLETED
        assert [o.order_id for o in board.completed()] == [order.order_id]

    async def test_requires_owner(self):
        board = OrderBoard(InMemoryCatalogService(authorized=False))
        with pytest.raises(UnauthorizedError):
            await board.refresh()

    async def test_notifier_failure_keeps_transition(self):
        def broken(phone, message):
            raise RuntimeError("carrier down")

        catalog = InMemoryCatalogService.with_sample_menu(notifier=broken)
        order = await catalog.create_order(order_payload())
        updated = await catalog.update_order_status(order.order_id, OrderStatus.STARTED)
        assert updated.status == OrderStatus.STARTED

    async def test_search(self, catalog):
        await catalog.create_order(order_payload("555-123-4567"))
        await catalog.create_order(order_payload("555-987-6543"))
        board = OrderBoard(catalog)
        assert await board.search("") == []
        assert [o.phone for o in await board.search("987")] == ["555-987-6543"]
