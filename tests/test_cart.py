from decimal import Decimal

import pytest

from taqueria.menu.cart import Cart, Customization, checkout, generate_order_id
from taqueria.menu.errors import TransportError, ValidationError
from taqueria.schemas import OrderStatus


@pytest.fixture
def cart(make_item, ingredient_catalog):
    cart = Cart()
    custom = Customization(make_item(), ingredient_catalog)
    custom.selection.select("b")
    custom.increment()
    cart.add(custom)
    return cart


class TestCustomization:
    def test_defaults(self, make_item, ingredient_catalog):
        item = make_item(sizes=["Small", "Large"])
        custom = Customization(item, ingredient_catalog)
        assert custom.selected_meat == "Al Pastor"
        assert custom.selected_size == "Small"
        assert custom.quantity == 1
        assert custom.selection.selected == frozenset({"a"})

    def test_no_choices(self, make_item):
        custom = Customization(make_item(meats=None, sizes=None))
        assert custom.selected_meat is None
        assert custom.selected_size is None

    def test_decrement_stops_at_one(self, make_item):
        custom = Customization(make_item())
        custom.decrement()
        assert custom.quantity == 1

    def test_total_price(self, make_item, ingredient_catalog):
        custom = Customization(make_item(), ingredient_catalog)
        custom.selection.select("b")
        custom.toggle_legacy("Guacamole (+$2)", True)
        custom.increment()
        assert custom.total_price() == Decimal("29.00")

        custom.toggle_legacy("Guacamole (+$2)", False)
        assert custom.total_price() == Decimal("25.00")

    def test_refetch_keeps_deselected_default(self, make_item, ingredient_catalog):
        custom = Customization(make_item(), ingredient_catalog)
        custom.selection.deselect("a")
        custom.sync_catalog([ing.model_copy() for ing in ingredient_catalog])
        assert custom.selection.selected == frozenset()


class TestCart:
    def test_line_snapshot(self, cart):
        line = cart.items[0]
        assert line.quantity == 2
        assert line.total_price == Decimal("25.00")
        assert line.selected_ingredient_ids == ["a", "b"]
        assert line.cart_id.startswith("1-")

    def test_same_configuration_twice_gets_two_lines(self, make_item):
        cart = Cart()
        custom = Customization(make_item())
        first = cart.add(custom)
        second = cart.add(custom)
        assert len(cart) == 2
        assert first.cart_id != second.cart_id

    def test_update_quantity_rescales_snapshot(self, cart):
        line = cart.items[0]
        updated = cart.update_quantity(line.cart_id, 3)
        assert updated.quantity == 3
        assert updated.total_price == Decimal("37.50")

    def test_update_quantity_ignores_catalog_changes(self, make_item, cart):
        # The menu price changing after add-to-cart does not touch the line
        line = cart.items[0]
        make_item(price=Decimal("99.00"))
        assert cart.update_quantity(line.cart_id, 1).total_price == Decimal("12.50")

    def test_quantity_zero_removes(self, cart):
        line = cart.items[0]
        assert cart.update_quantity(line.cart_id, 0) is None
        assert len(cart) == 0

    def test_remove_unknown_is_noop(self, cart):
        cart.remove("nope")
        assert len(cart) == 1

    def test_totals(self, cart, make_item):
        cart.add(Customization(make_item(2, price=Decimal("4.99"), meats=None)))
        assert cart.total == Decimal("29.99")
        assert cart.item_count == 3

    def test_build_order_copies_lines(self, cart):
        order = cart.build_order("555-123-4567", "No onions")
        assert order.order_id.startswith("ORD-")
        assert order.total == Decimal("25.00")
        assert order.items[0] is not cart.items[0]
        assert order.items[0] == cart.items[0]


def test_generate_order_id_is_unique():
    assert len({generate_order_id() for _ in range(50)}) == 50


@pytest.mark.anyio
class TestCheckout:
    async def test_places_order_and_clears_cart(self, cart, catalog, sms_outbox):
        order = await checkout(cart, catalog, "555-123-4567")
        assert order.status == OrderStatus.RECEIVED
        assert order.estimated_time == 20
        assert len(cart) == 0
        assert sms_outbox == [(
            "555-123-4567",
            f"Your La Charreada order {order.order_id} has been received! "
            "Estimated pickup time: 20 minutes.",
        )]

    async def test_failure_keeps_cart(self, cart, catalog):
        catalog.queue_failure(TransportError("offline"))
        with pytest.raises(TransportError):
            await checkout(cart, catalog, "555-123-4567")
        assert len(cart) == 1

    async def test_empty_cart(self, catalog):
        with pytest.raises(ValidationError) as exc:
            await checkout(Cart(), catalog, "555-123-4567")
        assert exc.value.field == "items"

    async def test_short_phone(self, cart, catalog):
        with pytest.raises(ValidationError) as exc:
            await checkout(cart, catalog, "555-1234")
        assert exc.value.field == "phone"
        assert len(cart) == 1
