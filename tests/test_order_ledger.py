"""Tests for OrderLedger."""

import json

import pytest

from storefront.services import (
    CartItem,
    Order,
    OrderLedger,
    OrderStatus,
    PersistenceError,
    ValidationError,
    status_color,
)
from storefront.services.order_ledger import NEUTRAL_COLOR, NO_ADDRESS, generate_order_id

from .conftest import FailingStore


class TestCreate:
    def test_totals_for_reference_cart(self, ledger, cart):
        order = ledger.create(cart)

        assert order.subtotal == 44.98
        assert order.shipping == 15.00
        assert order.tax == 3.60
        assert order.total == 63.58

    def test_total_is_sum_of_rounded_parts(self, ledger):
        order = ledger.create(
            [
                {"id": "a", "name": "A", "price": 0.1, "quantity": 3},
                {"id": "b", "name": "B", "price": 2.25, "quantity": 7},
            ]
        )

        assert order.subtotal == 16.05
        assert order.tax == 1.28
        assert order.total == 32.33
        assert order.total == round(order.subtotal + order.shipping + order.tax, 2)

    def test_defaults(self, ledger, cart):
        order = ledger.create(cart)

        assert order.status == "Processing"
        assert order.status_color == "#f59e0b"
        assert order.shipping_address == NO_ADDRESS
        assert order.date == "10/19/2026"
        assert order.items[1].image is None
        assert order.items[1].description == ""

    def test_overrides(self, ledger, cart):
        order = ledger.create(
            cart,
            {"shipping": 0, "tax": 2.5, "status": "Confirmed", "shippingAddress": "1 Main St"},
        )

        assert order.shipping == 0.0
        assert order.tax == 2.5
        assert order.total == 47.48
        assert order.status == "Confirmed"
        assert order.status_color == "#3b82f6"
        assert order.shipping_address == "1 Main St"

    def test_accepts_cart_item_objects(self, ledger):
        order = ledger.create([CartItem(id="x", name="Mug", price=8, quantity=2)])

        assert order.subtotal == 16.0

    def test_items_are_copied(self, ledger, cart):
        order = ledger.create(cart)
        cart[0]["quantity"] = 99
        cart[0]["name"] = "changed"

        assert order.items[0].quantity == 2
        assert ledger.get_by_id(order.id).items[0].name == "Classic Tee"

    def test_newest_first(self, ledger, cart):
        first = ledger.create(cart)
        second = ledger.create(cart)

        assert [o.id for o in ledger.list()] == [second.id, first.id]

    def test_empty_cart_raises(self, ledger, store, cart):
        ledger.create(cart)
        before = store.get(ledger.key)

        with pytest.raises(ValidationError):
            ledger.create([])

        assert store.get(ledger.key) == before
        assert ledger.count() == 1

    @pytest.mark.parametrize(
        "items",
        [
            None,
            "not a list",
            {"id": "p1"},
            [{"id": "p1", "name": "X", "price": -1, "quantity": 1}],
            [{"id": "p1", "name": "X", "price": 1, "quantity": 0}],
            [{"id": "p1", "name": "X", "price": "abc", "quantity": 1}],
            [{"id": "p1", "name": "X", "price": 1, "quantity": 1.5}],
            ["p1"],
        ],
    )
    def test_malformed_cart_raises(self, ledger, store, items):
        with pytest.raises(ValidationError):
            ledger.create(items)

        assert store.get(ledger.key) is None

    @pytest.mark.parametrize("price", ["inf", float("inf"), "-inf", "nan", float("nan")])
    def test_non_finite_price_raises(self, ledger, store, price):
        with pytest.raises(ValidationError):
            ledger.create([{"id": "p1", "name": "X", "price": price, "quantity": 1}])

        assert store.get(ledger.key) is None

    @pytest.mark.parametrize("details", [{"shipping": "inf"}, {"tax": float("inf")}, {"tax": "nan"}])
    def test_non_finite_override_raises(self, ledger, store, cart, details):
        with pytest.raises(ValidationError):
            ledger.create(cart, details)

        assert store.get(ledger.key) is None

    def test_large_price_is_computed(self, ledger):
        order = ledger.create([{"id": "yacht", "name": "Yacht", "price": 1e30, "quantity": 1}])

        assert order.subtotal == 1e30
        assert order.tax == pytest.approx(8e28)
        assert order.total == pytest.approx(1.08e30)

    def test_price_beyond_money_precision_raises(self, ledger, store):
        with pytest.raises(ValidationError):
            ledger.create([{"id": "p1", "name": "X", "price": 1e100, "quantity": 1}])

        assert store.get(ledger.key) is None

    @pytest.mark.parametrize("details", ["abc", ["shipping", 0], 5])
    def test_details_must_be_a_mapping(self, ledger, store, cart, details):
        with pytest.raises(ValidationError):
            ledger.create(cart, details)

        assert store.get(ledger.key) is None

    def test_failed_write_returns_persistence_error(self, cart):
        store = FailingStore()
        ledger = OrderLedger(store)

        result = ledger.create(cart)

        assert isinstance(result, PersistenceError)
        assert isinstance(result.order, Order)
        assert result.order.total == 63.58
        assert ledger.list() == []


class TestReads:
    def test_list_empty(self, ledger):
        assert ledger.list() == []

    def test_list_is_idempotent(self, ledger, cart):
        ledger.create(cart)
        ledger.create(cart, {"status": "Shipped"})

        assert ledger.list() == ledger.list()

    def test_corrupt_blob_reads_as_empty(self, store, ledger):
        store.set(ledger.key, "{not json")
        assert ledger.list() == []

        store.set(ledger.key, json.dumps({"id": "#1"}))
        assert ledger.list() == []

    def test_round_trip(self, ledger, cart):
        order = ledger.create(cart, {"status": "Shipped", "shippingAddress": "Dock 4"})

        loaded = ledger.list()[0]

        assert loaded == order
        assert loaded.to_dict() == order.to_dict()
        assert loaded.status_color == status_color("Shipped")

    def test_stored_color_is_recomputed(self, store, ledger, cart):
        order = ledger.create(cart)
        payload = json.loads(store.get(ledger.key))
        payload[0]["statusColor"] = "#000000"
        store.set(ledger.key, json.dumps(payload))

        assert ledger.get_by_id(order.id).status_color == "#f59e0b"

    def test_get_by_id_missing(self, ledger, cart):
        ledger.create(cart)
        assert ledger.get_by_id("#nope") is None

    def test_get_by_status(self, ledger, cart):
        ledger.create(cart)
        shipped = ledger.create(cart, {"status": "Shipped"})

        assert [o.id for o in ledger.get_by_status(OrderStatus.SHIPPED)] == [shipped.id]
        assert ledger.get_by_status("Refunded") == []

    def test_ledgers_with_different_keys_are_isolated(self, store, cart):
        a = OrderLedger(store, key="orders:a")
        b = OrderLedger(store, key="orders:b")
        a.create(cart)

        assert a.count() == 1
        assert b.list() == []


class TestUpdateStatus:
    def test_relabels_and_recolors(self, ledger, cart):
        order = ledger.create(cart)

        orders = ledger.update_status(order.id, "Delivered")

        assert orders[0].status == "Delivered"
        assert orders[0].status_color == "#10b981"
        stored = ledger.get_by_id(order.id)
        assert stored.status == "Delivered"
        assert stored.status_color == status_color(OrderStatus.DELIVERED)

    def test_any_transition_allowed(self, ledger, cart):
        order = ledger.create(cart, {"status": "Delivered"})

        ledger.update_status(order.id, OrderStatus.PROCESSING)

        assert ledger.get_by_id(order.id).status == "Processing"

    def test_unknown_status_gets_neutral_color(self, ledger, cart):
        order = ledger.create(cart)

        ledger.update_status(order.id, "Lost at Sea")

        stored = ledger.get_by_id(order.id)
        assert stored.status == "Lost at Sea"
        assert stored.status_color == NEUTRAL_COLOR

    def test_missing_id_is_noop(self, ledger, store, cart):
        ledger.create(cart)
        before = store.get(ledger.key)

        orders = ledger.update_status("#missing", "Shipped")

        assert len(orders) == 1
        assert orders[0].status == "Processing"
        assert store.get(ledger.key) == before

    def test_failed_write(self, cart):
        order = Order(
            id="#000000001", date="10/19/2026",
            items=[CartItem(id="p", name="P", price=1.0, quantity=1)],
            subtotal=1.0, shipping=15.0, tax=0.08, total=16.08,
        )
        seeded = OrderLedger(FailingStore({"customer_orders": json.dumps([order.to_dict()])}))

        result = seeded.update_status(order.id, "Shipped")

        assert isinstance(result, PersistenceError)
        assert seeded.get_by_id(order.id).status == "Processing"


class TestDeleteAndClear:
    def test_delete_removes_one(self, ledger, cart):
        first = ledger.create(cart)
        second = ledger.create(cart)

        orders = ledger.delete(first.id)

        assert [o.id for o in orders] == [second.id]
        assert ledger.count() == 1

    def test_delete_missing_is_noop(self, ledger, cart):
        ledger.create(cart)

        orders = ledger.delete("#missing")

        assert len(orders) == 1

    def test_clear(self, ledger, store, cart):
        ledger.create(cart)
        ledger.create(cart)

        assert ledger.clear() is True
        assert ledger.list() == []
        assert store.get(ledger.key) is None

    def test_clear_empty_ledger(self, ledger):
        assert ledger.clear() is True

    def test_delete_failed_write(self):
        order = Order(
            id="#000000001", date="10/19/2026",
            items=[CartItem(id="p", name="P", price=1.0, quantity=1)],
            subtotal=1.0, shipping=15.0, tax=0.08, total=16.08,
        )
        ledger = OrderLedger(FailingStore({"customer_orders": json.dumps([order.to_dict()])}))

        result = ledger.delete(order.id)

        assert isinstance(result, PersistenceError)
        assert [o.id for o in ledger.list()] == [order.id]

    def test_clear_failure(self):
        assert OrderLedger(FailingStore()).clear() is False


class TestHelpers:
    def test_generate_order_id_shape(self):
        order_id = generate_order_id()

        assert order_id.startswith("#")
        assert len(order_id) == 10
        assert order_id[1:].isdigit()

    @pytest.mark.parametrize(
        "status,color",
        [
            ("Processing", "#f59e0b"),
            ("Confirmed", "#3b82f6"),
            ("Shipped", "#8b5cf6"),
            ("In Transit", "#3b82f6"),
            ("Out for Delivery", "#06b6d4"),
            ("Delivered", "#10b981"),
            ("Cancelled", "#ef4444"),
            ("Refunded", "#6b7280"),
            ("Teleported", "#6b7280"),
        ],
    )
    def test_status_colors(self, status, color):
        assert status_color(status) == color
