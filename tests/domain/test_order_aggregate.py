"""Tests for Order placement and the line-item snapshot."""

import json

import pytest
from marketplace.order.events import LineItemsRecorded, OrderPlaced
from marketplace.order.order import Order, OrderStatus
from protean.exceptions import ValidationError

ADDRESS = {
    "full_name": "Asha Rao",
    "phone": "9876543210",
    "address": "12 Market Road",
    "city": "Mysuru",
    "state": "",
    "pincode": "570001",
}

LINES = [
    {"product_id": "p-1", "product_name": "Mango Pickle", "quantity": 2, "unit_price": 150.0, "seller_id": "s-1"},
    {"product_id": "p-2", "product_name": "Coir Mat", "quantity": 1, "unit_price": 300.0, "seller_id": "s-2"},
]


def _place(**overrides):
    fields = {
        "customer_id": "cust-1",
        "customer_name": "Asha Rao",
        "shipping_address": ADDRESS,
        "payment_method": "cod",
        "subtotal": 600.0,
        "delivery_fee": 90,
    }
    fields.update(overrides)
    return Order.place(**fields)


class TestPlacement:
    def test_header_starts_pending(self):
        order = _place()

        assert order.status == OrderStatus.PENDING.value
        assert order.total == 690.0
        assert order.items == []
        assert order.shipping_address.city == "Mysuru"

    def test_raises_order_placed(self):
        order = _place()

        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.order_id == str(order.id)
        assert json.loads(event.shipping_address)["pincode"] == "570001"

    def test_total_must_match(self):
        with pytest.raises(ValidationError) as exc:
            _place(total=100.0)
        assert "total" in exc.value.messages

    def test_matching_total_is_accepted(self):
        assert _place(total=690.0).total == 690.0

    def test_unknown_payment_method(self):
        with pytest.raises(ValidationError):
            _place(payment_method="cheque")

    @pytest.mark.parametrize("fee", [-10, 12.5])
    def test_delivery_fee_must_be_non_negative_integer(self, fee):
        with pytest.raises(ValidationError):
            _place(delivery_fee=fee)


class TestLineItems:
    def test_records_snapshot(self):
        order = _place()
        order._events.clear()

        assert order.record_line_items(LINES) is True
        assert len(order.items) == 2
        assert order.line_items_subtotal == order.subtotal
        assert order.seller_ids == ["s-1", "s-2"]

        event = order._events[0]
        assert isinstance(event, LineItemsRecorded)
        assert json.loads(event.seller_ids) == ["s-1", "s-2"]

    def test_second_recording_is_ignored(self):
        order = _place()
        order.record_line_items(LINES)
        order._events.clear()

        assert order.record_line_items(LINES) is False
        assert order._events == []
        assert len(order.items) == 2

    def test_items_must_add_up_to_subtotal(self):
        order = _place(subtotal=100.0)
        with pytest.raises(ValidationError):
            order.record_line_items(LINES)

    def test_at_least_one_item(self):
        order = _place()
        with pytest.raises(ValidationError):
            order.record_line_items([])
