"""Tests for notification templates and the Notification aggregate."""

import pytest
from marketplace.notification.events import NotificationCreated, NotificationRead
from marketplace.notification.notification import Notification, NotificationKind
from marketplace.notification.templates import (
    NewOrderAdminTemplate,
    NewOrderSellerTemplate,
    OrderCancelledTemplate,
    StockDepletedTemplate,
    get_template,
)


class TestNewOrderTemplates:
    def test_seller_message(self):
        rendered = NewOrderSellerTemplate.render({"customer_name": "Asha Rao", "total": 690.0})

        assert rendered["title"] == "New Order Received! 🛒"
        assert rendered["message"] == "Asha Rao placed an order worth ₹690. Check your dashboard for details."

    def test_admin_message_counts_items(self):
        rendered = NewOrderAdminTemplate.render({"customer_name": "Asha Rao", "total": 1250.5, "item_count": 3})

        assert rendered["title"] == "New Order Placed! 📦"
        assert rendered["message"] == "Asha Rao placed an order worth ₹1250.50 with 3 item(s)."

    def test_both_are_order_kind(self):
        assert NewOrderSellerTemplate.kind == NotificationKind.ORDER.value
        assert NewOrderAdminTemplate.kind == NotificationKind.ORDER.value


class TestOtherTemplates:
    def test_cancellation_includes_reason(self):
        rendered = OrderCancelledTemplate.render({"order_id": "abcdef123456", "reason": "Out of stock"})
        assert rendered["message"] == "Order #abcdef12 was cancelled. Reason: Out of stock"

    def test_cancellation_without_reason(self):
        rendered = OrderCancelledTemplate.render({"order_id": "abcdef123456", "reason": None})
        assert rendered["message"] == "Order #abcdef12 was cancelled."

    def test_stock_depleted_falls_back_to_generic_name(self):
        rendered = StockDepletedTemplate.render({"product_name": None})
        assert rendered["message"].startswith("One of your products just sold out")

    def test_unknown_template(self):
        with pytest.raises(ValueError):
            get_template("Birthday")


class TestNotificationAggregate:
    def test_create_is_unread(self):
        notification = Notification.create(
            recipient_id="seller-1",
            kind="order",
            title="New Order Received! 🛒",
            message="Someone bought something",
            related_order_id="ord-1",
        )

        assert notification.is_read is False
        event = notification._events[0]
        assert isinstance(event, NotificationCreated)
        assert event.recipient_id == "seller-1"
        assert event.related_order_id == "ord-1"

    def test_mark_read_is_idempotent(self):
        notification = Notification.create(recipient_id="u-1", kind="info", title="Hi", message="Hello")
        notification._events.clear()

        assert notification.mark_read() is True
        assert notification.read_at is not None
        assert isinstance(notification._events[0], NotificationRead)

        notification._events.clear()
        assert notification.mark_read() is False
        assert notification._events == []
