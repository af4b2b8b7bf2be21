"""Application tests for change-feed publishing and live views."""

from marketplace.checkout.orchestrator import place_order
from marketplace.identity.actor import Actor
from marketplace.notification.helpers import notify
from marketplace.notification.reading import mark_read
from marketplace.order.status import advance_order_status
from marketplace.realtime.deltas import ChangeType
from marketplace.realtime.subscriptions import subscribe_to_order_changes, subscribe_to_stock_changes
from marketplace.realtime.views import NotificationInbox, OrderBoard, StockBoard
from marketplace.stock.ledger import decrement_stock, register_stock, set_stock_level

SELLER_ONE = Actor(user_id="seller-1", role="seller")


class TestPublishing:
    def test_checkout_publishes_insert_then_update(self, two_seller_cart, shipping_address, customer):
        received = []
        subscribe_to_order_changes(received.append, customer_id="cust-1")

        placed = place_order(two_seller_cart, shipping_address, "upi", customer)

        assert [d.change for d in received] == [ChangeType.INSERT, ChangeType.UPDATE]
        assert all(d.order_id == placed.order_id for d in received)
        assert received[1].seller_ids == ["seller-1", "seller-2"]

    def test_stock_changes_are_published(self):
        received = []
        subscribe_to_stock_changes(received.append)

        register_stock("p-1", seller_id="seller-1", stock=4)
        decrement_stock("p-1", "ord-1", 1)

        assert [(d.previous_stock, d.stock) for d in received] == [(0, 4), (4, 3)]


class TestOrderBoard:
    def test_seller_board_cold_loads_and_follows_changes(self, placed_order):
        with OrderBoard("seller", "seller-1") as board:
            assert board.status_of(placed_order.order_id) == "pending"

            advance_order_status(placed_order.order_id, "shipped", SELLER_ONE)

            assert board.status_of(placed_order.order_id) == "shipped"

    def test_seller_board_shows_total_of_live_order(self, two_seller_cart, shipping_address, customer):
        with OrderBoard("seller", "seller-1") as board:
            placed = place_order(two_seller_cart, shipping_address, "upi", customer)

            [row] = board.orders
            assert row["order_id"] == placed.order_id
            assert row["total"] == 690.0
            assert row["seller_ids"] == ["seller-1", "seller-2"]

    def test_customer_board_sees_only_own_orders(self, placed_order):
        with OrderBoard("customer", "cust-2") as board:
            assert board.orders == []
            advance_order_status(placed_order.order_id, "confirmed", SELLER_ONE)
            assert board.orders == []

    def test_admin_board_sees_new_orders(self, two_seller_cart, shipping_address, customer):
        with OrderBoard("admin") as board:
            placed = place_order(two_seller_cart, shipping_address, "upi", customer)
            [row] = board.orders
            assert row["order_id"] == placed.order_id
            assert row["total"] == 690.0

    def test_closed_board_stops_updating(self, placed_order):
        board = OrderBoard("customer", "cust-1")
        board.close()

        advance_order_status(placed_order.order_id, "confirmed", SELLER_ONE)
        assert board.status_of(placed_order.order_id) == "pending"


class TestStockBoard:
    def test_tracks_selected_products(self):
        register_stock("p-1", seller_id="seller-1", stock=4)
        register_stock("p-2", seller_id="seller-1", stock=9)

        with StockBoard(["p-1"]) as board:
            assert board.levels == {"p-1": 4}

            set_stock_level("p-1", 6, SELLER_ONE)
            set_stock_level("p-2", 1, SELLER_ONE)

            assert board.levels == {"p-1": 6}


class TestNotificationInbox:
    def test_follows_new_and_read_notifications(self):
        notify("u-1", "OrderShipped", {"order_id": "ord-1"})

        with NotificationInbox("u-1") as inbox:
            assert inbox.unread == 1

            notification_id = notify("u-1", "OrderDelivered", {"order_id": "ord-1"})
            assert inbox.unread == 2
            assert inbox.items[0]["notification_id"] == notification_id

            mark_read(notification_id, "u-1")
            assert inbox.unread == 1
            assert inbox.items[0]["is_read"] is True

    def test_keeps_at_most_the_limit(self):
        with NotificationInbox("u-1", limit=2) as inbox:
            for index in range(3):
                notify("u-1", "OrderShipped", {"order_id": f"ord-{index}"})

            assert len(inbox.items) == 2
            assert inbox.unread == 3
