"""Publishes committed domain changes onto the change feed.

Handlers run after the unit of work commits, so subscribers never see a
change that was rolled back.
"""

import json

from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notification.events import NotificationCreated, NotificationRead
from marketplace.notification.notification import Notification
from marketplace.order.events import (
    LineItemsRecorded,
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
)
from marketplace.order.order import Order, OrderStatus
from marketplace.realtime.deltas import ChangeType, NotificationDelta, OrderDelta, ProductStockDelta
from marketplace.realtime.feed import Stream, get_change_feed
from marketplace.stock.events import StockDecremented, StockLevelSet
from marketplace.stock.stock import ProductStock


def _seller_ids(event) -> list[str]:
    return json.loads(event.seller_ids) if event.seller_ids else []


@marketplace.event_handler(part_of=Order)
class OrderChangePublisher:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        get_change_feed().publish(
            Stream.ORDERS,
            OrderDelta(
                change=ChangeType.INSERT,
                order_id=str(event.order_id),
                customer_id=str(event.customer_id),
                status=OrderStatus.PENDING.value,
                total=event.total,
                changed_at=event.placed_at,
            ),
        )

    @handle(LineItemsRecorded)
    def on_line_items_recorded(self, event: LineItemsRecorded) -> None:
        get_change_feed().publish(
            Stream.ORDERS,
            OrderDelta(
                change=ChangeType.UPDATE,
                order_id=str(event.order_id),
                customer_id=str(event.customer_id),
                status=OrderStatus.PENDING.value,
                previous_status=OrderStatus.PENDING.value,
                seller_ids=_seller_ids(event),
                total=event.total,
                changed_at=event.recorded_at,
            ),
        )

    def _publish_status(self, event, status: OrderStatus, changed_at) -> None:
        get_change_feed().publish(
            Stream.ORDERS,
            OrderDelta(
                change=ChangeType.UPDATE,
                order_id=str(event.order_id),
                customer_id=str(event.customer_id),
                status=status.value,
                previous_status=event.previous_status,
                seller_ids=_seller_ids(event),
                changed_at=changed_at,
            ),
        )

    @handle(OrderConfirmed)
    def on_order_confirmed(self, event: OrderConfirmed) -> None:
        self._publish_status(event, OrderStatus.CONFIRMED, event.confirmed_at)

    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped) -> None:
        self._publish_status(event, OrderStatus.SHIPPED, event.shipped_at)

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        self._publish_status(event, OrderStatus.DELIVERED, event.delivered_at)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        self._publish_status(event, OrderStatus.CANCELLED, event.cancelled_at)


@marketplace.event_handler(part_of=ProductStock)
class StockChangePublisher:
    @handle(StockLevelSet)
    def on_stock_level_set(self, event: StockLevelSet) -> None:
        get_change_feed().publish(
            Stream.STOCK,
            ProductStockDelta(
                product_id=str(event.product_id),
                seller_id=event.seller_id,
                stock=event.new_stock,
                previous_stock=event.previous_stock,
                changed_at=event.set_at,
            ),
        )

    @handle(StockDecremented)
    def on_stock_decremented(self, event: StockDecremented) -> None:
        get_change_feed().publish(
            Stream.STOCK,
            ProductStockDelta(
                product_id=str(event.product_id),
                seller_id=event.seller_id,
                stock=event.new_stock,
                previous_stock=event.previous_stock,
                changed_at=event.decremented_at,
            ),
        )


@marketplace.event_handler(part_of=Notification)
class NotificationChangePublisher:
    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        get_change_feed().publish(
            Stream.NOTIFICATIONS,
            NotificationDelta(
                change=ChangeType.INSERT,
                notification_id=str(event.notification_id),
                recipient_id=str(event.recipient_id),
                kind=event.kind,
                title=event.title,
                message=event.message,
                related_order_id=event.related_order_id,
                changed_at=event.created_at,
            ),
        )

    @handle(NotificationRead)
    def on_notification_read(self, event: NotificationRead) -> None:
        get_change_feed().publish(
            Stream.NOTIFICATIONS,
            NotificationDelta(
                change=ChangeType.UPDATE,
                notification_id=str(event.notification_id),
                recipient_id=str(event.recipient_id),
                is_read=True,
                changed_at=event.read_at,
            ),
        )
