"""Notifications raised in reaction to order and stock events.

Customers hear about their order leaving, arriving or being cancelled by
someone else. Sellers hear when checkout sells out one of their products.
"""

from protean.utils.mixins import handle

from marketplace.domain import logger, marketplace
from marketplace.notification.helpers import notify
from marketplace.notification.notification import Notification
from marketplace.order.events import OrderCancelled, OrderDelivered, OrderShipped
from marketplace.stock.events import StockDepleted


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::order")
class OrderStatusNotifier:
    @handle(OrderShipped)
    def on_order_shipped(self, event: OrderShipped) -> None:
        notify(
            str(event.customer_id),
            "OrderShipped",
            {"order_id": str(event.order_id)},
            related_order_id=str(event.order_id),
        )

    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        notify(
            str(event.customer_id),
            "OrderDelivered",
            {"order_id": str(event.order_id)},
            related_order_id=str(event.order_id),
        )

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        if str(event.changed_by) == str(event.customer_id):
            return
        notify(
            str(event.customer_id),
            "OrderCancelled",
            {"order_id": str(event.order_id), "reason": event.reason},
            related_order_id=str(event.order_id),
        )


@marketplace.event_handler(part_of=Notification, stream_category="marketplace::product_stock")
class StockDepletedNotifier:
    @handle(StockDepleted)
    def on_stock_depleted(self, event: StockDepleted) -> None:
        if not event.seller_id:
            logger.info("Depleted product has no seller, skipping", product_id=str(event.product_id))
            return
        notify(
            str(event.seller_id),
            "StockDepleted",
            {"product_id": str(event.product_id), "product_name": event.product_name},
            related_order_id=str(event.order_id) if event.order_id else None,
        )
