"""Order summary: listing view for customer and admin order pages."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import (
    LineItemsRecorded,
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
)
from marketplace.order.order import Order, OrderStatus


@marketplace.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=200)
    status = String(required=True)
    payment_method = String(max_length=10)
    item_count = Integer(default=0)
    subtotal = Float(default=0.0)
    delivery_fee = Integer(default=0)
    total = Float(default=0.0)
    seller_ids = Text()  # JSON
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()


@marketplace.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                customer_id=event.customer_id,
                customer_name=event.customer_name,
                status=OrderStatus.PENDING.value,
                payment_method=event.payment_method,
                item_count=0,
                subtotal=event.subtotal,
                delivery_fee=event.delivery_fee,
                total=event.total,
                seller_ids="[]",
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(LineItemsRecorded)
    def on_line_items_recorded(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.item_count = sum(item["quantity"] for item in items)
        summary.seller_ids = event.seller_ids
        summary.updated_at = event.recorded_at
        repo.add(summary)

    def _update_status(self, order_id, status, updated_at, reason=None):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_id)
        summary.status = status
        summary.updated_at = updated_at
        if reason:
            summary.cancellation_reason = reason
        repo.add(summary)

    @on(OrderConfirmed)
    def on_order_confirmed(self, event):
        self._update_status(event.order_id, OrderStatus.CONFIRMED.value, event.confirmed_at)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        self._update_status(event.order_id, OrderStatus.SHIPPED.value, event.shipped_at)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._update_status(event.order_id, OrderStatus.DELIVERED.value, event.delivered_at)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update_status(event.order_id, OrderStatus.CANCELLED.value, event.cancelled_at, event.reason)
