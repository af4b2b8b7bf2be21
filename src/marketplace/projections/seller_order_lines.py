"""Seller order lines: one row per line item, for seller dashboards.

Rows carry the owning seller and the order's current status, so a seller sees
only their own items without reading other sellers' lines.
"""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.events import (
    LineItemsRecorded,
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderShipped,
)
from marketplace.order.order import Order, OrderStatus
from marketplace.projections.order_summary import OrderSummary


@marketplace.projection
class SellerOrderLine:
    line_id = String(identifier=True, required=True, max_length=100)  # order_id:product_id
    order_id = Identifier(required=True)
    seller_id = Identifier()
    customer_id = Identifier(required=True)
    customer_name = String(max_length=200)
    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    quantity = Integer(default=0)
    unit_price = Float(default=0.0)
    line_total = Float(default=0.0)
    status = String(required=True)
    ordered_at = DateTime()
    updated_at = DateTime()


@marketplace.projector(projector_for=SellerOrderLine, aggregates=[Order])
class SellerOrderLineProjector:
    @on(LineItemsRecorded)
    def on_line_items_recorded(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        summary = current_domain.repository_for(OrderSummary).get(event.order_id)

        repo = current_domain.repository_for(SellerOrderLine)
        for item in items:
            repo.add(
                SellerOrderLine(
                    line_id=f"{event.order_id}:{item['product_id']}",
                    order_id=event.order_id,
                    seller_id=item.get("seller_id"),
                    customer_id=event.customer_id,
                    customer_name=summary.customer_name,
                    product_id=item["product_id"],
                    product_name=item.get("product_name"),
                    quantity=item["quantity"],
                    unit_price=item["unit_price"],
                    line_total=round(item["unit_price"] * item["quantity"], 2),
                    status=summary.status,
                    ordered_at=summary.created_at,
                    updated_at=event.recorded_at,
                )
            )

    def _update_status(self, order_id, status, updated_at):
        repo = current_domain.repository_for(SellerOrderLine)
        for line in repo._dao.query.filter(order_id=order_id).all().items:
            line.status = status
            line.updated_at = updated_at
            repo.add(line)

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
        self._update_status(event.order_id, OrderStatus.CANCELLED.value, event.cancelled_at)
