"""Live views that apply change-feed deltas to a cold-loaded snapshot.

A view reads its initial state once, then keeps itself current from deltas
alone. Close it when the consumer goes away.
"""

import json
import threading

from protean.utils.globals import current_domain

from marketplace.identity.actor import Role
from marketplace.notification.feed import recent_notifications, unread_count
from marketplace.projections.order_summary import OrderSummary
from marketplace.projections.seller_order_lines import SellerOrderLine
from marketplace.realtime.deltas import ChangeType, NotificationDelta, OrderDelta, ProductStockDelta
from marketplace.realtime.subscriptions import (
    subscribe_to_notifications,
    subscribe_to_order_changes,
    subscribe_to_seller_orders,
    subscribe_to_stock_changes,
)
from marketplace.stock.stock import ProductStock
from marketplace.utils.settings import setting


class _LiveView:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscription = None

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class OrderBoard(_LiveView):
    """Order list for one customer, one seller, or every order for admins."""

    def __init__(self, role: str, user_id: str | None = None):
        super().__init__()
        self.role = Role(role).value
        self.user_id = str(user_id) if user_id is not None else None
        self._orders: dict[str, dict] = {}

        for summary in self._cold_load():
            self._orders[str(summary.order_id)] = {
                "order_id": str(summary.order_id),
                "customer_id": str(summary.customer_id),
                "status": summary.status,
                "total": summary.total,
                "seller_ids": json.loads(summary.seller_ids) if summary.seller_ids else [],
            }

        if self.role == Role.SELLER.value:
            self._subscription = subscribe_to_seller_orders(self.apply, self.user_id)
        elif self.role == Role.CUSTOMER.value:
            self._subscription = subscribe_to_order_changes(self.apply, customer_id=self.user_id)
        else:
            self._subscription = subscribe_to_order_changes(self.apply)

    def _cold_load(self) -> list[OrderSummary]:
        repo = current_domain.repository_for(OrderSummary)
        if self.role == Role.CUSTOMER.value:
            return repo._dao.query.filter(customer_id=self.user_id).all().items
        if self.role == Role.SELLER.value:
            lines = current_domain.repository_for(SellerOrderLine)._dao.query.filter(seller_id=self.user_id)
            return [repo.get(order_id) for order_id in {str(line.order_id) for line in lines.all().items}]
        return repo._dao.query.all().items

    def apply(self, delta: OrderDelta) -> None:
        with self._lock:
            if delta.change == ChangeType.DELETE:
                self._orders.pop(delta.order_id, None)
                return

            row = self._orders.setdefault(
                delta.order_id,
                {
                    "order_id": delta.order_id,
                    "customer_id": delta.customer_id,
                    "status": delta.status,
                    "total": delta.total,
                    "seller_ids": [],
                },
            )
            row["status"] = delta.status
            if delta.total is not None:
                row["total"] = delta.total
            if delta.seller_ids:
                row["seller_ids"] = list(delta.seller_ids)

    @property
    def orders(self) -> list[dict]:
        with self._lock:
            return [dict(row) for row in self._orders.values()]

    def status_of(self, order_id: str) -> str | None:
        with self._lock:
            row = self._orders.get(str(order_id))
            return row["status"] if row else None


class StockBoard(_LiveView):
    """Current stock per product, for product pages and seller inventory."""

    def __init__(self, product_ids: list[str] | None = None):
        super().__init__()
        self._product_ids = {str(p) for p in product_ids} if product_ids is not None else None
        self._levels: dict[str, int] = {}

        for item in current_domain.repository_for(ProductStock)._dao.query.all().items:
            if self._tracks(str(item.product_id)):
                self._levels[str(item.product_id)] = item.stock

        self._subscription = subscribe_to_stock_changes(self.apply)

    def _tracks(self, product_id: str) -> bool:
        return self._product_ids is None or product_id in self._product_ids

    def apply(self, delta: ProductStockDelta) -> None:
        if not self._tracks(delta.product_id):
            return
        with self._lock:
            if delta.change == ChangeType.DELETE:
                self._levels.pop(delta.product_id, None)
            else:
                self._levels[delta.product_id] = delta.stock

    def stock_of(self, product_id: str) -> int | None:
        with self._lock:
            return self._levels.get(str(product_id))

    @property
    def levels(self) -> dict[str, int]:
        with self._lock:
            return dict(self._levels)


class NotificationInbox(_LiveView):
    """The bell: newest notifications and the unread badge for one user."""

    def __init__(self, user_id: str, limit: int | None = None):
        super().__init__()
        self.user_id = str(user_id)
        self.limit = limit if limit is not None else int(setting("NOTIFICATION_FEED_LIMIT", 10))

        self._items = [
            {
                "notification_id": str(n.id),
                "kind": n.kind,
                "title": n.title,
                "message": n.message,
                "related_order_id": str(n.related_order_id) if n.related_order_id else None,
                "is_read": n.is_read,
            }
            for n in recent_notifications(self.user_id, self.limit)
        ]
        self._unread = unread_count(self.user_id)

        self._subscription = subscribe_to_notifications(self.apply, self.user_id)

    def apply(self, delta: NotificationDelta) -> None:
        with self._lock:
            if delta.change == ChangeType.INSERT:
                self._items.insert(
                    0,
                    {
                        "notification_id": delta.notification_id,
                        "kind": delta.kind,
                        "title": delta.title,
                        "message": delta.message,
                        "related_order_id": delta.related_order_id,
                        "is_read": delta.is_read,
                    },
                )
                del self._items[self.limit :]
                if not delta.is_read:
                    self._unread += 1
            elif delta.change == ChangeType.UPDATE and delta.is_read:
                for item in self._items:
                    if item["notification_id"] == delta.notification_id:
                        item["is_read"] = True
                self._unread = max(0, self._unread - 1)

    @property
    def items(self) -> list[dict]:
        with self._lock:
            return [dict(item) for item in self._items]

    @property
    def unread(self) -> int:
        with self._lock:
            return self._unread
