"""Delta payloads carried on the change feed.

Each delta describes one committed row change. Views apply them directly
instead of re-reading the store.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class OrderDelta(BaseModel):
    change: ChangeType
    order_id: str
    customer_id: str
    status: str
    previous_status: str | None = None
    seller_ids: list[str] = Field(default_factory=list)
    total: float | None = None
    changed_at: datetime


class ProductStockDelta(BaseModel):
    change: ChangeType = ChangeType.UPDATE
    product_id: str
    seller_id: str | None = None
    stock: int
    previous_stock: int | None = None
    changed_at: datetime


class NotificationDelta(BaseModel):
    change: ChangeType
    notification_id: str
    recipient_id: str
    kind: str | None = None
    title: str | None = None
    message: str | None = None
    related_order_id: str | None = None
    is_read: bool = False
    changed_at: datetime


class CounterDelta(BaseModel):
    """Community counters (likes, replies) owned by the forum service."""

    change: ChangeType = ChangeType.UPDATE
    entity_type: str
    entity_id: str
    counter: str
    value: int
    changed_at: datetime
