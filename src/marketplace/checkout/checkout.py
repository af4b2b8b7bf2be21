"""Checkout aggregate (CQRS): the saga record of one checkout attempt.

Placing an order touches three independent records: the order header, its
line items, and one stock row per product. They are not written in a single
transaction, so every attempt is tracked here stage by stage. A checkout that
stops half-way stays visible and can be finished later by reconciliation.

Stages:
    processing → header_committed → line_items_recorded → stock_updated → completed
    processing → failed              (header never written, nothing to repair)
    header_committed / line_items_recorded → stalled until reconciled
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text

from marketplace.domain import marketplace


class CheckoutStage(Enum):
    PROCESSING = "processing"
    HEADER_COMMITTED = "header_committed"
    LINE_ITEMS_RECORDED = "line_items_recorded"
    STOCK_UPDATED = "stock_updated"
    COMPLETED = "completed"
    FAILED = "failed"


class NotificationStatus(Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


_STAGE_SEQUENCE = [
    CheckoutStage.PROCESSING,
    CheckoutStage.HEADER_COMMITTED,
    CheckoutStage.LINE_ITEMS_RECORDED,
    CheckoutStage.STOCK_UPDATED,
    CheckoutStage.COMPLETED,
]

_STALLED_STAGES = {
    CheckoutStage.HEADER_COMMITTED,
    CheckoutStage.LINE_ITEMS_RECORDED,
    CheckoutStage.STOCK_UPDATED,
}


@marketplace.aggregate
class Checkout:
    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()
    payment_method = String(max_length=10)
    line_items = Text()  # JSON: line item snapshot taken from the cart
    stage = String(choices=CheckoutStage, default=CheckoutStage.PROCESSING.value)
    failure_stage = String(max_length=50)
    failure_reason = String(max_length=1000)
    notification_status = String(choices=NotificationStatus, default=NotificationStatus.PENDING.value)
    notification_error = String(max_length=1000)
    started_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    @classmethod
    def start(cls, cart_id, customer_id, payment_method, line_items):
        now = datetime.now(UTC)
        return cls(
            cart_id=cart_id,
            customer_id=customer_id,
            payment_method=payment_method,
            line_items=json.dumps(line_items),
            stage=CheckoutStage.PROCESSING.value,
            notification_status=NotificationStatus.PENDING.value,
            started_at=now,
            updated_at=now,
        )

    @property
    def items(self) -> list[dict]:
        return json.loads(self.line_items) if self.line_items else []

    @property
    def needs_reconciliation(self) -> bool:
        """An order header exists but later steps never finished."""
        if CheckoutStage(self.stage) in _STALLED_STAGES:
            return True
        return (
            CheckoutStage(self.stage) == CheckoutStage.COMPLETED
            and self.notification_status == NotificationStatus.FAILED.value
        )

    def has_reached(self, stage: CheckoutStage) -> bool:
        current = CheckoutStage(self.stage)
        if current == CheckoutStage.FAILED:
            return False
        return _STAGE_SEQUENCE.index(current) >= _STAGE_SEQUENCE.index(stage)

    def _advance(self, stage: CheckoutStage):
        if CheckoutStage(self.stage) == CheckoutStage.FAILED:
            raise ValidationError({"stage": ["A failed checkout cannot continue"]})
        if not self.has_reached(stage):
            self.stage = stage.value
        self.failure_stage = None
        self.failure_reason = None
        self.updated_at = datetime.now(UTC)

    def header_committed(self, order_id):
        self.order_id = order_id
        self._advance(CheckoutStage.HEADER_COMMITTED)

    def line_items_recorded(self):
        self._advance(CheckoutStage.LINE_ITEMS_RECORDED)

    def stock_updated(self):
        self._advance(CheckoutStage.STOCK_UPDATED)

    def complete(self):
        now = datetime.now(UTC)
        self._advance(CheckoutStage.COMPLETED)
        self.completed_at = self.completed_at or now

    def stall(self, stage: str, reason: str):
        """Record why a step after the header failed. The stage is kept."""
        self.failure_stage = stage
        self.failure_reason = reason[:1000]
        self.updated_at = datetime.now(UTC)

    def fail(self, reason: str):
        """The header was never written. Nothing to reconcile."""
        self.stage = CheckoutStage.FAILED.value
        self.failure_stage = "header"
        self.failure_reason = reason[:1000]
        self.updated_at = datetime.now(UTC)

    def notifications_sent(self):
        self.notification_status = NotificationStatus.SENT.value
        self.notification_error = None
        self.updated_at = datetime.now(UTC)

    def notifications_failed(self, reason: str):
        self.notification_status = NotificationStatus.FAILED.value
        self.notification_error = reason[:1000]
        self.updated_at = datetime.now(UTC)
