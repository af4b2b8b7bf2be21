"""Notification aggregate (CQRS): an in-app message for one user.

Notifications are created by the order fan-out and by status and stock
reactions. The recipient reads them in the bell feed; nothing else changes
after creation except the read flag.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from marketplace.domain import marketplace
from marketplace.notification.events import NotificationCreated, NotificationRead


class NotificationKind(Enum):
    ORDER = "order"
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


@marketplace.aggregate
class Notification:
    recipient_id: Identifier(required=True)
    kind: String(choices=NotificationKind, default=NotificationKind.INFO.value)
    title: String(required=True, max_length=200)
    message: Text(required=True)
    related_order_id: Identifier()
    is_read: Boolean(default=False)
    created_at: DateTime()
    read_at: DateTime()

    @classmethod
    def create(cls, recipient_id, kind, title, message, related_order_id=None):
        now = datetime.now(UTC)
        notification = cls(
            recipient_id=recipient_id,
            kind=kind,
            title=title,
            message=message,
            related_order_id=related_order_id,
            is_read=False,
            created_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                kind=kind,
                title=title,
                message=message,
                related_order_id=str(related_order_id) if related_order_id else None,
                created_at=now,
            )
        )
        return notification

    def mark_read(self) -> bool:
        """Flag as read. Returns False if it already was."""
        if self.is_read:
            return False

        now = datetime.now(UTC)
        self.is_read = True
        self.read_at = now

        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                recipient_id=str(self.recipient_id),
                read_at=now,
            )
        )
        return True
