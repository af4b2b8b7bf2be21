"""Marking notifications as read. Both operations are idempotent."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import AuthorizationError
from marketplace.notification.notification import Notification


@marketplace.command(part_of="Notification")
class MarkNotificationRead:
    notification_id = Identifier(required=True)
    actor_id = Identifier(required=True)


@marketplace.command(part_of="Notification")
class MarkAllNotificationsRead:
    recipient_id = Identifier(required=True)


@marketplace.command_handler(part_of=Notification)
class NotificationReadingHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command):
        repo = current_domain.repository_for(Notification)
        notification = repo.get(command.notification_id)
        if str(notification.recipient_id) != str(command.actor_id):
            raise AuthorizationError(
                "You can only read your own notifications",
                notification_id=str(command.notification_id),
            )
        if notification.mark_read():
            repo.add(notification)
            return True
        return False

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command):
        repo = current_domain.repository_for(Notification)
        unread = repo._dao.query.filter(recipient_id=command.recipient_id, is_read=False).all().items
        for notification in unread:
            notification.mark_read()
            repo.add(notification)
        return len(unread)


def mark_read(notification_id: str, actor_id: str) -> bool:
    """Returns True if the notification changed."""
    return current_domain.process(
        MarkNotificationRead(notification_id=notification_id, actor_id=actor_id),
        asynchronous=False,
    )


def mark_all_read(recipient_id: str) -> int:
    """Returns the number of notifications that changed."""
    return current_domain.process(
        MarkAllNotificationsRead(recipient_id=recipient_id),
        asynchronous=False,
    )
