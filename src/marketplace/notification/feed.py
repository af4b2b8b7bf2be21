"""Cold-load queries for the notification bell."""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from marketplace.notification.notification import Notification
from marketplace.utils.settings import setting

_EPOCH = datetime.min.replace(tzinfo=UTC)


def recent_notifications(recipient_id: str, limit: int | None = None) -> list[Notification]:
    """Newest first, at most ``limit`` (defaults to ``NOTIFICATION_FEED_LIMIT``)."""
    if limit is None:
        limit = int(setting("NOTIFICATION_FEED_LIMIT", 10))

    repo = current_domain.repository_for(Notification)
    items = repo._dao.query.filter(recipient_id=recipient_id).all().items
    items.sort(key=lambda n: n.created_at or _EPOCH, reverse=True)
    return items[:limit]


def unread_count(recipient_id: str) -> int:
    repo = current_domain.repository_for(Notification)
    return len(repo._dao.query.filter(recipient_id=recipient_id, is_read=False).all().items)
