"""Render a template and store the resulting notification."""

from protean.utils.globals import current_domain

from marketplace.notification.notification import Notification
from marketplace.notification.templates import get_template


def notify(recipient_id: str, template: str, context: dict, related_order_id: str | None = None) -> str:
    """Create one notification for ``recipient_id`` and return its id."""
    template_cls = get_template(template)
    rendered = template_cls.render(context)

    notification = Notification.create(
        recipient_id=recipient_id,
        kind=template_cls.kind,
        title=rendered["title"],
        message=rendered["message"],
        related_order_id=related_order_id,
    )
    current_domain.repository_for(Notification).add(notification)
    return str(notification.id)
