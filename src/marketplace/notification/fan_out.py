"""New-order fan-out: tell every seller in the order and every admin.

Runs behind the side-effect port. The caller must own the order; the
recipients are derived here from the stored order and the member directory,
never taken from the request.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.errors import AuthorizationError
from marketplace.identity.member import admin_ids, display_name
from marketplace.notification.helpers import notify
from marketplace.notification.notification import Notification
from marketplace.order.order import Order


@marketplace.command(part_of="Notification")
class FanOutNewOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)


@marketplace.command_handler(part_of=Notification)
class NewOrderFanOutHandler:
    @handle(FanOutNewOrder)
    def fan_out(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        if str(order.customer_id) != str(command.requested_by):
            raise AuthorizationError(
                "You don't own this order",
                order_id=str(command.order_id),
                requested_by=str(command.requested_by),
            )

        context = {
            "order_id": str(order.id),
            "customer_name": order.customer_name or display_name(str(order.customer_id)),
            "total": order.total,
            "item_count": len(order.items),
        }

        notification_ids = [
            notify(seller_id, "NewOrderSeller", context, related_order_id=str(order.id))
            for seller_id in order.seller_ids
        ]
        notification_ids += [
            notify(admin_id, "NewOrderAdmin", context, related_order_id=str(order.id)) for admin_id in admin_ids()
        ]
        return notification_ids


def fan_out_new_order(order_id: str, requested_by: str) -> list[str]:
    """Create the new-order notifications and return their ids.

    Raises ``AuthorizationError`` when ``requested_by`` is not the buyer and
    ``ObjectNotFoundError`` when the order does not exist.
    """
    notification_ids = current_domain.process(
        FanOutNewOrder(order_id=order_id, requested_by=requested_by),
        asynchronous=False,
    )
    logger.info("Order notifications created", order_id=order_id, count=len(notification_ids))
    return notification_ids
