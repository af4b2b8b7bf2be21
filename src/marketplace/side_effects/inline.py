"""Side-effect handler that runs functions in-process."""

from collections.abc import Callable

from marketplace.domain import logger
from marketplace.errors import NotificationDispatchError
from marketplace.side_effects.port import CREATE_ORDER_NOTIFICATIONS, SideEffectPort


def _create_order_notifications(payload: dict) -> dict:
    from marketplace.notification.fan_out import fan_out_new_order

    notification_ids = fan_out_new_order(
        order_id=payload["order_id"],
        requested_by=payload["requested_by"],
    )
    return {"success": True, "notifications_created": len(notification_ids)}


class InlineSideEffectHandler(SideEffectPort):
    def __init__(self, functions: dict[str, Callable[[dict], dict]] | None = None):
        self.functions = functions or {CREATE_ORDER_NOTIFICATIONS: _create_order_notifications}

    def invoke(self, function: str, payload: dict) -> dict:
        handler = self.functions.get(function)
        if handler is None:
            raise NotificationDispatchError(f"Unknown function: {function}", function=function)

        try:
            return handler(payload)
        except NotificationDispatchError:
            raise
        except Exception as exc:
            logger.warning("Side-effect function failed", function=function, error=str(exc))
            raise NotificationDispatchError(str(exc), function=function) from exc
