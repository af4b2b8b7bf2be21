"""Notification templates.

Each template renders a title and message from event context and names the
notification kind it produces.
"""

from marketplace.notification.notification import NotificationKind
from marketplace.utils.settings import setting


def _money(amount) -> str:
    symbol = setting("CURRENCY_SYMBOL", "₹")
    amount = float(amount or 0)
    return f"{symbol}{int(amount)}" if amount == int(amount) else f"{symbol}{amount:.2f}"


def _short(order_id) -> str:
    return str(order_id)[:8]


class NewOrderSellerTemplate:
    kind = NotificationKind.ORDER.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "New Order Received! 🛒",
            "message": (
                f"{context['customer_name']} placed an order worth {_money(context['total'])}. "
                "Check your dashboard for details."
            ),
        }


class NewOrderAdminTemplate:
    kind = NotificationKind.ORDER.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "New Order Placed! 📦",
            "message": (
                f"{context['customer_name']} placed an order worth {_money(context['total'])} "
                f"with {context['item_count']} item(s)."
            ),
        }


class OrderShippedTemplate:
    kind = NotificationKind.INFO.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Your order is on its way",
            "message": f"Order #{_short(context['order_id'])} has been shipped.",
        }


class OrderDeliveredTemplate:
    kind = NotificationKind.SUCCESS.value

    @staticmethod
    def render(context: dict) -> dict:
        return {
            "title": "Order delivered",
            "message": f"Order #{_short(context['order_id'])} has been delivered. Enjoy!",
        }


class OrderCancelledTemplate:
    kind = NotificationKind.WARNING.value

    @staticmethod
    def render(context: dict) -> dict:
        message = f"Order #{_short(context['order_id'])} was cancelled."
        if context.get("reason"):
            message = f"{message} Reason: {context['reason']}"
        return {"title": "Order cancelled", "message": message}


class StockDepletedTemplate:
    kind = NotificationKind.WARNING.value

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("product_name") or "One of your products"
        return {
            "title": "Out of stock",
            "message": f"{name} just sold out. Update its stock to keep selling.",
        }


TEMPLATE_REGISTRY: dict[str, type] = {
    "NewOrderSeller": NewOrderSellerTemplate,
    "NewOrderAdmin": NewOrderAdminTemplate,
    "OrderShipped": OrderShippedTemplate,
    "OrderDelivered": OrderDeliveredTemplate,
    "OrderCancelled": OrderCancelledTemplate,
    "StockDepleted": StockDepletedTemplate,
}


def get_template(name: str):
    template_cls = TEMPLATE_REGISTRY.get(name)
    if template_cls is None:
        raise ValueError(f"No template registered for: {name}")
    return template_cls
