"""Domain events for the Order aggregate.

Orders are event sourced. These events rebuild order state on replay, feed
the order read models, and are turned into realtime deltas for dashboards.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """The order header was committed at checkout. Line items follow."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_name = String()
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True)
    subtotal = Float(required=True)
    delivery_fee = Integer(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class LineItemsRecorded:
    """The immutable line-item snapshot was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item dicts
    seller_ids = Text(required=True)  # JSON: distinct seller ids
    total = Float()
    recorded_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    changed_by = Identifier(required=True)
    changed_by_role = String(required=True)
    seller_ids = Text()  # JSON
    confirmed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    changed_by = Identifier(required=True)
    changed_by_role = String(required=True)
    seller_ids = Text()  # JSON
    shipped_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    changed_by = Identifier(required=True)
    changed_by_role = String(required=True)
    seller_ids = Text()  # JSON
    delivered_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    changed_by = Identifier(required=True)
    changed_by_role = String(required=True)
    seller_ids = Text()  # JSON
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


STATUS_EVENTS = (OrderConfirmed, OrderShipped, OrderDelivered, OrderCancelled)
