"""Order aggregate (Event Sourced): the durable record of a placed order.

An order is written in two steps at checkout: the header (customer, address,
payment method and totals) and then the immutable line-item snapshot. After
that only its status moves, driven by sellers and admins.

State Machine:
    pending → confirmed → shipped → delivered
    cancelled is reachable from any non-terminal state
    delivered and cancelled are terminal

Moves are forward only. Skipping ahead (pending → shipped) is allowed, going
back never is.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import apply
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.errors import AuthorizationError, InvalidTransitionError
from marketplace.identity.actor import Role
from marketplace.order.events import (
    LineItemsRecorded,
    OrderCancelled,
    OrderConfirmed,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    UPI = "upi"
    CARD = "card"
    COD = "cod"


_FULFILLMENT_SEQUENCE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


def is_valid_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if current in TERMINAL_STATES:
        return False
    if target == OrderStatus.CANCELLED:
        return True
    return _FULFILLMENT_SEQUENCE.index(target) > _FULFILLMENT_SEQUENCE.index(current)


def allowed_next_statuses(current: OrderStatus) -> list[OrderStatus]:
    """Statuses a privileged actor may move an order to from ``current``."""
    return [s for s in OrderStatus if is_valid_transition(current, s)]


def parse_status(value) -> OrderStatus:
    try:
        return value if isinstance(value, OrderStatus) else OrderStatus(value)
    except ValueError:
        raise ValidationError({"status": [f"Unknown order status: {value}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes, captured at checkout and never edited afterwards."""

    full_name = String(required=True, max_length=200)
    phone = String(required=True, max_length=15)
    address = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    pincode = String(required=True, max_length=10)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderLineItem:
    """One product and quantity as bought. Independent of later catalogue edits."""

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    seller_id = Identifier()


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@marketplace.aggregate(is_event_sourced=True)
class Order:
    customer_id = Identifier(required=True)
    customer_name = String(max_length=200)
    items = HasMany(OrderLineItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(choices=PaymentMethod, max_length=10)
    subtotal = Float(default=0.0)
    delivery_fee = Integer(default=0, min_value=0)
    total = Float(default=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    cancellation_reason = String(max_length=500)
    cancelled_by = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        shipping_address,
        payment_method,
        subtotal,
        delivery_fee,
        total=None,
        customer_name=None,
    ):
        """Commit the order header in ``pending`` status.

        ``total`` is optional; when given it must equal subtotal plus the
        delivery fee.
        """
        try:
            PaymentMethod(payment_method)
        except ValueError:
            raise ValidationError({"payment_method": [f"Unsupported payment method: {payment_method}"]}) from None

        if not isinstance(delivery_fee, int) or delivery_fee < 0:
            raise ValidationError({"delivery_fee": ["Delivery fee must be a non-negative integer"]})

        subtotal = round(subtotal, 2)
        expected_total = round(subtotal + delivery_fee, 2)
        if total is not None and round(total, 2) != expected_total:
            raise ValidationError({"total": ["Order total must equal subtotal plus delivery fee"]})

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                customer_name=customer_name,
                shipping_address=json.dumps(shipping_address),
                payment_method=payment_method,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total=expected_total,
                placed_at=datetime.now(UTC),
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def seller_ids(self) -> list[str]:
        return sorted({str(item.seller_id) for item in self.items if item.seller_id})

    @property
    def line_items_subtotal(self):
        return round(sum(item.unit_price * item.quantity for item in self.items), 2)

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATES

    def allowed_next_statuses(self) -> list[str]:
        return [s.value for s in allowed_next_statuses(OrderStatus(self.status))]

    # -------------------------------------------------------------------
    # Line items
    # -------------------------------------------------------------------
    def record_line_items(self, items_data) -> bool:
        """Attach the line-item snapshot. Returns False if already recorded."""
        if self.items:
            return False

        if not items_data:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        items_subtotal = round(sum(i["unit_price"] * i["quantity"] for i in items_data), 2)
        if items_subtotal != round(self.subtotal, 2):
            raise ValidationError({"items": ["Line items do not add up to the order subtotal"]})

        # Pre-generate item IDs for deterministic replay
        items_with_ids = [{**item, "id": str(uuid4())} for item in items_data]
        seller_ids = sorted({str(i["seller_id"]) for i in items_data if i.get("seller_id")})

        self.raise_(
            LineItemsRecorded(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                items=json.dumps(items_with_ids),
                seller_ids=json.dumps(seller_ids),
                total=self.total,
                recorded_at=datetime.now(UTC),
            )
        )
        return True

    # -------------------------------------------------------------------
    # Guards
    # -------------------------------------------------------------------
    def _assert_can_manage(self, actor_id, actor_role):
        """Admins manage every order; sellers only orders holding their items."""
        if actor_role == Role.ADMIN.value:
            return
        if actor_role == Role.SELLER.value and str(actor_id) in self.seller_ids:
            return
        raise AuthorizationError(
            "You are not allowed to manage this order",
            order_id=str(self.id),
            actor_id=str(actor_id),
        )

    def _assert_can_transition(self, target: OrderStatus):
        current = OrderStatus(self.status)
        if current in TERMINAL_STATES:
            raise InvalidTransitionError({"status": [f"Order is already {current.value} and cannot change"]})
        if not is_valid_transition(current, target):
            raise InvalidTransitionError({"status": [f"Cannot move order from {current.value} to {target.value}"]})

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def advance_to(self, target, actor_id, actor_role):
        """Move the order forward (or cancel it) on behalf of a seller or admin."""
        target = parse_status(target)

        if actor_role not in (Role.SELLER.value, Role.ADMIN.value):
            raise AuthorizationError(
                "Only sellers and admins can change an order's status",
                order_id=str(self.id),
                actor_id=str(actor_id),
            )
        self._assert_can_manage(actor_id, actor_role)
        self._assert_can_transition(target)

        self._raise_status_event(target, actor_id, actor_role)

    def cancel(self, actor_id, actor_role, reason=None):
        """Cancel the order.

        Customers may cancel their own order while it is still pending.
        Sellers and admins follow the same rules as ``advance_to``.
        """
        if actor_role == Role.CUSTOMER.value:
            if str(actor_id) != str(self.customer_id):
                raise AuthorizationError(
                    "You can only cancel your own orders",
                    order_id=str(self.id),
                    actor_id=str(actor_id),
                )
            self._assert_can_transition(OrderStatus.CANCELLED)
            if OrderStatus(self.status) != OrderStatus.PENDING:
                raise AuthorizationError(
                    "Orders can only be cancelled by the customer while pending",
                    order_id=str(self.id),
                    actor_id=str(actor_id),
                )
        else:
            self._assert_can_manage(actor_id, actor_role)
            self._assert_can_transition(OrderStatus.CANCELLED)

        self._raise_status_event(OrderStatus.CANCELLED, actor_id, actor_role, reason=reason)

    def _raise_status_event(self, target, actor_id, actor_role, reason=None):
        now = datetime.now(UTC)
        common = {
            "order_id": str(self.id),
            "customer_id": str(self.customer_id),
            "previous_status": self.status,
            "changed_by": str(actor_id),
            "changed_by_role": actor_role,
            "seller_ids": json.dumps(self.seller_ids),
        }

        if target == OrderStatus.CONFIRMED:
            event = OrderConfirmed(**common, confirmed_at=now)
        elif target == OrderStatus.SHIPPED:
            event = OrderShipped(**common, shipped_at=now)
        elif target == OrderStatus.DELIVERED:
            event = OrderDelivered(**common, delivered_at=now)
        else:
            event = OrderCancelled(**common, reason=reason, cancelled_at=now)

        self.raise_(event)

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.customer_id = event.customer_id
        self.customer_name = event.customer_name
        self.payment_method = event.payment_method
        self.subtotal = event.subtotal
        self.delivery_fee = event.delivery_fee
        self.total = event.total
        self.status = OrderStatus.PENDING.value
        self.created_at = event.placed_at
        self.updated_at = event.placed_at

        address = json.loads(event.shipping_address) if isinstance(event.shipping_address, str) else {}
        if address:
            self.shipping_address = ShippingAddress(**address)

    @apply
    def _on_line_items_recorded(self, event: LineItemsRecorded):
        items_data = json.loads(event.items) if isinstance(event.items, str) else []
        self.items = [OrderLineItem(**item_data) for item_data in items_data]
        self.updated_at = event.recorded_at

    @apply
    def _on_order_confirmed(self, event: OrderConfirmed):
        self.status = OrderStatus.CONFIRMED.value
        self.updated_at = event.confirmed_at

    @apply
    def _on_order_shipped(self, event: OrderShipped):
        self.status = OrderStatus.SHIPPED.value
        self.updated_at = event.shipped_at

    @apply
    def _on_order_delivered(self, event: OrderDelivered):
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = event.delivered_at

    @apply
    def _on_order_cancelled(self, event: OrderCancelled):
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = event.reason
        self.cancelled_by = event.changed_by
        self.updated_at = event.cancelled_at
