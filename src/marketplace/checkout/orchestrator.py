"""Checkout orchestrator: turns a cart into an order.

Steps run strictly in sequence and each one is recorded on the ``Checkout``
saga record before the next starts:

    1. write the order header           failure: CommitError, nothing written
    2. record the line-item snapshot    failure: PartialCommitError
    3. decrement stock per line item    failure: PartialCommitError
    4. new-order notifications          failure: logged, never raised
    5. clear the cart                   failure: logged, left for reconciliation

Steps 2 and 3 are idempotent, so a checkout that stopped after the header can
be finished with ``reconcile_checkout``.
"""

import json
from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from marketplace.cart.cart import ShoppingCart
from marketplace.cart.delivery import compute_delivery_fee
from marketplace.cart.items import ClearCart, RemoveFromCart
from marketplace.checkout.checkout import Checkout, CheckoutStage, NotificationStatus
from marketplace.checkout.shipping import validate_shipping_address
from marketplace.domain import logger
from marketplace.errors import AuthorizationError, CommitError, PartialCommitError
from marketplace.identity.actor import Actor
from marketplace.identity.member import display_name
from marketplace.order.order import PaymentMethod
from marketplace.order.placement import PlaceOrder, RecordLineItems
from marketplace.side_effects.port import CREATE_ORDER_NOTIFICATIONS
from marketplace.side_effects.registry import get_side_effect_handler
from marketplace.stock.ledger import decrement_stock


@dataclass(frozen=True)
class PlacedOrder:
    order_id: str
    checkout_id: str
    subtotal: float
    delivery_fee: int
    total: float
    notifications_dispatched: bool


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def _load_cart(cart_id, actor: Actor) -> ShoppingCart:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    if cart.customer_id and str(cart.customer_id) != str(actor.user_id):
        raise AuthorizationError("This cart belongs to someone else", cart_id=str(cart_id))
    return cart


def _validate_payment_method(payment_method):
    try:
        PaymentMethod(payment_method)
    except ValueError:
        raise ValidationError({"payment_method": ["Please choose UPI, card or cash on delivery"]}) from None


# ---------------------------------------------------------------------------
# Saga record
# ---------------------------------------------------------------------------
def _update(checkout_id, action, *args) -> Checkout:
    repo = current_domain.repository_for(Checkout)
    checkout = repo.get(checkout_id)
    getattr(checkout, action)(*args)
    repo.add(checkout)
    return checkout


def _partial_failure(checkout: Checkout, stage: str, exc: Exception) -> PartialCommitError:
    _update(checkout.id, "stall", stage, str(exc))
    logger.error(
        "Checkout stopped after the order header was written",
        checkout_id=str(checkout.id),
        order_id=str(checkout.order_id),
        stage=stage,
        error=str(exc),
    )
    return PartialCommitError(
        "Your order was placed but could not be fully processed",
        order_id=str(checkout.order_id),
        checkout_id=str(checkout.id),
        stage=stage,
        reason=str(exc),
    )


# ---------------------------------------------------------------------------
# Steps after the header
# ---------------------------------------------------------------------------
def _record_line_items(checkout: Checkout) -> Checkout:
    if checkout.has_reached(CheckoutStage.LINE_ITEMS_RECORDED):
        return checkout
    try:
        current_domain.process(
            RecordLineItems(order_id=checkout.order_id, items=json.dumps(checkout.items)),
            asynchronous=False,
        )
    except Exception as exc:
        raise _partial_failure(checkout, "line_items", exc) from exc
    return _update(checkout.id, "line_items_recorded")


def _decrement_stock(checkout: Checkout) -> Checkout:
    if checkout.has_reached(CheckoutStage.STOCK_UPDATED):
        return checkout
    try:
        for item in checkout.items:
            decrement_stock(item["product_id"], str(checkout.order_id), item["quantity"])
    except Exception as exc:
        raise _partial_failure(checkout, "stock", exc) from exc
    return _update(checkout.id, "stock_updated")


def _dispatch_notifications(checkout: Checkout) -> Checkout:
    if checkout.notification_status == NotificationStatus.SENT.value:
        return checkout
    try:
        get_side_effect_handler().invoke(
            CREATE_ORDER_NOTIFICATIONS,
            {"order_id": str(checkout.order_id), "requested_by": str(checkout.customer_id)},
        )
    except Exception as exc:
        logger.warning(
            "Order notifications failed",
            checkout_id=str(checkout.id),
            order_id=str(checkout.order_id),
            error=str(exc),
        )
        return _update(checkout.id, "notifications_failed", str(exc))
    return _update(checkout.id, "notifications_sent")


def _finish(checkout: Checkout) -> Checkout:
    checkout = _record_line_items(checkout)
    checkout = _decrement_stock(checkout)
    return _dispatch_notifications(checkout)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
def place_order(cart_id: str, shipping_address: dict, payment_method: str, actor: Actor) -> PlacedOrder:
    """Place an order from the actor's cart.

    Raises ``ValidationError`` for bad input (nothing is written),
    ``CommitError`` if the order header cannot be written, and
    ``PartialCommitError`` if a later required step fails.
    """
    cart = _load_cart(cart_id, actor)
    address = validate_shipping_address(shipping_address)
    _validate_payment_method(payment_method)
    if cart.is_empty:
        raise ValidationError({"cart": ["Your cart is empty"]})

    subtotal = cart.subtotal
    delivery_fee = compute_delivery_fee(cart)
    total = round(subtotal + delivery_fee, 2)

    checkout = Checkout.start(
        cart_id=str(cart.id),
        customer_id=actor.user_id,
        payment_method=payment_method,
        line_items=cart.snapshot_line_items(),
    )
    current_domain.repository_for(Checkout).add(checkout)

    try:
        order_id = current_domain.process(
            PlaceOrder(
                customer_id=actor.user_id,
                customer_name=display_name(actor.user_id, fallback=address["full_name"]),
                shipping_address=json.dumps(address),
                payment_method=payment_method,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total=total,
            ),
            asynchronous=False,
        )
    except Exception as exc:
        _update(checkout.id, "fail", str(exc))
        logger.error("Failed to place order", checkout_id=str(checkout.id), cart_id=str(cart_id), error=str(exc))
        raise CommitError("Failed to place order", checkout_id=str(checkout.id)) from exc

    checkout = _update(checkout.id, "header_committed", order_id)
    logger.info("Order header committed", order_id=order_id, checkout_id=str(checkout.id))

    checkout = _finish(checkout)

    try:
        current_domain.process(ClearCart(cart_id=str(cart.id)), asynchronous=False)
    except Exception as exc:
        checkout = _update(checkout.id, "stall", "cart", str(exc))
        logger.error(
            "Cart could not be cleared after checkout",
            checkout_id=str(checkout.id),
            order_id=order_id,
            cart_id=str(cart.id),
            error=str(exc),
        )
    else:
        checkout = _update(checkout.id, "complete")

    logger.info(
        "Order placed",
        order_id=order_id,
        customer_id=actor.user_id,
        total=total,
        notifications=checkout.notification_status,
    )
    return PlacedOrder(
        order_id=str(order_id),
        checkout_id=str(checkout.id),
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        total=total,
        notifications_dispatched=checkout.notification_status == NotificationStatus.SENT.value,
    )


def reconcile_checkout(checkout_id: str) -> Checkout:
    """Finish a checkout that stopped after its order header was written.

    Replays missing line items and stock decrements, retries notifications
    that never went out, and drops the checked-out products from the cart.
    Safe to call repeatedly. Failed and in-progress checkouts are returned
    unchanged.
    """
    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    if not checkout.needs_reconciliation:
        return checkout

    checkout = _finish(checkout)

    if not checkout.has_reached(CheckoutStage.COMPLETED):
        _remove_checked_out_products(checkout)
        checkout = _update(checkout.id, "complete")

    logger.info(
        "Checkout reconciled",
        checkout_id=str(checkout.id),
        order_id=str(checkout.order_id),
        notifications=checkout.notification_status,
    )
    return checkout


def _remove_checked_out_products(checkout: Checkout):
    try:
        cart = current_domain.repository_for(ShoppingCart).get(checkout.cart_id)
    except ObjectNotFoundError:
        return

    in_cart = {str(item.product_id) for item in cart.items}
    for item in checkout.items:
        if str(item["product_id"]) in in_cart:
            current_domain.process(
                RemoveFromCart(cart_id=str(cart.id), product_id=item["product_id"]),
                asynchronous=False,
            )


def stalled_checkouts() -> list[Checkout]:
    """Checkouts with a written order header whose later steps never finished."""
    checkouts = current_domain.repository_for(Checkout)._dao.query.all().items
    stalled = [c for c in checkouts if c.needs_reconciliation]
    stalled.sort(key=lambda c: c.started_at)
    return stalled
