"""Delivery fee calculator.

The fee is derived from the cart alone, so every screen that shows a price
preview can call it without touching the network. Rules apply in order and
the first match wins:

1. every seller in the cart offers free delivery: no fee
2. subtotal below ``SMALL_ORDER_THRESHOLD``: flat ``SMALL_ORDER_FEE``
3. exactly ``FIXED_TIER_ITEM_COUNT`` items: ``FIXED_TIER_FEE``
4. otherwise ``PER_ITEM_FEE`` per item, capped at ``MAX_FEE``

Rule 3 is a business quirk with no stated rationale. It makes a 5-item cart
dearer than some 6-item carts. Keep it as is until the business says otherwise.
"""

from collections.abc import Iterable

SMALL_ORDER_THRESHOLD = 100
SMALL_ORDER_FEE = 20
FIXED_TIER_ITEM_COUNT = 5
FIXED_TIER_FEE = 120
PER_ITEM_FEE = 30
MAX_FEE = 200


def _line_items(cart) -> list:
    if isinstance(cart, dict):
        return list(cart.get("items", []))
    items = getattr(cart, "items", cart)
    return list(items) if isinstance(items, Iterable) else []


def _value(item, name, default=None):
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def compute_delivery_fee(cart) -> int:
    """Delivery fee for a cart (or any iterable of line items).

    Line items expose ``unit_price``, ``quantity`` and ``seller_free_delivery``,
    as attributes or mapping keys.
    """
    items = _line_items(cart)

    if all(bool(_value(item, "seller_free_delivery", False)) for item in items):
        return 0

    subtotal = sum(_value(item, "unit_price", 0) * _value(item, "quantity", 0) for item in items)
    if subtotal < SMALL_ORDER_THRESHOLD:
        return SMALL_ORDER_FEE

    item_count = sum(_value(item, "quantity", 0) for item in items)
    if item_count == FIXED_TIER_ITEM_COUNT:
        return FIXED_TIER_FEE

    return min(PER_ITEM_FEE * item_count, MAX_FEE)
