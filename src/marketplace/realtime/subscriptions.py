"""Typed subscriptions for dashboard and bell consumers."""

from collections.abc import Callable

from marketplace.realtime.deltas import CounterDelta, NotificationDelta, OrderDelta, ProductStockDelta
from marketplace.realtime.feed import Stream, Subscription, get_change_feed


def subscribe_to_order_changes(callback: Callable[[OrderDelta], None], customer_id: str | None = None) -> Subscription:
    """All order changes, or only one customer's when ``customer_id`` is given."""
    predicate = None
    if customer_id is not None:
        predicate = lambda delta: delta.customer_id == str(customer_id)  # noqa: E731
    return get_change_feed().subscribe(Stream.ORDERS, callback, predicate)


def subscribe_to_seller_orders(callback: Callable[[OrderDelta], None], seller_id: str) -> Subscription:
    seller_id = str(seller_id)
    return get_change_feed().subscribe(Stream.ORDERS, callback, lambda delta: seller_id in delta.seller_ids)


def subscribe_to_stock_changes(callback: Callable[[ProductStockDelta], None]) -> Subscription:
    return get_change_feed().subscribe(Stream.STOCK, callback)


def subscribe_to_notifications(callback: Callable[[NotificationDelta], None], user_id: str) -> Subscription:
    user_id = str(user_id)
    return get_change_feed().subscribe(
        Stream.NOTIFICATIONS,
        callback,
        lambda delta: delta.recipient_id == user_id,
    )


def subscribe_to_community_counters(
    callback: Callable[[CounterDelta], None], entity_id: str | None = None
) -> Subscription:
    predicate = None
    if entity_id is not None:
        predicate = lambda delta: delta.entity_id == str(entity_id)  # noqa: E731
    return get_change_feed().subscribe(Stream.COMMUNITY, callback, predicate)
