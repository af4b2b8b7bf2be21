"""Stock ledger operations used by checkout and the seller product-edit flow.

Concurrent checkouts for the same product race on one ``ProductStock`` row.
The repository rejects a stale write with ``ExpectedVersionError``; the
decrement is then retried against a fresh read, so no update is lost.
"""

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from marketplace.domain import logger
from marketplace.identity.actor import Actor
from marketplace.stock.management import DecrementStock, RegisterProductStock, SetStockLevel
from marketplace.stock.stock import ProductStock
from marketplace.utils.settings import setting


def decrement_stock(product_id: str, order_id: str, quantity: int) -> int:
    """Decrement stock for one order line and return the new level.

    The result is clamped at zero and idempotent per ``(order_id, product_id)``.
    """
    max_attempts = int(setting("STOCK_DECREMENT_MAX_ATTEMPTS", 3))

    attempt = 1
    while True:
        try:
            new_stock = current_domain.process(
                DecrementStock(product_id=product_id, order_id=order_id, quantity=quantity),
                asynchronous=False,
            )
        except ExpectedVersionError:
            logger.warning(
                "Stock write conflict, retrying",
                product_id=product_id,
                order_id=order_id,
                attempt=attempt,
            )
            if attempt >= max_attempts:
                raise
            attempt += 1
            continue

        logger.info(
            "Stock decremented",
            product_id=product_id,
            order_id=order_id,
            quantity=quantity,
            new_stock=new_stock,
        )
        return new_stock


def register_stock(product_id: str, seller_id: str | None = None, product_name: str | None = None, stock: int = 0):
    current_domain.process(
        RegisterProductStock(
            product_id=product_id,
            seller_id=seller_id,
            product_name=product_name,
            stock=stock,
        ),
        asynchronous=False,
    )
    return current_domain.repository_for(ProductStock).get(product_id)


def set_stock_level(product_id: str, stock: int, actor: Actor) -> int:
    """Seller-side direct set. Only the owning seller or an admin may call it."""
    new_stock = current_domain.process(
        SetStockLevel(
            product_id=product_id,
            stock=stock,
            actor_id=actor.user_id,
            actor_role=actor.role,
        ),
        asynchronous=False,
    )
    logger.info("Stock level set", product_id=product_id, stock=new_stock, actor_id=actor.user_id)
    return new_stock


def current_stock(product_id: str) -> ProductStock:
    return current_domain.repository_for(ProductStock).get(product_id)
