"""Domain events for the ProductStock aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="ProductStock")
class StockLevelSet:
    """The owning seller (or an admin) set the stock level directly."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier()
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    set_by = Identifier()
    set_at = DateTime(required=True)


@marketplace.event(part_of="ProductStock")
class StockDecremented:
    """Stock was taken by an order. ``applied`` may be below ``requested``."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier()
    order_id = Identifier(required=True)
    requested = Integer(required=True)
    applied = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    decremented_at = DateTime(required=True)


@marketplace.event(part_of="ProductStock")
class StockDepleted:
    """A decrement brought the product to zero."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier()
    product_name = String()
    order_id = Identifier()
    depleted_at = DateTime(required=True)
