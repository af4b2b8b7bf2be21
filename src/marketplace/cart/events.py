"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Identifier, Integer

from marketplace.domain import marketplace


@marketplace.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity was increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a product already in the cart was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A product was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.event(part_of="ShoppingCart")
class CartCleared:
    """Every item was removed, explicitly or after a successful checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)
    cleared_at = DateTime(required=True)
