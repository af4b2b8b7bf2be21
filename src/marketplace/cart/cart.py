"""Shopping Cart aggregate: a buyer's session-scoped selection of products.

Each line keeps a snapshot of the product as it looked when it was added
(name, unit price, image, stock, seller and whether that seller delivers for
free). The cart never talks to the catalogue; everything checkout and the
delivery fee calculator need travels with the line.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from marketplace.domain import marketplace


@marketplace.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    image_url = String(max_length=1000)
    stock = Integer(default=0)
    seller_id = Identifier()
    seller_free_delivery = Boolean(default=False)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@marketplace.aggregate
class ShoppingCart:
    customer_id = Identifier()
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id=None, session_id=None):
        now = datetime.now(UTC)
        return cls(
            customer_id=customer_id,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def subtotal(self):
        return round(sum(item.unit_price * item.quantity for item in self.items), 2)

    @property
    def total_item_count(self):
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self):
        return not self.items

    def _find(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Add a product snapshot to the cart, or top up an existing line.

        ``product`` is a mapping with ``product_id``, ``name``, ``unit_price``
        and optionally ``image_url``, ``stock``, ``seller_id`` and
        ``seller_free_delivery``.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product_id = str(product["product_id"])
        now = datetime.now(UTC)
        existing = self._find(product_id)

        if existing:
            existing.quantity += quantity
            # Keep the freshest snapshot of price, stock and delivery terms
            existing.product_name = product.get("name", existing.product_name)
            existing.unit_price = product.get("unit_price", existing.unit_price)
            existing.image_url = product.get("image_url", existing.image_url)
            existing.stock = product.get("stock", existing.stock)
            existing.seller_free_delivery = product.get("seller_free_delivery", existing.seller_free_delivery)
            new_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    product_name=product["name"],
                    unit_price=product["unit_price"],
                    image_url=product.get("image_url"),
                    stock=product.get("stock", 0),
                    seller_id=product.get("seller_id"),
                    seller_free_delivery=bool(product.get("seller_free_delivery", False)),
                    quantity=quantity,
                    added_at=now,
                )
            )
            new_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=product_id,
                quantity=quantity,
                new_quantity=new_quantity,
            )
        )

    def update_quantity(self, product_id, quantity):
        """Set a line's quantity. Zero or less removes the line."""
        item = self._find(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        if quantity <= 0:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        item = self._find(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Product is not in the cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        """Empty the cart."""
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed=removed,
                cleared_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Checkout support
    # -------------------------------------------------------------------
    def snapshot_line_items(self):
        """Order line items as they will be recorded, in cart order."""
        return [
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "seller_id": str(item.seller_id) if item.seller_id else None,
            }
            for item in self.items
        ]
