"""ProductStock aggregate: the available quantity of one listed product.

Stock belongs to the seller who listed the product. Two flows may change it:
the seller's product-edit flow sets it directly, and checkout decrements it
once per order. Stock never drops below zero; an order asking for more than
is left simply takes what remains.

Each decrement is remembered by order id so that replaying a checkout step
never takes stock twice.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.errors import AuthorizationError
from marketplace.identity.actor import Role
from marketplace.stock.events import StockDecremented, StockDepleted, StockLevelSet


@marketplace.entity(part_of="ProductStock")
class StockDeduction:
    """Idempotency record: stock taken for one order."""

    order_id = Identifier(required=True)
    requested = Integer(required=True, min_value=1)
    applied = Integer(required=True, min_value=0)
    deducted_at = DateTime()


@marketplace.aggregate
class ProductStock:
    product_id = Identifier(identifier=True, required=True)
    seller_id = Identifier()
    product_name = String(max_length=255)
    stock = Integer(default=0, min_value=0)
    deductions = HasMany(StockDeduction)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, product_id, seller_id=None, product_name=None, stock=0):
        if stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        now = datetime.now(UTC)
        item = cls(
            product_id=product_id,
            seller_id=seller_id,
            product_name=product_name,
            stock=0,
            created_at=now,
            updated_at=now,
        )
        item._set(stock, set_by=seller_id)
        return item

    # -------------------------------------------------------------------
    # Direct set (seller product-edit flow)
    # -------------------------------------------------------------------
    def set_level(self, stock, actor_id, actor_role):
        if actor_role != Role.ADMIN.value and not (
            actor_role == Role.SELLER.value and str(actor_id) == str(self.seller_id)
        ):
            raise AuthorizationError(
                "Only the owning seller or an admin can set stock",
                product_id=str(self.product_id),
                actor_id=str(actor_id),
            )
        if stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        self._set(stock, set_by=actor_id)

    def _set(self, stock, set_by=None):
        previous = self.stock or 0
        now = datetime.now(UTC)
        self.stock = stock
        self.updated_at = now

        self.raise_(
            StockLevelSet(
                product_id=str(self.product_id),
                seller_id=str(self.seller_id) if self.seller_id else None,
                previous_stock=previous,
                new_stock=stock,
                set_by=str(set_by) if set_by else None,
                set_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Checkout decrement
    # -------------------------------------------------------------------
    def has_deduction_for(self, order_id) -> bool:
        return any(str(d.order_id) == str(order_id) for d in self.deductions)

    def decrement(self, order_id, quantity) -> int:
        """Take ``quantity`` for ``order_id``, clamped at zero. Returns the new stock.

        A second call for the same order changes nothing.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        if self.has_deduction_for(order_id):
            return self.stock

        previous = self.stock or 0
        new_stock = max(0, previous - quantity)
        applied = previous - new_stock
        now = datetime.now(UTC)

        self.stock = new_stock
        self.updated_at = now
        self.add_deductions(
            StockDeduction(
                order_id=order_id,
                requested=quantity,
                applied=applied,
                deducted_at=now,
            )
        )

        self.raise_(
            StockDecremented(
                product_id=str(self.product_id),
                seller_id=str(self.seller_id) if self.seller_id else None,
                order_id=str(order_id),
                requested=quantity,
                applied=applied,
                previous_stock=previous,
                new_stock=new_stock,
                decremented_at=now,
            )
        )

        if new_stock == 0 and previous > 0:
            self.raise_(
                StockDepleted(
                    product_id=str(self.product_id),
                    seller_id=str(self.seller_id) if self.seller_id else None,
                    product_name=self.product_name,
                    order_id=str(order_id),
                    depleted_at=now,
                )
            )

        return new_stock
