"""Stock commands and handler: registration, direct sets and checkout decrements."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.stock.stock import ProductStock


@marketplace.command(part_of="ProductStock")
class RegisterProductStock:
    """Start tracking stock for a newly listed product."""

    product_id = Identifier(required=True)
    seller_id = Identifier()
    product_name = String(max_length=255)
    stock = Integer(default=0)


@marketplace.command(part_of="ProductStock")
class SetStockLevel:
    product_id = Identifier(required=True)
    stock = Integer(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)


@marketplace.command(part_of="ProductStock")
class DecrementStock:
    """Take stock for one order line. Replays for the same order are no-ops."""

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.command_handler(part_of=ProductStock)
class StockManagementHandler:
    @handle(RegisterProductStock)
    def register_product_stock(self, command):
        item = ProductStock.register(
            product_id=command.product_id,
            seller_id=command.seller_id,
            product_name=command.product_name,
            stock=command.stock,
        )
        current_domain.repository_for(ProductStock).add(item)
        return str(item.product_id)

    @handle(SetStockLevel)
    def set_stock_level(self, command):
        repo = current_domain.repository_for(ProductStock)
        item = repo.get(command.product_id)
        item.set_level(command.stock, actor_id=command.actor_id, actor_role=command.actor_role)
        repo.add(item)
        return item.stock

    @handle(DecrementStock)
    def decrement_stock(self, command):
        repo = current_domain.repository_for(ProductStock)
        item = repo.get(command.product_id)
        new_stock = item.decrement(command.order_id, command.quantity)
        repo.add(item)
        return new_stock
