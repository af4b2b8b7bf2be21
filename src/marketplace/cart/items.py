"""Cart commands and handler: creation, item management and clearing."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import ShoppingCart
from marketplace.domain import marketplace


@marketplace.command(part_of="ShoppingCart")
class CreateCart:
    """Open a cart for a signed-in customer or an anonymous session."""

    customer_id = Identifier()
    session_id = String(max_length=255)


@marketplace.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    image_url = String(max_length=1000)
    stock = Integer(default=0)
    seller_id = Identifier()
    seller_free_delivery = Boolean(default=False)
    quantity = Integer(required=True)


@marketplace.command(part_of="ShoppingCart")
class UpdateCartQuantity:
    """Set a line's quantity; zero or less removes it."""

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@marketplace.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@marketplace.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


@marketplace.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = ShoppingCart.create(
            customer_id=command.customer_id,
            session_id=command.session_id,
        )
        current_domain.repository_for(ShoppingCart).add(cart)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.add_item(
            product={
                "product_id": command.product_id,
                "name": command.name,
                "unit_price": command.unit_price,
                "image_url": command.image_url,
                "stock": command.stock,
                "seller_id": command.seller_id,
                "seller_free_delivery": command.seller_free_delivery,
            },
            quantity=command.quantity,
        )
        repo.add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.update_quantity(command.product_id, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.remove_item(command.product_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)
