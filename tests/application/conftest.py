"""Shared builders for application tests."""

import pytest
from marketplace.cart.items import AddToCart, CreateCart
from marketplace.checkout.orchestrator import place_order
from marketplace.identity.actor import Actor
from marketplace.identity.member import RegisterMember
from marketplace.stock.ledger import register_stock
from protean import current_domain


@pytest.fixture()
def customer():
    return Actor(user_id="cust-1", role="customer")


@pytest.fixture()
def admin():
    current_domain.process(
        RegisterMember(user_id="admin-1", full_name="Meera Admin", role="admin"),
        asynchronous=False,
    )
    return Actor(user_id="admin-1", role="admin")


@pytest.fixture()
def seller():
    return Actor(user_id="seller-1", role="seller")


@pytest.fixture()
def fill_cart(make_product):
    """Create a cart for ``customer_id`` holding ``(product, quantity)`` lines.

    Stock rows are registered for every product unless ``with_stock`` is off.
    """

    def _fill(lines, customer_id="cust-1", with_stock=True):
        cart_id = current_domain.process(CreateCart(customer_id=customer_id), asynchronous=False)
        for product, quantity in lines:
            if with_stock:
                register_stock(
                    product["product_id"],
                    seller_id=product["seller_id"],
                    product_name=product["name"],
                    stock=product["stock"],
                )
            current_domain.process(
                AddToCart(cart_id=cart_id, quantity=quantity, **product),
                asynchronous=False,
            )
        return cart_id

    return _fill


@pytest.fixture()
def two_seller_cart(fill_cart, make_product):
    """Three units across two sellers: 2 x 150 from seller-1, 1 x 300 from seller-2."""
    return fill_cart(
        [
            (make_product("p-1", 150.0, seller_id="seller-1", name="Mango Pickle", stock=10), 2),
            (make_product("p-2", 300.0, seller_id="seller-2", name="Coir Mat", stock=1), 1),
        ]
    )


@pytest.fixture()
def placed_order(two_seller_cart, shipping_address, customer):
    return place_order(two_seller_cart, shipping_address, "upi", customer)
