"""BDD tests for checkout."""

import pytest
from marketplace.cart.cart import ShoppingCart
from marketplace.cart.items import AddToCart, CreateCart
from marketplace.checkout.checkout import Checkout, NotificationStatus
from marketplace.checkout.orchestrator import place_order
from marketplace.identity.actor import Actor
from marketplace.order.order import Order
from marketplace.projections.order_summary import OrderSummary
from marketplace.side_effects.fake import FakeSideEffectHandler
from marketplace.side_effects.port import CREATE_ORDER_NOTIFICATIONS
from marketplace.side_effects.registry import set_side_effect_handler
from marketplace.stock.ledger import current_stock, register_stock
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/checkout.feature")

BUYER = Actor(user_id="cust-1")


@pytest.fixture()
def catalogue():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" from seller "{seller_id}" priced at {price:d} with {stock:d} in stock'))
def listed_product(catalogue, product_id, seller_id, price, stock):
    register_stock(product_id, seller_id=seller_id, product_name=f"Product {product_id}", stock=stock)
    catalogue[product_id] = {
        "product_id": product_id,
        "name": f"Product {product_id}",
        "unit_price": float(price),
        "seller_id": seller_id,
        "stock": stock,
    }


@given("the buyer's cart is empty", target_fixture="cart_id")
def empty_cart():
    return current_domain.process(CreateCart(customer_id=BUYER.user_id), asynchronous=False)


@given(
    parsers.cfparse('the buyer\'s cart holds {first_qty:d} of "{first}" and {second_qty:d} of "{second}"'),
    target_fixture="cart_id",
)
def filled_cart(catalogue, first_qty, first, second_qty, second):
    cart_id = current_domain.process(CreateCart(customer_id=BUYER.user_id), asynchronous=False)
    for product_id, quantity in ((first, first_qty), (second, second_qty)):
        current_domain.process(
            AddToCart(cart_id=cart_id, quantity=quantity, **catalogue[product_id]),
            asynchronous=False,
        )
    return cart_id


@given("the notification service is down")
def notification_service_down():
    handler = FakeSideEffectHandler()
    handler.configure(CREATE_ORDER_NOTIFICATIONS, fail_with="function timed out")
    set_side_effect_handler(handler)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the buyer checks out paying by "{payment_method}"'), target_fixture="placed")
def checks_out(cart_id, shipping_address, payment_method, error):
    try:
        return place_order(cart_id, shipping_address, payment_method, BUYER)
    except ValidationError as exc:
        error["exc"] = exc
        return None


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order is pending with a total of {total:d}"))
def order_is_pending(placed, total):
    order = current_domain.repository_for(Order).get(placed.order_id)
    assert order.status == "pending"
    assert order.total == float(total)


@then(parsers.cfparse('the stock of "{product_id}" is {stock:d}'))
def stock_is(product_id, stock):
    assert current_stock(product_id).stock == stock


@then("the buyer's cart is empty")
def cart_is_empty(cart_id):
    assert current_domain.repository_for(ShoppingCart).get(cart_id).is_empty


@then(parsers.cfparse('the checkout is rejected for "{field}"'))
def rejected_for(error, field):
    assert error["exc"] is not None
    assert field in error["exc"].messages


@then("no order was written")
def no_order():
    assert current_domain.repository_for(OrderSummary)._dao.query.all().items == []


@then("the checkout is waiting for notification retry")
def waiting_for_retry(placed):
    checkout = current_domain.repository_for(Checkout).get(placed.checkout_id)
    assert checkout.notification_status == NotificationStatus.FAILED.value
    assert checkout.needs_reconciliation
