"""BDD tests for order status changes."""

from marketplace.cart.items import AddToCart, CreateCart
from marketplace.checkout.orchestrator import place_order
from marketplace.errors import AuthorizationError, InvalidTransitionError
from marketplace.identity.actor import Actor
from marketplace.order.order import Order
from marketplace.order.status import advance_order_status, cancel_order
from marketplace.stock.ledger import register_stock
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/order_status.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a pending order from "{customer_id}" with items from "{seller_id}"'),
    target_fixture="order_id",
)
def pending_order(customer_id, seller_id, shipping_address, make_product):
    product = make_product("p-1", 200.0, seller_id=seller_id)
    register_stock("p-1", seller_id=seller_id, stock=5)
    cart_id = current_domain.process(CreateCart(customer_id=customer_id), asynchronous=False)
    current_domain.process(AddToCart(cart_id=cart_id, quantity=1, **product), asynchronous=False)
    return place_order(cart_id, shipping_address, "cod", Actor(user_id=customer_id)).order_id


@given(parsers.cfparse('"{user_id}" acting as "{role}" moved the order to "{status}"'))
def moved_order(order_id, user_id, role, status):
    advance_order_status(order_id, status, Actor(user_id=user_id, role=role))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user_id}" acting as "{role}" moves the order to "{status}"'))
def move_order(order_id, user_id, role, status, error):
    try:
        advance_order_status(order_id, status, Actor(user_id=user_id, role=role))
    except (AuthorizationError, InvalidTransitionError) as exc:
        error["exc"] = exc


@when(parsers.cfparse('"{user_id}" cancels the order'))
def customer_cancels(order_id, user_id, error):
    try:
        cancel_order(order_id, Actor(user_id=user_id), reason="Changed my mind")
    except (AuthorizationError, InvalidTransitionError) as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then("the change is refused")
def change_refused(error):
    assert isinstance(error["exc"], AuthorizationError)


@then("the transition is invalid")
def transition_invalid(error):
    assert isinstance(error["exc"], InvalidTransitionError)
