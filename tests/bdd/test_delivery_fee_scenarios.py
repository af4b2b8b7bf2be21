"""BDD tests for the delivery fee rules."""

import pytest
from marketplace.cart.delivery import compute_delivery_fee
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/delivery_fee.feature")


@pytest.fixture()
def items():
    return []


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a cart with {quantity:d} items at {price:d} each"))
def cart_with_items(items, quantity, price):
    items.append({"unit_price": float(price), "quantity": quantity, "seller_free_delivery": False})


@given(parsers.cfparse("every seller offers free delivery: {free}"))
def free_delivery(items, free):
    for item in items:
        item["seller_free_delivery"] = free == "yes"


@given("an empty cart")
def empty_cart(items):
    items.clear()


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the delivery fee is calculated", target_fixture="fee")
def calculate(items):
    return compute_delivery_fee(items)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the delivery fee is {expected:d}"))
def fee_is(fee, expected):
    assert fee == expected
