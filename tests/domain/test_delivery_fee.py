"""Tests for the delivery fee rules and their precedence."""

import pytest
from marketplace.cart.delivery import MAX_FEE, compute_delivery_fee


def _item(unit_price, quantity, free=False):
    return {"unit_price": unit_price, "quantity": quantity, "seller_free_delivery": free}


class TestFreeDelivery:
    def test_empty_cart_has_no_fee(self):
        assert compute_delivery_fee([]) == 0

    def test_all_sellers_offer_free_delivery(self):
        items = [_item(10, 1, free=True), _item(500, 3, free=True)]
        assert compute_delivery_fee(items) == 0

    def test_one_paid_seller_disables_free_delivery(self):
        items = [_item(500, 1, free=True), _item(50, 1, free=False)]
        assert compute_delivery_fee(items) == 60


class TestSmallOrderFee:
    def test_subtotal_below_threshold(self):
        assert compute_delivery_fee([_item(99, 1)]) == 20

    def test_small_order_wins_over_five_item_tier(self):
        assert compute_delivery_fee([_item(10, 5)]) == 20

    def test_subtotal_at_threshold_is_not_small(self):
        assert compute_delivery_fee([_item(100, 1)]) == 30


class TestFiveItemTier:
    def test_exactly_five_items(self):
        assert compute_delivery_fee([_item(120, 5)]) == 120

    def test_five_items_across_lines(self):
        items = [_item(200, 2), _item(100, 3)]
        assert compute_delivery_fee(items) == 120

    def test_five_items_cost_less_than_per_item_rate_would_allow(self):
        # 5 x 30 would be 150
        assert compute_delivery_fee([_item(300, 5)]) < 150


class TestPerItemFee:
    @pytest.mark.parametrize(
        "quantity, expected",
        [(1, 30), (2, 60), (4, 120), (6, 180), (7, 200), (20, 200)],
    )
    def test_per_item_fee_with_cap(self, quantity, expected):
        assert compute_delivery_fee([_item(150, quantity)]) == expected

    def test_fee_never_exceeds_cap(self):
        assert compute_delivery_fee([_item(1000, 50)]) == MAX_FEE


class TestInputShapes:
    def test_line_order_does_not_matter(self):
        items = [_item(40, 2), _item(300, 1), _item(25, 3, free=True)]
        assert compute_delivery_fee(items) == compute_delivery_fee(list(reversed(items)))

    def test_accepts_cart_mapping(self):
        assert compute_delivery_fee({"items": [_item(150, 2)]}) == 60

    def test_accepts_cart_aggregate(self, make_product):
        from marketplace.cart.cart import ShoppingCart

        cart = ShoppingCart.create(customer_id="cust-1")
        cart.add_item(make_product("p-1", 150.0), 2)
        assert compute_delivery_fee(cart) == 60
