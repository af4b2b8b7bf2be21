"""Application tests for checkouts that stop after the order header."""

import pytest
from marketplace.cart.cart import ShoppingCart
from marketplace.cart.items import AddToCart
from marketplace.checkout.checkout import Checkout, CheckoutStage, NotificationStatus
from marketplace.checkout.orchestrator import place_order, reconcile_checkout, stalled_checkouts
from marketplace.errors import CommitError, PartialCommitError
from marketplace.notification.feed import recent_notifications
from marketplace.order.order import Order, OrderStatus
from marketplace.side_effects.fake import FakeSideEffectHandler
from marketplace.side_effects.port import CREATE_ORDER_NOTIFICATIONS
from marketplace.side_effects.registry import reset_side_effect_handler, set_side_effect_handler
from marketplace.stock.ledger import current_stock, register_stock
from protean import current_domain


@pytest.fixture()
def half_stocked_cart(fill_cart, make_product):
    """p-1 has a stock row, p-2 was never registered."""
    p1 = make_product("p-1", 150.0, seller_id="seller-1", stock=10)
    p2 = make_product("p-2", 300.0, seller_id="seller-2", stock=4)
    cart_id = fill_cart([(p1, 2)])
    current_domain.process(AddToCart(cart_id=cart_id, quantity=1, **p2), asynchronous=False)
    return cart_id


@pytest.fixture()
def stalled(half_stocked_cart, shipping_address, customer):
    with pytest.raises(PartialCommitError) as exc:
        place_order(half_stocked_cart, shipping_address, "upi", customer)
    return exc.value


class TestPartialCommit:
    def test_error_carries_order_and_stage(self, stalled):
        assert stalled.stage == "stock"
        assert stalled.order_id
        assert stalled.checkout_id

    def test_order_header_and_items_stay_visible(self, stalled):
        order = current_domain.repository_for(Order).get(stalled.order_id)

        assert order.status == OrderStatus.PENDING.value
        assert len(order.items) == 2

    def test_checkout_is_stalled_not_failed(self, stalled):
        checkout = current_domain.repository_for(Checkout).get(stalled.checkout_id)

        assert checkout.stage == CheckoutStage.LINE_ITEMS_RECORDED.value
        assert checkout.failure_stage == "stock"
        assert checkout.needs_reconciliation
        assert [str(c.id) for c in stalled_checkouts()] == [stalled.checkout_id]

    def test_cart_is_kept(self, stalled, half_stocked_cart):
        cart = current_domain.repository_for(ShoppingCart).get(half_stocked_cart)
        assert cart.total_item_count == 3

    def test_line_item_failure_stops_before_stock(self, monkeypatch, fill_cart, make_product, shipping_address, customer):
        def _unavailable(self, items_data):
            raise RuntimeError("line item store unavailable")

        monkeypatch.setattr(Order, "record_line_items", _unavailable)
        cart_id = fill_cart([(make_product("p-5", 200.0, stock=3), 1)])

        with pytest.raises(PartialCommitError) as exc:
            place_order(cart_id, shipping_address, "upi", customer)

        assert exc.value.stage == "line_items"
        assert current_stock("p-5").stock == 3


class TestReconcile:
    def test_finishes_the_missing_steps(self, stalled, half_stocked_cart):
        register_stock("p-2", seller_id="seller-2", stock=4)

        checkout = reconcile_checkout(stalled.checkout_id)

        assert checkout.stage == CheckoutStage.COMPLETED.value
        assert checkout.notification_status == NotificationStatus.SENT.value
        assert current_stock("p-1").stock == 8
        assert current_stock("p-2").stock == 3
        assert stalled_checkouts() == []

    def test_removes_only_checked_out_products(self, stalled, half_stocked_cart, make_product):
        current_domain.process(
            AddToCart(cart_id=half_stocked_cart, quantity=1, **make_product("p-3", 80.0)),
            asynchronous=False,
        )
        register_stock("p-2", seller_id="seller-2", stock=4)

        reconcile_checkout(stalled.checkout_id)

        cart = current_domain.repository_for(ShoppingCart).get(half_stocked_cart)
        assert [str(i.product_id) for i in cart.items] == ["p-3"]

    def test_is_idempotent(self, stalled):
        register_stock("p-2", seller_id="seller-2", stock=4)

        reconcile_checkout(stalled.checkout_id)
        reconcile_checkout(stalled.checkout_id)

        assert current_stock("p-1").stock == 8
        assert current_stock("p-2").stock == 3
        assert len(recent_notifications("seller-1")) == 1

    def test_still_broken_step_stays_stalled(self, stalled):
        with pytest.raises(PartialCommitError):
            reconcile_checkout(stalled.checkout_id)

        checkout = current_domain.repository_for(Checkout).get(stalled.checkout_id)
        assert checkout.needs_reconciliation

    def test_retries_failed_notifications(self, two_seller_cart, shipping_address, customer):
        side_effects = FakeSideEffectHandler()
        side_effects.configure(CREATE_ORDER_NOTIFICATIONS, fail_with="function timed out")
        set_side_effect_handler(side_effects)

        placed = place_order(two_seller_cart, shipping_address, "upi", customer)
        assert [str(c.id) for c in stalled_checkouts()] == [placed.checkout_id]

        reset_side_effect_handler()
        checkout = reconcile_checkout(placed.checkout_id)

        assert checkout.notification_status == NotificationStatus.SENT.value
        assert len(recent_notifications("seller-1")) == 1
        assert stalled_checkouts() == []

    def test_failed_checkout_is_left_alone(self, monkeypatch, two_seller_cart, shipping_address, customer):
        def _unavailable(*args, **kwargs):
            raise RuntimeError("order store unavailable")

        monkeypatch.setattr(Order, "place", _unavailable)
        with pytest.raises(CommitError):
            place_order(two_seller_cart, shipping_address, "upi", customer)
        monkeypatch.undo()

        [checkout] = current_domain.repository_for(Checkout)._dao.query.all().items
        assert reconcile_checkout(checkout.id).stage == CheckoutStage.FAILED.value
