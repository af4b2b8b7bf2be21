"""Integration tests for cart, pricing and checkout endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import ROUTERS
from marketplace.order.order import Order
from protean import current_domain

CUSTOMER = {"X-Actor-Id": "cust-1", "X-Actor-Role": "customer"}
SELLER = {"X-Actor-Id": "seller-1", "X-Actor-Role": "seller"}
OTHER_CUSTOMER = {"X-Actor-Id": "cust-2", "X-Actor-Role": "customer"}
ADMIN = {"X-Actor-Id": "admin-1", "X-Actor-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def cart_id(client):
    for product_id, stock in (("p-1", 10), ("p-2", 4)):
        response = client.post(
            "/stock",
            json={"product_id": product_id, "product_name": f"Product {product_id}", "stock": stock},
            headers=SELLER,
        )
        assert response.status_code == 201

    response = client.post("/carts", json={"customer_id": "cust-1"}, headers=CUSTOMER)
    assert response.status_code == 201
    cart_id = response.json()["cart_id"]

    for product_id, price, quantity in (("p-1", 150.0, 2), ("p-2", 300.0, 1)):
        response = client.post(
            f"/carts/{cart_id}/items",
            headers=CUSTOMER,
            json={
                "product_id": product_id,
                "name": f"Product {product_id}",
                "unit_price": price,
                "seller_id": "seller-1",
                "quantity": quantity,
            },
        )
        assert response.status_code == 200
    return cart_id


class TestCartEndpoints:
    def test_cart_contents_and_pricing(self, client, cart_id):
        cart = client.get(f"/carts/{cart_id}", headers=CUSTOMER).json()
        assert cart["total_item_count"] == 3
        assert cart["subtotal"] == 600.0

        pricing = client.get(f"/carts/{cart_id}/pricing", headers=CUSTOMER).json()
        assert pricing == {"subtotal": 600.0, "total_item_count": 3, "delivery_fee": 90, "total": 690.0}

    def test_update_and_remove(self, client, cart_id):
        response = client.put(f"/carts/{cart_id}/items/p-1", json={"quantity": 4}, headers=CUSTOMER)
        assert response.json()["total_item_count"] == 5

        response = client.delete(f"/carts/{cart_id}/items/p-2", headers=CUSTOMER)
        assert [i["product_id"] for i in response.json()["items"]] == ["p-1"]

    def test_zero_quantity_on_add_is_rejected(self, client, cart_id):
        response = client.post(
            f"/carts/{cart_id}/items",
            headers=CUSTOMER,
            json={"product_id": "p-3", "name": "Product p-3", "unit_price": 10.0, "quantity": 0},
        )
        assert response.status_code == 400

    def test_unknown_cart(self, client):
        assert client.get("/carts/nope", headers=CUSTOMER).status_code == 404


class TestCartAccess:
    def test_other_customer_cannot_read_or_change_the_cart(self, client, cart_id):
        assert client.get(f"/carts/{cart_id}", headers=OTHER_CUSTOMER).status_code == 403
        assert client.post(f"/carts/{cart_id}/clear", headers=OTHER_CUSTOMER).status_code == 403
        response = client.put(f"/carts/{cart_id}/items/p-1", json={"quantity": 9}, headers=OTHER_CUSTOMER)
        assert response.status_code == 403

        assert client.get(f"/carts/{cart_id}", headers=CUSTOMER).json()["total_item_count"] == 3

    def test_cannot_open_a_cart_for_someone_else(self, client):
        response = client.post("/carts", json={"customer_id": "cust-1"}, headers=OTHER_CUSTOMER)
        assert response.status_code == 403

    def test_admin_can_read_any_cart(self, client, cart_id):
        assert client.get(f"/carts/{cart_id}", headers=ADMIN).status_code == 200

    def test_guest_cart_is_open(self, client):
        cart_id = client.post("/carts", json={"session_id": "sess-9"}, headers=OTHER_CUSTOMER).json()["cart_id"]
        assert client.get(f"/carts/{cart_id}", headers=CUSTOMER).status_code == 200


class TestDeliveryPreview:
    def test_five_items_cost_flat_fee(self, client):
        response = client.post("/delivery-fee/preview", json={"items": [{"unit_price": 100.0, "quantity": 5}]})
        assert response.json()["delivery_fee"] == 120

    def test_small_order(self, client):
        response = client.post("/delivery-fee/preview", json={"items": [{"unit_price": 10.0, "quantity": 2}]})
        assert response.json()["delivery_fee"] == 20


class TestCheckoutEndpoint:
    def _checkout(self, client, cart_id, shipping_address, payment_method="upi", headers=CUSTOMER):
        return client.post(
            "/checkout",
            json={"cart_id": cart_id, "shipping_address": shipping_address, "payment_method": payment_method},
            headers=headers,
        )

    def test_places_order(self, client, cart_id, shipping_address):
        response = self._checkout(client, cart_id, shipping_address)

        assert response.status_code == 201
        body = response.json()
        assert body["total"] == 690.0
        assert body["notifications_dispatched"] is True

        order = current_domain.repository_for(Order).get(body["order_id"])
        assert order.status == "pending"
        assert client.get(f"/carts/{cart_id}", headers=CUSTOMER).json()["items"] == []

    def test_bad_phone_is_a_400(self, client, cart_id, shipping_address):
        response = self._checkout(client, cart_id, {**shipping_address, "phone": "12"})
        assert response.status_code == 400

    def test_someone_elses_cart_is_a_403(self, client, cart_id, shipping_address):
        response = self._checkout(client, cart_id, shipping_address, headers={"X-Actor-Id": "cust-2"})
        assert response.status_code == 403

    def test_header_failure_is_a_503(self, monkeypatch, client, cart_id, shipping_address):
        def _unavailable(*args, **kwargs):
            raise RuntimeError("order store unavailable")

        monkeypatch.setattr(Order, "place", _unavailable)

        response = self._checkout(client, cart_id, shipping_address)
        assert response.status_code == 503
        assert response.json() == {"error": "Failed to place order. Please try again."}

    def test_partial_commit_is_a_202_and_reconcilable(self, client, cart_id, shipping_address):
        client.post(
            f"/carts/{cart_id}/items",
            headers=CUSTOMER,
            json={"product_id": "p-untracked", "name": "Loose Tea", "unit_price": 50.0, "quantity": 1},
        )

        response = self._checkout(client, cart_id, shipping_address)
        assert response.status_code == 202
        body = response.json()
        assert body["stage"] == "stock"

        checkout = client.get(f"/checkouts/{body['checkout_id']}", headers=CUSTOMER).json()
        assert checkout["needs_reconciliation"] is True

        client.post("/stock", json={"product_id": "p-untracked", "stock": 3}, headers=SELLER)
        reconciled = client.post(f"/checkouts/{body['checkout_id']}/reconcile", headers=CUSTOMER).json()
        assert reconciled["stage"] == "completed"
        assert client.get("/stock/p-untracked").json()["stock"] == 2

    def test_stalled_list_is_admin_only(self, client):
        assert client.get("/checkouts/stalled", headers=CUSTOMER).status_code == 403
        assert client.get("/checkouts/stalled", headers={"X-Actor-Id": "a-1", "X-Actor-Role": "admin"}).json() == []
