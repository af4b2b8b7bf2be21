"""Checkout load scenarios.

A seller lists stock, buyers fill carts and check out, and the seller walks
each order through fulfillment.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_item_data, checkout_data, stock_data, unique_id
from loadtests.helpers.response import actor_headers, extract_error_detail
from loadtests.helpers.state import BuyerState, SellerState


class CheckoutJourney(SequentialTaskSet):
    """List Stock -> Create Cart -> Add Items -> Price -> Checkout -> Fulfil.

    Generates: StockLevelSet, CartItemAdded, OrderPlaced, LineItemsRecorded,
    StockDecremented, NotificationCreated, OrderConfirmed, OrderShipped,
    OrderDelivered.
    """

    def on_start(self):
        self.seller = SellerState(seller_id=unique_id("seller"))
        self.buyer = BuyerState(customer_id=unique_id("cust"))

    @task
    def list_stock(self):
        for _ in range(random.randint(1, 3)):
            with self.client.post(
                "/stock",
                json=stock_data(),
                headers=actor_headers(self.seller.seller_id, "seller"),
                catch_response=True,
                name="POST /stock",
            ) as resp:
                if resp.status_code == 201:
                    self.seller.product_ids.append(resp.json()["product_id"])
                else:
                    resp.failure(f"List stock failed: {resp.status_code} - {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def create_cart(self):
        with self.client.post(
            "/carts",
            json={"customer_id": self.buyer.customer_id},
            headers=actor_headers(self.buyer.customer_id),
            catch_response=True,
            name="POST /carts",
        ) as resp:
            if resp.status_code == 201:
                self.buyer.cart_id = resp.json()["cart_id"]
            else:
                resp.failure(f"Create cart failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_items(self):
        for product_id in self.seller.product_ids:
            with self.client.post(
                f"/carts/{self.buyer.cart_id}/items",
                json=cart_item_data(product_id, self.seller.seller_id, quantity=random.randint(1, 3)),
                headers=actor_headers(self.buyer.customer_id),
                catch_response=True,
                name="POST /carts/{id}/items",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Add item failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def price_cart(self):
        self.client.get(
            f"/carts/{self.buyer.cart_id}/pricing",
            headers=actor_headers(self.buyer.customer_id),
            name="GET /carts/{id}/pricing",
        )

    @task
    def checkout(self):
        with self.client.post(
            "/checkout",
            json=checkout_data(self.buyer.cart_id),
            headers=actor_headers(self.buyer.customer_id),
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code in (201, 202):
                self.buyer.order_id = resp.json()["order_id"]
                self.buyer.checkout_id = resp.json()["checkout_id"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def fulfil(self):
        for status in ("confirmed", "shipped", "delivered"):
            with self.client.put(
                f"/orders/{self.buyer.order_id}/status",
                json={"status": status},
                headers=actor_headers(self.seller.seller_id, "seller"),
                catch_response=True,
                name=f"PUT /orders/{{id}}/status [{status}]",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Move to {status} failed: {resp.status_code} - {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def done(self):
        self.interrupt()


class CancellationJourney(SequentialTaskSet):
    """Checkout, then the buyer cancels while the order is still pending."""

    def on_start(self):
        self.seller = SellerState(seller_id=unique_id("seller"))
        self.buyer = BuyerState(customer_id=unique_id("cust"))

    @task
    def place(self):
        stock = stock_data()
        self.client.post("/stock", json=stock, headers=actor_headers(self.seller.seller_id, "seller"), name="POST /stock")
        resp = self.client.post(
            "/carts",
            json={"customer_id": self.buyer.customer_id},
            headers=actor_headers(self.buyer.customer_id),
            name="POST /carts",
        )
        self.buyer.cart_id = resp.json()["cart_id"]
        self.client.post(
            f"/carts/{self.buyer.cart_id}/items",
            json=cart_item_data(stock["product_id"], self.seller.seller_id),
            headers=actor_headers(self.buyer.customer_id),
            name="POST /carts/{id}/items",
        )
        with self.client.post(
            "/checkout",
            json=checkout_data(self.buyer.cart_id),
            headers=actor_headers(self.buyer.customer_id),
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code in (201, 202):
                self.buyer.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Checkout failed: {resp.status_code} - {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def cancel(self):
        with self.client.put(
            f"/orders/{self.buyer.order_id}/cancel",
            json={"reason": "Changed my mind"},
            headers=actor_headers(self.buyer.customer_id),
            catch_response=True,
            name="PUT /orders/{id}/cancel",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cancel failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutUser(HttpUser):
    wait_time = between(0.5, 2.0)
    tasks = {CheckoutJourney: 4, CancellationJourney: 1}
