"""Stock contention scenario.

Every user buys from the same small set of hot products, so concurrent
checkouts race on the same stock rows. After a run the stock of each hot
product must equal its opening level minus everything sold, floored at zero.
"""

import random

import requests
from locust import HttpUser, between, events, task

from loadtests.data_generators import cart_item_data, checkout_data, unique_id
from loadtests.helpers.response import actor_headers, extract_error_detail

HOT_SELLER = "seller-lt-hot"
HOT_PRODUCTS = [f"prod-lt-hot-{i}" for i in range(3)]
OPENING_STOCK = 10_000


@events.test_start.add_listener
def seed_hot_products(environment, **_kwargs):
    if environment.host is None:
        return

    for product_id in HOT_PRODUCTS:
        requests.post(
            f"{environment.host}/stock",
            json={"product_id": product_id, "product_name": product_id, "stock": OPENING_STOCK},
            headers=actor_headers(HOT_SELLER, "seller"),
            timeout=10,
        )


class HotProductBuyer(HttpUser):
    wait_time = between(0.1, 0.5)

    @task
    def buy_hot_product(self):
        customer_id = unique_id("cust")
        resp = self.client.post(
            "/carts",
            json={"customer_id": customer_id},
            headers=actor_headers(customer_id),
            name="[HOT] POST /carts",
        )
        cart_id = resp.json()["cart_id"]

        product_id = random.choice(HOT_PRODUCTS)
        self.client.post(
            f"/carts/{cart_id}/items",
            json=cart_item_data(product_id, HOT_SELLER, unit_price=150.0, quantity=random.randint(1, 4)),
            headers=actor_headers(customer_id),
            name="[HOT] POST /carts/{id}/items",
        )

        with self.client.post(
            "/checkout",
            json=checkout_data(cart_id),
            headers=actor_headers(customer_id),
            catch_response=True,
            name="[HOT] POST /checkout",
        ) as resp:
            if resp.status_code == 202:
                resp.failure(extract_error_detail(resp))
            elif resp.status_code != 201:
                resp.failure(f"Checkout failed: {resp.status_code} - {extract_error_detail(resp)}")

    @task
    def watch_stock(self):
        self.client.get(f"/stock/{random.choice(HOT_PRODUCTS)}", name="[HOT] GET /stock/{id}")
