"""Faker-based data generators for the marketplace load scenarios.

Payloads pass the checkout validation rules (phone and pincode formats,
field lengths) and match the API's request schema field names.
"""

import random
import uuid

from faker import Faker

fake = Faker("en_IN")

PAYMENT_METHODS = ["upi", "card", "cod"]


def unique_id(prefix: str) -> str:
    return f"{prefix}-lt-{uuid.uuid4().hex[:8]}"


def valid_phone() -> str:
    """Ten digits after +91, which the checkout phone pattern accepts."""
    return f"+91{random.randint(6000000000, 9999999999)}"


def shipping_address() -> dict:
    return {
        "full_name": fake.name()[:200],
        "phone": valid_phone(),
        "address": fake.street_address()[:500],
        "city": fake.city()[:100],
        "state": fake.state()[:100],
        "pincode": f"{random.randint(110000, 855999)}",
    }


def stock_data(product_id: str | None = None, stock: int | None = None) -> dict:
    return {
        "product_id": product_id or unique_id("prod"),
        "product_name": fake.word().title() + " " + random.choice(["Seeds", "Fertilizer", "Sprayer", "Compost"]),
        "stock": stock if stock is not None else random.randint(20, 200),
    }


def cart_item_data(product_id: str, seller_id: str, unit_price: float | None = None, quantity: int = 1) -> dict:
    return {
        "product_id": product_id,
        "name": fake.word().title(),
        "unit_price": unit_price if unit_price is not None else round(random.uniform(40, 600), 2),
        "stock": 100,
        "seller_id": seller_id,
        "seller_free_delivery": random.random() < 0.2,
        "quantity": quantity,
    }


def checkout_data(cart_id: str) -> dict:
    return {
        "cart_id": cart_id,
        "shipping_address": shipping_address(),
        "payment_method": random.choice(PAYMENT_METHODS),
    }
