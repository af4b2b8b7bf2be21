import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def _marketplace_domain(request):
    """Initialize the marketplace domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from marketplace.domain import marketplace

    marketplace.init()
    return marketplace


@pytest.fixture(scope="session", autouse=True)
def setup_db(_marketplace_domain):
    from marketplace.utils.db import drop_db, setup_db

    setup_db(_marketplace_domain)

    yield

    drop_db(_marketplace_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_marketplace_domain):
    """Push domain context before each test, cleanup after."""
    from marketplace.realtime.feed import reset_change_feed
    from marketplace.side_effects.registry import reset_side_effect_handler

    ctx = _marketplace_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()

    reset_change_feed()
    reset_side_effect_handler()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def shipping_address():
    return {
        "full_name": "Asha Rao",
        "phone": "+91 98765 43210",
        "address": "12 Market Road",
        "city": "Mysuru",
        "state": "Karnataka",
        "pincode": "570001",
    }


@pytest.fixture()
def make_product():
    """Catalogue snapshot as the cart receives it."""

    def _make(product_id, unit_price, seller_id="seller-1", free_delivery=False, name=None, stock=50):
        return {
            "product_id": product_id,
            "name": name or f"Product {product_id}",
            "unit_price": unit_price,
            "image_url": None,
            "stock": stock,
            "seller_id": seller_id,
            "seller_free_delivery": free_delivery,
        }

    return _make
