import os

import pytest


@pytest.fixture(scope="session")
def _canteen_domain(request):
    """Initialize the canteen domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from canteen.domain import canteen

    canteen.init()
    return canteen


@pytest.fixture(scope="session", autouse=True)
def setup_db(_canteen_domain):
    from canteen.utils.db import drop_db, setup_db

    setup_db(_canteen_domain)

    yield

    drop_db(_canteen_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_canteen_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _canteen_domain.domain_context()
    ctx.push()

    yield

    from canteen.store.feed import change_feed
    from protean import current_domain

    change_feed.reset()

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture()
def owner():
    return "user-001"


@pytest.fixture()
def medical_items():
    return [
        {"product_id": "med-chai", "name": "Masala Chai", "price": 20.0, "quantity": 2, "venue": "medical"},
        {"product_id": "med-samosa", "name": "Samosa", "price": 15.0, "quantity": 1, "venue": "medical"},
    ]


@pytest.fixture()
def bitbites_items():
    return [
        {"product_id": "bit-wrap", "name": "Paneer Wrap", "price": 70.0, "quantity": 1, "venue": "bitbites"},
    ]
