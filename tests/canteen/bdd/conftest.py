"""Shared BDD fixtures and step definitions for the Canteen domain."""

import pytest
from canteen.cart.checkout import ensure_checkout_ready
from canteen.order.events import OrderPlaced, OrderStatusChanged
from canteen.order.identifiers import generate_token
from canteen.order.order import Order, load_items
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderStatusChanged": OrderStatusChanged,
}

# Steps needed to reach a status from pending
_PATHS = {
    "pending": [],
    "preparing": ["preparing"],
    "ready": ["preparing", "ready"],
    "completed": ["preparing", "ready", "completed"],
    "cancelled": ["cancelled"],
}


def _items(venue, count, start=0):
    return [
        {"product_id": f"{venue}-{n}", "name": f"Dish {n}", "price": 10.0 + n, "quantity": 1, "venue": venue}
        for n in range(start, start + count)
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def first_token():
    return {"value": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a pending order at "{venue}"'), target_fixture="order")
def pending_order(venue):
    order = Order.place_direct(items=_items(venue, 1), venue=venue, client_name="Asha", token=generate_token(venue))
    order._events.clear()
    return order


@given(parsers.cfparse('the order has reached "{status}"'))
def order_has_reached(order, status):
    for step in _PATHS[status]:
        order.advance_to(step)
    order._events.clear()


@given("an empty cart", target_fixture="order")
def empty_cart():
    cart = Order.open_cart(owner="user-bdd-001")
    cart._events.clear()
    return cart


@given(parsers.cfparse('a cart with {count:d} "{venue}" items'), target_fixture="order")
def cart_with_items(count, venue):
    cart = Order.open_cart(owner="user-bdd-001")
    cart.replace_items(_items(venue, count))
    cart._events.clear()
    return cart


@given(parsers.cfparse('{count:d} "{venue}" items are added to the cart'))
def items_added(order, count, venue):
    order.replace_items(load_items(order.items) + _items(venue, count, start=100))
    order._events.clear()


# ---------------------------------------------------------------------------
# Checkout steps (Given and When share the wording)
# ---------------------------------------------------------------------------
def _check_out(order, venue, error):
    """Run the checkout guard and placement the way the Checkout handler does."""
    try:
        resolved = ensure_checkout_ready(order, venue)
        order.place(venue=resolved, client_name=None, token=generate_token(resolved))
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then("the change is refused")
def change_refused(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("an {event_name} event is raised"))
def event_raised(order, event_name):
    event_cls = _EVENT_CLASSES[event_name]
    assert any(isinstance(e, event_cls) for e in order._events)


@given(parsers.cfparse('the cart is checked out at "{venue}"'))
def already_checked_out(order, venue, error, first_token):
    _check_out(order, venue, error)
    first_token["value"] = order.token
    order._events.clear()


@when(parsers.cfparse('the cart is checked out at "{venue}"'))
def checked_out(order, venue, error):
    _check_out(order, venue, error)
