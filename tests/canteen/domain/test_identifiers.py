"""Tests for order token generation and checkout guards."""

import random
import re

import pytest
from canteen.cart.checkout import ensure_checkout_ready
from canteen.errors import EmptyCartCheckout, MixedVenueCheckout
from canteen.order.identifiers import generate_token
from canteen.order.order import Order, Venue
from protean.exceptions import ValidationError


class TestGenerateToken:
    def test_medical_prefix(self):
        assert re.fullmatch(r"MED-\d{3}", generate_token("medical"))

    def test_bitbites_prefix(self):
        assert re.fullmatch(r"BIT-\d{3}", generate_token(Venue.BITBITES))

    def test_suffix_stays_in_range(self):
        rng = random.Random(7)
        for _ in range(500):
            suffix = int(generate_token("medical", rng=rng).split("-")[1])
            assert 100 <= suffix < 900

    def test_seeded_rng_is_reproducible(self):
        assert generate_token("bitbites", rng=random.Random(3)) == generate_token("bitbites", rng=random.Random(3))

    def test_unknown_venue_is_rejected(self):
        with pytest.raises(ValidationError):
            generate_token("rooftop")


def _cart_with(items):
    cart = Order.open_cart(owner="user-001")
    cart.replace_items(items)
    return cart


def _item(venue=None, product_id="p1"):
    item = {"product_id": product_id, "name": "Thing", "price": 10.0, "quantity": 1}
    if venue:
        item["venue"] = venue
    return item


class TestEnsureCheckoutReady:
    def test_empty_cart_is_rejected(self):
        with pytest.raises(EmptyCartCheckout) as exc:
            ensure_checkout_ready(_cart_with([]), "medical")
        assert "items" in exc.value.messages

    def test_mixed_venues_are_rejected(self):
        cart = _cart_with([_item("medical", "p1"), _item("bitbites", "p2")])
        with pytest.raises(MixedVenueCheckout) as exc:
            ensure_checkout_ready(cart)
        assert exc.value.venues == ["bitbites", "medical"]

    def test_requested_venue_must_match_items(self):
        cart = _cart_with([_item("bitbites")])
        with pytest.raises(MixedVenueCheckout):
            ensure_checkout_ready(cart, "medical")

    def test_venue_resolved_from_items(self):
        assert ensure_checkout_ready(_cart_with([_item("bitbites")])) == Venue.BITBITES

    def test_items_without_venue_accept_requested_venue(self):
        assert ensure_checkout_ready(_cart_with([_item()]), "bitbites") == Venue.BITBITES

    def test_defaults_to_medical(self):
        assert ensure_checkout_ready(_cart_with([_item()])) == Venue.MEDICAL
