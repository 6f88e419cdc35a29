"""Order aggregate (CQRS). A shopping cart is an Order in status ``cart``.

The record is created on a user's first cart mutation, converted in place to
a pending order at checkout, and advanced by staff from there. Records are
never deleted: completed and cancelled orders form the history.

State Machine:
    cart → pending → preparing → ready → completed
    cancelled (from pending, preparing, ready)

Carts leave ``cart`` only through checkout; staff status changes start at
``pending``. ``completed`` and ``cancelled`` are terminal.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from canteen.domain import canteen
from canteen.errors import InvalidTransition
from canteen.order.events import (
    CartCleared,
    CartItemsReplaced,
    CartOpened,
    OrderPlaced,
    OrderStatusChanged,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CART = "cart"
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Venue(Enum):
    MEDICAL = "medical"
    BITBITES = "bitbites"


VENUE_PREFIXES = {
    Venue.MEDICAL: "MED",
    Venue.BITBITES: "BIT",
}

ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY)
HISTORY_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.CART: {OrderStatus.PENDING},  # Checkout only
    OrderStatus.PENDING: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def coerce_venue(value):
    """Return the ``Venue`` for a raw value, raising ``ValidationError`` if unknown."""
    if isinstance(value, Venue):
        return value
    try:
        return Venue(value)
    except ValueError as exc:
        allowed = ", ".join(v.value for v in Venue)
        raise ValidationError({"venue": [f"Unknown venue '{value}'. Expected one of: {allowed}"]}) from exc


def coerce_status(value):
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise ValidationError({"status": [f"Unknown order status '{value}'"]}) from exc


def can_transition(current, target):
    return coerce_status(target) in _VALID_TRANSITIONS[coerce_status(current)]


# ---------------------------------------------------------------------------
# Line items
# ---------------------------------------------------------------------------
@canteen.value_object
class LineItem:
    """A product line in a cart or order: price snapshot, quantity and source venue."""

    product_id = String(required=True, max_length=64)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    venue = String(choices=Venue)
    image_url = String(max_length=1024)


def normalize_items(items):
    """Validate raw line item dicts and return them in stored form, order preserved."""
    return [LineItem(**item).to_dict() for item in items or []]


def load_items(raw):
    """Decode the JSON ``items`` column of an Order."""
    return json.loads(raw) if raw else []


def items_total(items):
    return sum(item["price"] * item["quantity"] for item in items)


def item_venues(items):
    return {item["venue"] for item in items if item.get("venue")}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@canteen.aggregate
class Order:
    token = String(max_length=16)
    display_id = String(max_length=16)
    owner = Identifier()  # Absent for walk-in orders entered by staff
    venue = String(choices=Venue, default=Venue.MEDICAL.value)
    items = Text(default="[]")  # JSON: ordered list of line items
    total = Float(default=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.CART.value)
    client_name = String(max_length=255)
    client_phone = String(max_length=32)
    table_number = String(max_length=16)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def token_is_present_once_placed(self):
        in_cart = self.status == OrderStatus.CART.value
        if in_cart and self.token:
            raise ValidationError({"token": ["A cart cannot carry an order token"]})
        if not in_cart and not self.token:
            raise ValidationError({"token": ["A placed order must carry a token"]})

    @invariant.post
    def total_matches_items(self):
        if abs((self.total or 0.0) - items_total(load_items(self.items))) > 1e-6:
            raise ValidationError({"total": ["Total must equal the sum of price x quantity over items"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def open_cart(cls, owner, client_name=None):
        """Start an empty cart. The venue is a placeholder until checkout."""
        now = datetime.now(UTC)
        cart = cls(
            owner=owner,
            status=OrderStatus.CART.value,
            venue=Venue.MEDICAL.value,
            items=json.dumps([]),
            total=0.0,
            client_name=client_name,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(
            CartOpened(
                order_id=str(cart.id),
                owner=str(owner) if owner else None,
                venue=cart.venue,
                status=cart.status,
                opened_at=now,
            )
        )
        return cart

    @classmethod
    def place_direct(
        cls,
        items,
        venue,
        client_name,
        token,
        display_id=None,
        client_phone=None,
        table_number=None,
        owner=None,
    ):
        """Create an order straight at ``pending``, bypassing the cart."""
        venue = coerce_venue(venue)
        line_items = normalize_items(items)
        now = datetime.now(UTC)
        order = cls(
            token=token,
            display_id=display_id,
            owner=owner,
            venue=venue.value,
            items=json.dumps(line_items),
            total=items_total(line_items),
            status=OrderStatus.PENDING.value,
            client_name=client_name,
            client_phone=client_phone or None,
            table_number=table_number or None,
            created_at=now,
            updated_at=now,
        )
        order._raise_placed(now)
        return order

    # -------------------------------------------------------------------
    # Cart mutations (only in CART state)
    # -------------------------------------------------------------------
    def _assert_in_cart(self, action):
        if self.status != OrderStatus.CART.value:
            raise ValidationError({"status": [f"{action} is only allowed while the order is a cart"]})

    def replace_items(self, items):
        """Replace the cart's items; the total is recomputed in the same write."""
        self._assert_in_cart("Changing items")
        line_items = normalize_items(items)
        now = datetime.now(UTC)

        with atomic_change(self):
            self.items = json.dumps(line_items)
            self.total = items_total(line_items)
            self.updated_at = now

        self.raise_(
            CartItemsReplaced(
                order_id=str(self.id),
                owner=str(self.owner) if self.owner else None,
                venue=self.venue,
                status=self.status,
                item_count=len(line_items),
                total=self.total,
                updated_at=now,
            )
        )

    def clear(self):
        """Empty the cart. Status and venue are left untouched."""
        self._assert_in_cart("Clearing items")
        now = datetime.now(UTC)

        with atomic_change(self):
            self.items = json.dumps([])
            self.total = 0.0
            self.updated_at = now

        self.raise_(
            CartCleared(
                order_id=str(self.id),
                owner=str(self.owner) if self.owner else None,
                venue=self.venue,
                status=self.status,
                cleared_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(current.value, target_status.value)

    def place(self, venue, client_name, token, display_id=None):
        """Convert the cart into a pending order at ``venue``.

        Token, venue, client name and a fresh ``created_at`` are written
        together so active-order sorting reflects placement time.
        """
        self._assert_can_transition(OrderStatus.PENDING)
        venue = coerce_venue(venue)
        now = datetime.now(UTC)

        with atomic_change(self):
            self.status = OrderStatus.PENDING.value
            self.token = token
            self.display_id = display_id
            self.venue = venue.value
            if client_name:
                self.client_name = client_name
            self.created_at = now
            self.updated_at = now

        self._raise_placed(now)

    def advance_to(self, target_status):
        """Apply a staff status change along the transition table."""
        target = coerce_status(target_status)
        current = OrderStatus(self.status)
        if current == OrderStatus.CART:
            raise InvalidTransition(current.value, target.value)
        self._assert_can_transition(target)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                owner=str(self.owner) if self.owner else None,
                venue=self.venue,
                previous_status=current.value,
                status=target.value,
                changed_at=now,
            )
        )

    def _raise_placed(self, placed_at):
        self.raise_(
            OrderPlaced(
                order_id=str(self.id),
                owner=str(self.owner) if self.owner else None,
                venue=self.venue,
                status=self.status,
                token=self.token,
                display_id=self.display_id,
                client_name=self.client_name,
                item_count=len(load_items(self.items)),
                total=self.total,
                placed_at=placed_at,
            )
        )
