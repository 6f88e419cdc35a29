"""Checkout: convert a cart into a pending order at one venue.

The cart row keeps its ``id``; status, token, display ID, venue, client
name and ``created_at`` change in a single write. Placement is serialized
per venue so display IDs stay sequential.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from canteen.domain import canteen
from canteen.errors import EmptyCartCheckout, InvalidTransition, MixedVenueCheckout
from canteen.order.identifiers import generate_sequential_id, generate_token
from canteen.order.order import Order, OrderStatus, Venue, coerce_venue, item_venues, load_items
from canteen.store.orders import OrderStore, store_call
from canteen.utils.locks import venue_locks

logger = structlog.get_logger(__name__)


@canteen.command(part_of="Order")
class Checkout:
    cart_id = Identifier(required=True)
    venue = String(required=True, choices=Venue)
    client_name = String(max_length=255)


def ensure_checkout_ready(cart, venue=None):
    """Check that ``cart`` can be placed and return the venue it belongs to.

    Raises ``EmptyCartCheckout`` for an empty cart and ``MixedVenueCheckout``
    when its items come from several venues or from a venue other than the
    requested one. Items without a venue fit any venue; with no venue given
    and none on the items, ``medical`` is used.
    """
    items = load_items(cart.items)
    if not items:
        raise EmptyCartCheckout(str(cart.id))

    venues = item_venues(items)
    if len(venues) > 1:
        raise MixedVenueCheckout(venues)

    if venue is not None:
        requested = coerce_venue(venue)
        if venues and requested.value not in venues:
            raise MixedVenueCheckout(venues | {requested.value})
        return requested

    return coerce_venue(venues.pop()) if venues else Venue.MEDICAL


@canteen.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(Checkout)
    def checkout(self, command):
        store = OrderStore()
        cart = store.get(command.cart_id)

        # Reject repeat checkouts before any identifiers are drawn
        if cart.status != OrderStatus.CART.value:
            raise InvalidTransition(cart.status, OrderStatus.PENDING.value)

        venue = ensure_checkout_ready(cart, command.venue)
        token = generate_token(venue)
        display_id = generate_sequential_id(venue)

        cart.place(venue=venue, client_name=command.client_name, token=token, display_id=display_id)
        store.insert(cart)

        logger.info(
            "Checked out cart",
            order_id=str(cart.id),
            venue=venue.value,
            token=token,
            display_id=display_id,
        )
        return str(cart.id)


def checkout(cart_id, venue, client_name=None):
    """Place the cart ``cart_id`` at ``venue`` and return the pending order."""
    venue = coerce_venue(venue)
    with venue_locks.hold(venue.value), store_call("checkout", cart_id=str(cart_id)):
        order_id = current_domain.process(
            Checkout(cart_id=str(cart_id), venue=venue.value, client_name=client_name),
            asynchronous=False,
        )
    return OrderStore().get(order_id)
