"""Customer-facing identifiers for placed orders.

Two schemes coexist: a random token (``MED-457``) read out at the pickup
counter, and a sequential display ID (``BIT-1003``) shown on staff screens.
Tokens are not guaranteed unique; the order's ``id`` is the only key.
"""

import random

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from canteen.order.order import VENUE_PREFIXES, OrderStatus, coerce_venue
from canteen.order.sequence import VenueSequence
from canteen.store.orders import OrderStore
from canteen.utils.settings import custom_setting

logger = structlog.get_logger(__name__)

DISPLAY_ID_BASE = 1000

_rng = random.SystemRandom()


def generate_token(venue, rng=None):
    """Return ``<PREFIX>-<n>`` with ``n`` drawn uniformly from ``[token_min, token_max)``."""
    prefix = VENUE_PREFIXES[coerce_venue(venue)]
    rng = rng or _rng
    return f"{prefix}-{rng.randrange(custom_setting('token_min'), custom_setting('token_max'))}"


def generate_sequential_id(venue):
    """Return the next ``<PREFIX>-<1000 + n>`` display ID for ``venue``.

    The counter is seeded from the number of orders already placed at the
    venue, so it continues from existing data the first time it is used.
    Callers must hold the venue lock for the whole placement.
    """
    venue = coerce_venue(venue)
    repo = current_domain.repository_for(VenueSequence)
    try:
        sequence = repo.get(venue.value)
    except ObjectNotFoundError:
        placed = OrderStore().count(venue=venue.value, exclude={"status": OrderStatus.CART.value})
        logger.info("Seeding display id sequence", venue=venue.value, placed=placed)
        sequence = VenueSequence(venue=venue.value, last_value=placed)

    value = sequence.next_value()
    repo.add(sequence)
    return f"{VENUE_PREFIXES[venue]}-{DISPLAY_ID_BASE + value}"
