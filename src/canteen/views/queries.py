"""Read-side queries over orders for client dashboards and staff screens."""

from canteen.errors import NotAuthenticated
from canteen.order.order import ACTIVE_STATUSES, HISTORY_STATUSES, OrderStatus, coerce_venue
from canteen.store.orders import OrderStore
from canteen.utils.settings import custom_setting


def _owner_or_raise(owner):
    if not owner:
        raise NotAuthenticated({"owner": ["An authenticated owner is required"]})
    return str(owner)


def list_active_orders(owner):
    """Orders being worked on for ``owner``: pending, preparing or ready, newest first."""
    return OrderStore().select(
        owner=_owner_or_raise(owner),
        status__in=[s.value for s in ACTIVE_STATUSES],
    )


def list_order_history(owner, limit=None):
    """The owner's most recent completed or cancelled orders."""
    return OrderStore().select(
        owner=_owner_or_raise(owner),
        status__in=[s.value for s in HISTORY_STATUSES],
        limit=custom_setting("history_limit") if limit is None else limit,
    )


def list_venue_queue(venue, limit=None):
    """Every placed order at ``venue``, newest first. Carts never appear.

    The queue is unbounded unless ``limit`` is given.
    """
    return OrderStore().select(
        venue=coerce_venue(venue).value,
        exclude={"status": OrderStatus.CART.value},
        limit=limit,
    )
