"""Live venue queue for staff displays.

``VenueQueue`` keeps a snapshot of ``list_venue_queue(venue)`` and re-fetches
it in full whenever the change feed reports a write at that venue. There is
no incremental diffing: every notification means one fresh query.
"""

import threading

import structlog

from canteen.order.order import coerce_venue
from canteen.store.orders import OrderStore
from canteen.views.queries import list_venue_queue

logger = structlog.get_logger(__name__)


class VenueQueue:
    def __init__(self, venue, limit=None):
        self.venue = coerce_venue(venue)
        self.limit = limit
        self.orders = []
        self._listeners = []
        self._subscription = None
        self._lock = threading.Lock()

    @property
    def is_open(self):
        return self._subscription is not None

    def add_listener(self, listener):
        """Register ``listener(orders)``, called after every refresh."""
        self._listeners.append(listener)

    def open(self):
        if self.is_open:
            return self
        self._subscription = OrderStore().subscribe_changes(self._on_change, venue=self.venue.value)
        self.refresh()
        logger.debug("Venue queue opened", venue=self.venue.value)
        return self

    def close(self):
        if self._subscription is not None:
            self._subscription.release()
            self._subscription = None
            logger.debug("Venue queue closed", venue=self.venue.value)

    def refresh(self):
        orders = list_venue_queue(self.venue, limit=self.limit)
        with self._lock:
            self.orders = orders
        for listener in list(self._listeners):
            listener(orders)
        return orders

    def _on_change(self, change):
        try:
            self.refresh()
        except Exception:
            # Keep the last snapshot; the next notification or a manual refresh catches up
            logger.exception("Venue queue refresh failed", venue=self.venue.value, order_id=change.get("id"))

    def __enter__(self):
        return self.open()

    def __exit__(self, *exc_info):
        self.close()
