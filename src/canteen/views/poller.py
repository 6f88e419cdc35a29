"""Interval polling of a client's active orders.

Fallback for clients without a change-feed connection: the active order
list is re-fetched on a fixed interval in a background thread. A failed
poll is logged and the previous snapshot stays in place.
"""

import threading

import structlog

from canteen.domain import canteen
from canteen.utils.settings import custom_setting
from canteen.views.queries import list_active_orders

logger = structlog.get_logger(__name__)


class ActiveOrdersPoller:
    def __init__(self, owner, interval=None, on_update=None):
        self.owner = owner
        self.interval = interval if interval is not None else custom_setting("active_orders_poll_seconds")
        self.on_update = on_update
        self.orders = []
        self.last_error = None
        self._stop = threading.Event()
        self._thread = None

    def refresh(self):
        try:
            orders = list_active_orders(self.owner)
        except Exception as exc:
            self.last_error = exc
            logger.warning("Active orders poll failed", owner=str(self.owner), error=str(exc))
            return self.orders

        self.orders = orders
        self.last_error = None
        if self.on_update is not None:
            self.on_update(orders)
        return orders

    def _run(self):
        while not self._stop.wait(self.interval):
            with canteen.domain_context():
                self.refresh()

    def start(self):
        if self._thread is not None:
            return self
        self.refresh()
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name=f"active-orders-{self.owner}", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout=None):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()
