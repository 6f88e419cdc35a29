"""Change notifications for order rows.

An event handler on the Order aggregate turns every committed Order event
into a small change record (``id``, ``owner``, ``venue``, ``status``) and
publishes it on the process-wide ``change_feed``. Subscribers register with
equality filters on those keys and are called after each matching write.

Delivery is best effort: a failing listener is logged and skipped, and
nothing is replayed for subscribers that register late.
"""

import threading

import structlog
from protean import handle

from canteen.domain import canteen
from canteen.order.events import (
    CartCleared,
    CartItemsReplaced,
    CartOpened,
    OrderPlaced,
    OrderStatusChanged,
)
from canteen.order.order import Order

logger = structlog.get_logger(__name__)


def change_for(order):
    return {
        "id": str(order.id),
        "owner": str(order.owner) if order.owner else None,
        "venue": order.venue,
        "status": order.status,
    }


class Subscription:
    def __init__(self, feed, listener, filters):
        self._feed = feed
        self.listener = listener
        self.filters = filters
        self.active = True

    def matches(self, change):
        return all(change.get(key) == value for key, value in self.filters.items())

    def release(self):
        """Stop receiving notifications. Safe to call more than once."""
        if self.active:
            self.active = False
            self._feed.discard(self)


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions = []

    def subscribe(self, listener, **filters):
        subscription = Subscription(self, listener, filters)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def discard(self, subscription):
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, change):
        with self._lock:
            targets = [s for s in self._subscriptions if s.matches(change)]

        for subscription in targets:
            if not subscription.active:
                continue
            try:
                subscription.listener(change)
            except Exception:
                logger.exception("Change listener failed", order_id=change.get("id"), filters=subscription.filters)

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscriptions)

    def reset(self):
        with self._lock:
            for subscription in self._subscriptions:
                subscription.active = False
            self._subscriptions = []


change_feed = ChangeFeed()


@canteen.event_handler(part_of=Order)
class OrderChangeFeedHandler:
    """Fans committed Order events out to change feed subscribers."""

    def _publish(self, event):
        change_feed.publish(
            {
                "id": str(event.order_id),
                "owner": str(event.owner) if event.owner else None,
                "venue": event.venue,
                "status": event.status,
            }
        )

    @handle(CartOpened)
    def on_cart_opened(self, event: CartOpened) -> None:
        self._publish(event)

    @handle(CartItemsReplaced)
    def on_cart_items_replaced(self, event: CartItemsReplaced) -> None:
        self._publish(event)

    @handle(CartCleared)
    def on_cart_cleared(self, event: CartCleared) -> None:
        self._publish(event)

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        logger.info("Order placed", order_id=str(event.order_id), venue=event.venue, token=event.token)
        self._publish(event)

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        logger.info(
            "Order status changed",
            order_id=str(event.order_id),
            previous_status=event.previous_status,
            status=event.status,
        )
        self._publish(event)
