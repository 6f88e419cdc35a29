"""Record store adapter over the Order repository.

Gives the rest of the context one narrow surface for reading and writing
order rows: ``select``, ``count``, ``get``, ``insert``, ``update`` and
``subscribe_changes``. Failures coming from the underlying provider are
wrapped once in ``StoreFailure``; domain errors pass through untouched.
Service functions run command dispatch inside ``store_call`` too, since
the unit of work only reaches the provider when it commits.
"""

import json
from contextlib import contextmanager
from datetime import UTC, datetime

import structlog
from protean import atomic_change
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from canteen.errors import NotAuthenticated, StoreFailure
from canteen.order.order import Order, OrderStatus, items_total, load_items, normalize_items
from canteen.store.feed import change_feed, change_for

logger = structlog.get_logger(__name__)

# Fields that cannot change once an order has left the cart
_FROZEN_AFTER_PLACEMENT = ("venue", "token", "items", "owner")

_PASS_THROUGH = (ValidationError, ObjectNotFoundError, NotAuthenticated, StoreFailure)


@contextmanager
def store_call(operation, **context):
    try:
        yield
    except _PASS_THROUGH:
        raise
    except Exception as exc:
        logger.error("Order store call failed", operation=operation, error=str(exc), **context)
        raise StoreFailure({"store": [f"Order store {operation} failed: {exc}"]}) from exc


class OrderStore:
    def __init__(self):
        self.repo = current_domain.repository_for(Order)

    def get(self, order_id):
        with store_call("get", order_id=order_id):
            return self.repo.get(order_id)

    def select(self, order_by="-created_at", limit=None, exclude=None, **filters):
        """Return orders matching ``filters``, sorted by ``order_by``.

        Filters use protean lookups, e.g. ``status__in=[...]``. ``exclude``
        holds filters a row must *not* match.
        """
        if limit is not None and limit <= 0:
            return []
        with store_call("select", **filters):
            query = self.repo._dao.query.filter(**filters)
            if exclude:
                query = query.exclude(**exclude)
            return query.order_by(order_by).limit(limit).all().items

    def count(self, exclude=None, **filters):
        with store_call("count", **filters):
            query = self.repo._dao.query.filter(**filters)
            if exclude:
                query = query.exclude(**exclude)
            return query.all().total

    def insert(self, order):
        with store_call("insert", order_id=str(order.id)):
            self.repo.add(order)
        return order

    def update(self, order_id, **patch):
        """Apply a raw field patch to one order and notify subscribers.

        Placed orders keep their venue, token, owner and items. A patch to
        ``items`` on a cart recomputes ``total`` in the same write.
        """
        order = self.get(order_id)
        if order.status != OrderStatus.CART.value:
            frozen = sorted(set(patch) & set(_FROZEN_AFTER_PLACEMENT))
            if frozen:
                raise ValidationError({field: ["Cannot be changed once the order is placed"] for field in frozen})
        if "status" in patch:
            raise ValidationError({"status": ["Status changes go through checkout or SetOrderStatus"]})

        with atomic_change(order):
            for field, value in patch.items():
                if field == "items":
                    line_items = normalize_items(value if isinstance(value, list) else load_items(value))
                    order.items = json.dumps(line_items)
                    order.total = items_total(line_items)
                else:
                    setattr(order, field, value)
            order.updated_at = datetime.now(UTC)

        with store_call("update", order_id=str(order_id)):
            self.repo.add(order)
        change_feed.publish(change_for(order))
        return order

    def subscribe_changes(self, on_change, **filters):
        """Call ``on_change(change)`` after every committed write matching ``filters``."""
        return change_feed.subscribe(on_change, **filters)
