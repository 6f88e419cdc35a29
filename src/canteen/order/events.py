"""Domain events for the Order aggregate.

Every event carries ``order_id``, ``owner``, ``venue`` and ``status`` so the
change feed can match it against subscriber filters without reloading the
row.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from canteen.domain import canteen


@canteen.event(part_of="Order")
class CartOpened:
    """A user's first cart mutation created a fresh cart record."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner = Identifier()
    venue = String(required=True)
    status = String(required=True)
    opened_at = DateTime()


@canteen.event(part_of="Order")
class CartItemsReplaced:
    """The cart's line items were replaced and its total recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner = Identifier()
    venue = String(required=True)
    status = String(required=True)
    item_count = Integer(default=0)
    total = Float(default=0.0)
    updated_at = DateTime()


@canteen.event(part_of="Order")
class CartCleared:
    __version__ = 1

    order_id = Identifier(required=True)
    owner = Identifier()
    venue = String(required=True)
    status = String(required=True)
    cleared_at = DateTime()


@canteen.event(part_of="Order")
class OrderPlaced:
    """An order entered the kitchen queue, through checkout or staff entry."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner = Identifier()
    venue = String(required=True)
    status = String(required=True)
    token = String(required=True)
    display_id = String()
    client_name = String()
    item_count = Integer(default=0)
    total = Float(default=0.0)
    placed_at = DateTime()


@canteen.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    owner = Identifier()
    venue = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    changed_at = DateTime()
