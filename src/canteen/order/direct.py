"""Walk-in orders entered by staff, placed without a cart."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from canteen.domain import canteen
from canteen.order.identifiers import generate_sequential_id, generate_token
from canteen.order.order import Order, Venue, coerce_venue
from canteen.store.orders import OrderStore, store_call
from canteen.utils.locks import venue_locks

logger = structlog.get_logger(__name__)


@canteen.command(part_of="Order")
class CreateDirectOrder:
    items = Text(required=True)  # JSON: list of line item dicts
    venue = String(required=True, choices=Venue)
    client_name = String(required=True, max_length=255)
    client_phone = String(max_length=32)
    table_number = String(max_length=16)
    owner = Identifier()


@canteen.command_handler(part_of=Order)
class CreateDirectOrderHandler:
    @handle(CreateDirectOrder)
    def create_direct_order(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        if not items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        venue = coerce_venue(command.venue)
        order = Order.place_direct(
            items=items,
            venue=venue,
            client_name=command.client_name,
            token=generate_token(venue),
            display_id=generate_sequential_id(venue),
            client_phone=command.client_phone,
            table_number=command.table_number,
            owner=command.owner,
        )
        OrderStore().insert(order)

        logger.info("Created direct order", order_id=str(order.id), venue=venue.value, token=order.token)
        return str(order.id)


def create_direct_order(items, venue, client_name, client_phone=None, table_number=None, owner=None):
    """Insert an order straight at ``pending`` and return it."""
    venue = coerce_venue(venue)
    with venue_locks.hold(venue.value), store_call("create_direct_order", venue=venue.value):
        order_id = current_domain.process(
            CreateDirectOrder(
                items=json.dumps(items),
                venue=venue.value,
                client_name=client_name,
                client_phone=client_phone,
                table_number=table_number,
                owner=str(owner) if owner else None,
            ),
            asynchronous=False,
        )
    return OrderStore().get(order_id)
