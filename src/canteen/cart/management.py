"""Cart management: one mutable ``cart`` Order per owner.

The cart is created lazily on the first upsert and reused afterwards.
``upsert_cart`` holds the owner's lock across the whole command so two
concurrent first writes cannot both create a cart.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from canteen.domain import canteen
from canteen.errors import NotAuthenticated
from canteen.order.order import Order, OrderStatus
from canteen.store.orders import OrderStore, store_call
from canteen.utils.locks import owner_locks

logger = structlog.get_logger(__name__)


@canteen.command(part_of="Order")
class UpsertCart:
    """Replace the owner's cart items, creating the cart if there is none."""

    owner = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line item dicts
    client_name = String(max_length=255)


@canteen.command(part_of="Order")
class ClearCart:
    cart_id = Identifier(required=True)


def _require_owner(owner):
    if not owner:
        raise NotAuthenticated({"owner": ["An authenticated owner is required"]})


def get_cart(owner):
    """Return the owner's cart, or ``None`` if they have not started one."""
    _require_owner(owner)
    carts = OrderStore().select(owner=str(owner), status=OrderStatus.CART.value)
    if len(carts) > 1:
        logger.warning("Owner has more than one cart", owner=str(owner), cart_ids=[str(c.id) for c in carts])
    return carts[0] if carts else None


@canteen.command_handler(part_of=Order)
class ManageCartHandler:
    @handle(UpsertCart)
    def upsert_cart(self, command):
        items = json.loads(command.items) if isinstance(command.items, str) else command.items
        store = OrderStore()

        cart = get_cart(command.owner)
        if cart is None:
            cart = Order.open_cart(owner=command.owner, client_name=command.client_name)
            logger.info("Opened cart", owner=str(command.owner), cart_id=str(cart.id))

        cart.replace_items(items)
        store.insert(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        store = OrderStore()
        cart = store.get(command.cart_id)
        cart.clear()
        store.insert(cart)


def upsert_cart(owner, items, client_name=None):
    """Write ``items`` to the owner's cart and return the stored cart."""
    _require_owner(owner)
    if not isinstance(items, list):
        raise ValidationError({"items": ["Items must be a list of line items"]})

    with owner_locks.hold(str(owner)), store_call("upsert_cart", owner=str(owner)):
        cart_id = current_domain.process(
            UpsertCart(owner=str(owner), items=json.dumps(items), client_name=client_name),
            asynchronous=False,
        )
    return OrderStore().get(cart_id)


def clear_cart(cart_id):
    with store_call("clear_cart", cart_id=str(cart_id)):
        current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return OrderStore().get(cart_id)
