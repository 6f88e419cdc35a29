"""FastAPI routes for the Canteen context: cart, orders and venue queues.

The caller's identity arrives in the ``X-User-Id`` header; an absent header
means an anonymous caller and is rejected wherever an owner is needed.
"""

from fastapi import APIRouter, Header, HTTPException

from canteen.api.schemas import (
    CartResponse,
    CheckoutRequest,
    CreateDirectOrderRequest,
    OrderResponse,
    SetOrderStatusRequest,
    UpsertCartRequest,
)
from canteen.cart.checkout import checkout, ensure_checkout_ready
from canteen.cart.management import clear_cart, get_cart, upsert_cart
from canteen.errors import NotAuthenticated
from canteen.order.direct import create_direct_order
from canteen.order.status import set_order_status
from canteen.store.orders import OrderStore
from canteen.views.queries import list_active_orders, list_order_history, list_venue_queue


def _owner(x_user_id: str | None) -> str:
    if not x_user_id:
        raise NotAuthenticated({"owner": ["X-User-Id header is required"]})
    return x_user_id


def _owned_cart(cart_id: str, owner: str):
    cart = OrderStore().get(cart_id)
    if str(cart.owner) != owner:
        raise HTTPException(status_code=403, detail="Cart belongs to another user")
    return cart


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def read_cart(x_user_id: str | None = Header(default=None)) -> CartResponse:
    cart = get_cart(_owner(x_user_id))
    return CartResponse(cart=OrderResponse.from_order(cart) if cart else None)


@cart_router.put("", response_model=OrderResponse)
async def write_cart(body: UpsertCartRequest, x_user_id: str | None = Header(default=None)) -> OrderResponse:
    cart = upsert_cart(
        _owner(x_user_id),
        [item.model_dump(exclude_none=True) for item in body.items],
        client_name=body.client_name,
    )
    return OrderResponse.from_order(cart)


@cart_router.delete("/{cart_id}/items", response_model=OrderResponse)
async def empty_cart(cart_id: str, x_user_id: str | None = Header(default=None)) -> OrderResponse:
    _owned_cart(cart_id, _owner(x_user_id))
    return OrderResponse.from_order(clear_cart(cart_id))


@cart_router.post("/{cart_id}/checkout", response_model=OrderResponse)
async def checkout_cart(
    cart_id: str,
    body: CheckoutRequest,
    x_user_id: str | None = Header(default=None),
) -> OrderResponse:
    cart = _owned_cart(cart_id, _owner(x_user_id))
    venue = ensure_checkout_ready(cart, body.venue)
    order = checkout(cart_id, venue, client_name=body.client_name)
    return OrderResponse.from_order(order)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_direct_order(
    body: CreateDirectOrderRequest,
    x_user_id: str | None = Header(default=None),
) -> OrderResponse:
    order = create_direct_order(
        items=[item.model_dump(exclude_none=True) for item in body.items],
        venue=body.venue,
        client_name=body.client_name,
        client_phone=body.client_phone,
        table_number=body.table_number,
        owner=x_user_id or None,
    )
    return OrderResponse.from_order(order)


@order_router.get("/active", response_model=list[OrderResponse])
async def active_orders(x_user_id: str | None = Header(default=None)) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in list_active_orders(_owner(x_user_id))]


@order_router.get("/history", response_model=list[OrderResponse])
async def order_history(x_user_id: str | None = Header(default=None)) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in list_order_history(_owner(x_user_id))]


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def change_status(order_id: str, body: SetOrderStatusRequest) -> OrderResponse:
    return OrderResponse.from_order(set_order_status(order_id, body.status))


# ---------------------------------------------------------------------------
# Venue Router
# ---------------------------------------------------------------------------
venue_router = APIRouter(prefix="/venues", tags=["venues"])


@venue_router.get("/{venue}/queue", response_model=list[OrderResponse])
async def venue_queue(venue: str) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in list_venue_queue(venue)]
