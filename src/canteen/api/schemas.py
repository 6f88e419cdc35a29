"""Pydantic request/response schemas for the Canteen API.

These are the external contracts; protean commands stay internal.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from canteen.order.order import load_items


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LineItemSchema(BaseModel):
    product_id: str
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(ge=1)
    venue: str | None = None
    image_url: str | None = None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class UpsertCartRequest(BaseModel):
    items: list[LineItemSchema]
    client_name: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {
                            "product_id": "chai-01",
                            "name": "Masala Chai",
                            "price": 20.0,
                            "quantity": 2,
                            "venue": "medical",
                        }
                    ],
                    "client_name": "Asha",
                }
            ]
        }
    }


class CheckoutRequest(BaseModel):
    venue: str | None = None
    client_name: str | None = None


class CreateDirectOrderRequest(BaseModel):
    items: list[LineItemSchema] = Field(min_length=1)
    venue: str
    client_name: str
    client_phone: str | None = None
    table_number: str | None = None


class SetOrderStatusRequest(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderResponse(BaseModel):
    id: str
    token: str | None = None
    display_id: str | None = None
    owner: str | None = None
    venue: str
    status: str
    items: list[LineItemSchema] = []
    total: float
    client_name: str | None = None
    client_phone: str | None = None
    table_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            token=order.token,
            display_id=order.display_id,
            owner=str(order.owner) if order.owner else None,
            venue=order.venue,
            status=order.status,
            items=[LineItemSchema(**item) for item in load_items(order.items)],
            total=order.total,
            client_name=order.client_name,
            client_phone=order.client_phone,
            table_number=order.table_number,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class CartResponse(BaseModel):
    cart: OrderResponse | None = None
