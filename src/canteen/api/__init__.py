"""Canteen HTTP API package."""

from canteen.api.errors import register_error_handlers
from canteen.api.routes import cart_router, order_router, venue_router

__all__ = ["cart_router", "order_router", "venue_router", "register_error_handlers"]
