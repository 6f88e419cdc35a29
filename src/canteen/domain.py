"""Canteen bounded context: carts, orders and the live order board.

A cart is an Order in status ``cart``. Checkout converts it in place into a
pending order for one of the two venues, after which staff advance it
through preparation until it is completed or cancelled.
"""

import structlog
from protean.domain import Domain

canteen = Domain(name="canteen")

logger = structlog.get_logger(__name__)
