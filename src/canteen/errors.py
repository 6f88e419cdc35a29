"""Errors raised by the canteen context.

Validation-type failures extend protean's ``ValidationError`` so they carry a
``messages`` dict and map to HTTP 400 through protean's FastAPI handlers.
"""

from protean.exceptions import ProteanExceptionWithMessage, ValidationError


class NotAuthenticated(ProteanExceptionWithMessage):
    """The operation needs an owner identity and none was supplied."""


class StoreFailure(ProteanExceptionWithMessage):
    """The order store could not complete a read or write."""


class InvalidTransition(ValidationError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__({"status": [f"Cannot transition from {current} to {target}"]})


class EmptyCartCheckout(ValidationError):
    def __init__(self, cart_id):
        self.cart_id = cart_id
        super().__init__({"items": ["Cannot check out an empty cart"]})


class MixedVenueCheckout(ValidationError):
    def __init__(self, venues):
        self.venues = sorted(venues)
        super().__init__(
            {"venue": [f"Cart items span several venues ({', '.join(self.venues)}); order from one venue at a time"]}
        )
