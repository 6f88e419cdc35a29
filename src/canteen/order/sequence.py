"""Per-venue counter backing sequential display IDs."""

from protean.fields import Identifier, Integer

from canteen.domain import canteen


@canteen.aggregate
class VenueSequence:
    venue = Identifier(identifier=True)
    last_value = Integer(default=0, min_value=0)

    def next_value(self):
        self.last_value = (self.last_value or 0) + 1
        return self.last_value
