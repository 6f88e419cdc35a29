"""Staff status changes along the order state machine."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from canteen.domain import canteen
from canteen.order.order import Order, OrderStatus
from canteen.store.orders import OrderStore, store_call


@canteen.command(part_of="Order")
class SetOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)


@canteen.command_handler(part_of=Order)
class SetOrderStatusHandler:
    @handle(SetOrderStatus)
    def set_order_status(self, command):
        store = OrderStore()
        order = store.get(command.order_id)
        order.advance_to(command.status)
        store.insert(order)
        return str(order.id)


def set_order_status(order_id, status):
    """Move an order to ``status``. Concurrent changes are last-writer-wins."""
    status = status.value if isinstance(status, OrderStatus) else status
    with store_call("set_order_status", order_id=str(order_id)):
        current_domain.process(SetOrderStatus(order_id=str(order_id), status=status), asynchronous=False)
    return OrderStore().get(order_id)
