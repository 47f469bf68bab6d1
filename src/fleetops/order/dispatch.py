"""Order dispatch — gate, command and handler.

Dispatching hands the order to its assigned driver, or to the pool of
eligible drivers for adhoc orders.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from fleetops.domain import fleetops
from fleetops.order.errors import AlreadyDispatched, NoDriverAssigned
from fleetops.order.loading import load_order
from fleetops.order.order import Activity, ActivityCode, Order

logger = structlog.get_logger(__name__)

_DISPATCH_ACTIVITY = {
    "code": ActivityCode.DISPATCHED.value,
    "status": "Order dispatched",
    "details": "Order has been dispatched to driver.",
}


class DispatchGate:
    """Preconditions for moving an order into the dispatched state."""

    def dispatch(self, order, activity=None, location=None) -> None:
        if order.dispatched:
            raise AlreadyDispatched()
        if not order.has_driver_assigned and not order.adhoc:
            logger.warning("Dispatch refused, no driver assigned", order_id=str(order.id))
            raise NoDriverAssigned("No driver assigned to dispatch!")
        order.mark_dispatched(activity or Activity(**_DISPATCH_ACTIVITY), location)


@fleetops.command(part_of="Order")
class DispatchOrder:
    """Dispatch an order to its driver."""

    order_id = Identifier(required=True)
    company_id = Identifier()
    expected_revision = Integer()


@fleetops.command_handler(part_of=Order)
class DispatchOrderHandler:
    @handle(DispatchOrder)
    def dispatch_order(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command)
        DispatchGate().dispatch(order)
        repo.add(order)
        logger.info("Order dispatched", order_id=str(order.id), adhoc=order.adhoc)
        return str(order.id)
