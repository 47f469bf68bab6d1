"""Order cancellation — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer

from fleetops.domain import fleetops
from fleetops.order.engine import OrderLifecycleEngine
from fleetops.order.loading import load_assigned_driver, load_order, persist
from fleetops.order.order import Order


@fleetops.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    company_id = Identifier()
    expected_revision = Integer()


@fleetops.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command)
        driver = load_assigned_driver(order)
        OrderLifecycleEngine().cancel_order(order, driver)
        persist(order, driver)
        return str(order.id)
