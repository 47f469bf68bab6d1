"""Order start — command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, Integer

from fleetops.domain import fleetops
from fleetops.driver.registration import find_driver
from fleetops.order.engine import OrderLifecycleEngine
from fleetops.order.loading import load_assigned_driver, load_order, persist
from fleetops.order.order import Order


@fleetops.command(part_of="Order")
class StartOrder:
    order_id = Identifier(required=True)
    company_id = Identifier()
    expected_revision = Integer()
    skip_dispatch = Boolean(default=False)
    assign = Identifier()  # Driver accepting an adhoc order


@fleetops.command_handler(part_of=Order)
class StartOrderHandler:
    @handle(StartOrder)
    def start_order(self, command):
        order = load_order(command)

        assignee = None
        if command.assign:
            assignee = find_driver(command.assign)
            if assignee is None:
                raise ObjectNotFoundError("Driver resource not found.")

        driver = load_assigned_driver(order)
        result = OrderLifecycleEngine().start(
            order,
            driver,
            skip_dispatch=bool(command.skip_dispatch),
            assignee=assignee,
        )
        persist(order, assignee if order.adhoc and assignee is not None else driver)
        return result.progress.value
