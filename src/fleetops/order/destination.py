"""Destination change — point a multi-drop order at another stop."""

from protean import handle
from protean.fields import Identifier, Integer, String

from fleetops.domain import fleetops
from fleetops.order.engine import OrderLifecycleEngine
from fleetops.order.loading import load_order, persist
from fleetops.order.order import Order


@fleetops.command(part_of="Order")
class SetDestination:
    order_id = Identifier(required=True)
    company_id = Identifier()
    expected_revision = Integer()
    place_id = String(required=True, max_length=50)  # Place or waypoint public id


@fleetops.command_handler(part_of=Order)
class SetDestinationHandler:
    @handle(SetDestination)
    def set_destination(self, command):
        order = load_order(command)
        OrderLifecycleEngine().set_destination(order, command.place_id)
        persist(order)
        return order.current_waypoint_id
