"""Distance matrix — driving distance and time between the order's ends."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from fleetops.adapters import get_distance_service
from fleetops.domain import fleetops
from fleetops.order.loading import load_order
from fleetops.order.order import Order


def route_ends(order):
    """Origin and destination locations of the order.

    Origin is the pickup, else the first waypoint. Destination is the
    dropoff, else the current waypoint (falling back to the last stop).
    """
    waypoints = order.ordered_waypoints()

    origin = order.pickup.location if order.pickup else None
    if origin is None and waypoints:
        origin = waypoints[0].place.location

    destination = order.dropoff.location if order.dropoff else None
    if destination is None and waypoints:
        current = order.current_waypoint or waypoints[-1]
        destination = current.place.location

    return origin, destination


def compute_distance_matrix(order) -> dict:
    origin, destination = route_ends(order)
    return get_distance_service().matrix(origin, destination)


@fleetops.command(part_of="Order")
class RefreshDistanceMatrix:
    order_id = Identifier(required=True)
    company_id = Identifier()
    expected_revision = Integer()


@fleetops.command_handler(part_of=Order)
class DistanceMatrixHandler:
    @handle(RefreshDistanceMatrix)
    def refresh_distance_matrix(self, command):
        repo = current_domain.repository_for(Order)
        order = load_order(command)
        matrix = compute_distance_matrix(order)
        order.update_distance_matrix(matrix["distance"], matrix["time"])
        repo.add(order)
        return {"distance": order.distance, "time": order.time}
