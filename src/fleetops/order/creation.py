"""Order creation — command and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from fleetops.adapters import get_vendor
from fleetops.adapters.vendor_dispatch import dispatch_to_vendor
from fleetops.domain import fleetops
from fleetops.driver.registration import find_driver
from fleetops.order.dispatch import DispatchGate
from fleetops.order.distance import compute_distance_matrix
from fleetops.order.order import Order

logger = structlog.get_logger(__name__)


def _json(value):
    return json.loads(value) if isinstance(value, str) else value


@fleetops.command(part_of="Order")
class CreateOrder:
    company_id = Identifier()
    order_type = String(max_length=50, default="default")
    pickup = Text()  # JSON: place dict
    dropoff = Text()  # JSON: place dict
    return_place = Text()  # JSON: place dict
    waypoints = Text()  # JSON: list of place dicts
    items = Text()  # JSON: list of line item dicts
    driver_id = Identifier()
    adhoc = Boolean(default=False)
    adhoc_distance = Integer(min_value=0)
    pod_required = Boolean(default=False)
    pod_method = String(max_length=20)
    scheduled_at = DateTime()
    dispatch = Boolean(default=False)
    integrated_vendor = String(max_length=100)


@fleetops.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        pickup = _json(command.pickup)
        dropoff = _json(command.dropoff)
        return_place = _json(command.return_place)
        waypoints = _json(command.waypoints) or []
        items = _json(command.items) or []

        # Vendor-facilitated orders are never assigned to one of our drivers
        driver_id = None
        if command.driver_id and not command.integrated_vendor:
            driver = find_driver(command.driver_id)
            if driver is None:
                raise ObjectNotFoundError("Driver resource not found.")
            driver_id = str(driver.id)

        order = Order.create(
            company_id=command.company_id,
            order_type=command.order_type,
            pickup=pickup,
            dropoff=dropoff,
            return_place=return_place,
            waypoints=waypoints,
            items=items,
            driver_id=driver_id,
            adhoc=bool(command.adhoc),
            adhoc_distance=command.adhoc_distance,
            pod_required=bool(command.pod_required),
            pod_method=command.pod_method,
            scheduled_at=command.scheduled_at,
        )

        matrix = compute_distance_matrix(order)
        order.update_distance_matrix(matrix["distance"], matrix["time"])

        if command.integrated_vendor:
            vendor_order = dispatch_to_vendor(
                get_vendor(),
                command.integrated_vendor,
                order.public_id,
                {
                    "order_type": order.order_type,
                    "pickup": pickup,
                    "dropoff": dropoff,
                    "waypoints": waypoints,
                    "items": items,
                },
            )
            order.attach_vendor_order(command.integrated_vendor, json.dumps(vendor_order))
        elif command.dispatch:
            DispatchGate().dispatch(order)

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order created",
            order_id=str(order.id),
            public_id=order.public_id,
            order_type=order.order_type,
            integrated_vendor=order.integrated_vendor,
            dispatched=order.dispatched,
        )
        return str(order.id)
