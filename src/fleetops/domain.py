"""FleetOps bounded context — Order Fulfillment and Proof of Delivery.

Drives a logistics order from dispatch through pickup/dropoff or a
multi-stop waypoint sequence to completion, and captures delivery proof
(QR scans and signatures) along the way.
"""

from protean.domain import Domain

from fleetops.utils.logging import configure_logging

configure_logging()

fleetops = Domain(name="fleetops")
