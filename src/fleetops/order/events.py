"""Order domain events — immutable facts about order lifecycle changes.

All events are past tense, versioned, and carry enough data for the
notification handler and any downstream consumers.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from fleetops.domain import fleetops


@fleetops.event(part_of="Order")
class OrderCreated:
    """A new order was created."""

    __version__ = 1

    order_id = Identifier(required=True)
    company_id = Identifier()
    order_type = String(required=True)
    driver_id = Identifier()
    adhoc = Boolean(default=False)
    waypoint_count = Integer(default=0)
    item_count = Integer(default=0)
    created_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class DriverAssigned:
    """A driver was assigned to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    driver_id = Identifier(required=True)
    assigned_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class OrderDispatched:
    """The order was dispatched to its driver (or to the adhoc pool)."""

    __version__ = 1

    order_id = Identifier(required=True)
    driver_id = Identifier()
    adhoc = Boolean(default=False)
    adhoc_distance = Integer()
    dispatched_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class OrderStarted:
    """The driver started working the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    driver_id = Identifier()
    skipped_dispatch = Boolean(default=False)
    started_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class ActivityRecorded:
    """An activity was appended to the order, a waypoint or a line item."""

    __version__ = 1

    order_id = Identifier(required=True)
    subject_type = String(required=True)
    subject_id = Identifier(required=True)
    code = String(required=True)
    status = String(required=True)
    proof_id = Identifier()
    recorded_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class WaypointCompleted:
    """One stop of a multi-drop order was completed or canceled."""

    __version__ = 1

    order_id = Identifier(required=True)
    waypoint_id = Identifier(required=True)
    status_code = String(required=True)
    waypoints_completed = Integer(required=True)
    waypoint_count = Integer(required=True)
    completed_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class DestinationChanged:
    """The current waypoint pointer moved to another stop."""

    __version__ = 1

    order_id = Identifier(required=True)
    waypoint_id = Identifier()
    changed_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class OrderCompleted:
    """The order reached its final activity."""

    __version__ = 1

    order_id = Identifier(required=True)
    company_id = Identifier()
    driver_id = Identifier()
    completed_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class OrderCanceled:
    """The order was canceled."""

    __version__ = 1

    order_id = Identifier(required=True)
    driver_id = Identifier()
    previous_status = String(required=True)
    canceled_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class OrderScheduled:
    """The order was scheduled for a specific date and time."""

    __version__ = 1

    order_id = Identifier(required=True)
    scheduled_at = DateTime(required=True)
    timezone = String(required=True)


@fleetops.event(part_of="Order")
class DistanceMatrixUpdated:
    """Driving distance and time were (re)computed for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    distance = Integer(required=True)
    time = Integer(required=True)
    updated_at = DateTime(required=True)


@fleetops.event(part_of="Order")
class VendorOrderCreated:
    """The order was placed with an integrated vendor."""

    __version__ = 1

    order_id = Identifier(required=True)
    integrated_vendor = String(required=True)
    vendor_order = Text(required=True)
    created_at = DateTime(required=True)
