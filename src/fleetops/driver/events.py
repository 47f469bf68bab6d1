"""Driver domain events."""

from protean.fields import DateTime, Float, Identifier, String

from fleetops.domain import fleetops


@fleetops.event(part_of="Driver")
class DriverRegistered:
    """A driver joined the fleet."""

    __version__ = 1

    driver_id = Identifier(required=True)
    company_id = Identifier()
    name = String(required=True)
    registered_at = DateTime(required=True)


@fleetops.event(part_of="Driver")
class DriverJobAssigned:
    """An order became the driver's current job."""

    __version__ = 1

    driver_id = Identifier(required=True)
    order_id = Identifier(required=True)
    assigned_at = DateTime(required=True)


@fleetops.event(part_of="Driver")
class DriverJobReleased:
    """The driver's current job reference was cleared."""

    __version__ = 1

    driver_id = Identifier(required=True)
    order_id = Identifier(required=True)
    released_at = DateTime(required=True)


@fleetops.event(part_of="Driver")
class DriverLocationUpdated:
    """The driver reported a new position."""

    __version__ = 1

    driver_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)
    reported_at = DateTime(required=True)
