"""Driver registration and location reporting — commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from fleetops.domain import fleetops
from fleetops.driver.driver import Driver


@fleetops.command(part_of="Driver")
class RegisterDriver:
    """Register a new driver with the fleet."""

    company_id = Identifier()
    name = String(required=True, max_length=255)
    latitude = Float()
    longitude = Float()


@fleetops.command(part_of="Driver")
class UpdateDriverLocation:
    """Record the driver's latest reported position."""

    driver_id = Identifier(required=True)
    latitude = Float(required=True)
    longitude = Float(required=True)


def find_driver(ref: str | None):
    """Load a driver by internal id or ``driver_`` public id; None when absent."""
    if not ref:
        return None
    repo = current_domain.repository_for(Driver)
    if str(ref).startswith("driver_"):
        results = repo._dao.query.filter(public_id=str(ref)).all()
        return results.first if results and results.items else None
    try:
        return repo.get(ref)
    except ObjectNotFoundError:
        return None


@fleetops.command_handler(part_of=Driver)
class DriverHandler:
    @handle(RegisterDriver)
    def register_driver(self, command):
        driver = Driver.register(
            name=command.name,
            company_id=command.company_id,
            latitude=command.latitude,
            longitude=command.longitude,
        )
        current_domain.repository_for(Driver).add(driver)
        return str(driver.id)

    @handle(UpdateDriverLocation)
    def update_location(self, command):
        driver = find_driver(command.driver_id)
        if driver is None:
            raise ObjectNotFoundError(f"Driver {command.driver_id} not found.")
        driver.update_location(command.latitude, command.longitude)
        current_domain.repository_for(Driver).add(driver)
