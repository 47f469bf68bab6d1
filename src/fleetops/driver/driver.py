"""Driver aggregate — the person carrying out orders.

A driver works one order at a time: starting an order makes it the
driver's current job, completing or canceling it releases the job.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, String

from fleetops.domain import fleetops
from fleetops.driver.events import (
    DriverJobAssigned,
    DriverJobReleased,
    DriverLocationUpdated,
    DriverRegistered,
)
from fleetops.order.order import Location, new_public_id


@fleetops.aggregate
class Driver:
    public_id = String(required=True, max_length=50)
    company_id = Identifier()
    name = String(required=True, max_length=255)
    current_job_id = Identifier()
    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)
    location_updated_at = DateTime()
    created_at = DateTime()

    @classmethod
    def register(cls, name: str, company_id: str | None = None, latitude=None, longitude=None):
        now = datetime.now(UTC)
        driver = cls(
            public_id=new_public_id("driver"),
            company_id=company_id,
            name=name,
            latitude=latitude,
            longitude=longitude,
            location_updated_at=now if latitude is not None else None,
            created_at=now,
        )
        driver.raise_(
            DriverRegistered(
                driver_id=str(driver.id),
                company_id=company_id,
                name=name,
                registered_at=now,
            )
        )
        return driver

    @property
    def location(self):
        if self.latitude is None or self.longitude is None:
            return None
        return Location(latitude=self.latitude, longitude=self.longitude)

    def assign_job(self, order_id: str) -> None:
        now = datetime.now(UTC)
        self.current_job_id = order_id
        self.raise_(DriverJobAssigned(driver_id=str(self.id), order_id=order_id, assigned_at=now))

    def release_job(self, order_id: str) -> bool:
        """Clear the current job if it still points at ``order_id``."""
        if str(self.current_job_id or "") != str(order_id):
            return False
        now = datetime.now(UTC)
        self.current_job_id = None
        self.raise_(DriverJobReleased(driver_id=str(self.id), order_id=str(order_id), released_at=now))
        return True

    def update_location(self, latitude: float, longitude: float) -> None:
        now = datetime.now(UTC)
        self.latitude = latitude
        self.longitude = longitude
        self.location_updated_at = now
        self.raise_(
            DriverLocationUpdated(
                driver_id=str(self.id),
                latitude=latitude,
                longitude=longitude,
                reported_at=now,
            )
        )
