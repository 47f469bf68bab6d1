"""Application tests for driver registration and location updates."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from fleetops.driver.driver import Driver
from fleetops.driver.registration import RegisterDriver, UpdateDriverLocation, find_driver


class TestDriverCommands:
    def test_register_driver(self):
        driver_id = current_domain.process(RegisterDriver(name="Dana", company_id="company-001"), asynchronous=False)

        driver = current_domain.repository_for(Driver).get(driver_id)
        assert driver.public_id.startswith("driver_")
        assert driver.location is None

    def test_update_location_by_public_id(self):
        driver_id = current_domain.process(RegisterDriver(name="Dana"), asynchronous=False)
        public_id = current_domain.repository_for(Driver).get(driver_id).public_id

        current_domain.process(
            UpdateDriverLocation(driver_id=public_id, latitude=1.29, longitude=103.85),
            asynchronous=False,
        )

        driver = find_driver(driver_id)
        assert driver.location.latitude == 1.29
        assert driver.location_updated_at is not None

    def test_update_unknown_driver(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                UpdateDriverLocation(driver_id="driver_missing", latitude=1.0, longitude=103.0),
                asynchronous=False,
            )
