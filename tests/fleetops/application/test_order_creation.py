"""Application tests for order creation, scheduling and the distance matrix."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from fleetops.adapters import get_vendor
from fleetops.order.creation import CreateOrder
from fleetops.order.distance import RefreshDistanceMatrix
from fleetops.order.errors import IntegratedVendorDispatchFailed
from fleetops.order.order import Order, OrderStatus
from fleetops.order.scheduling import ScheduleOrder

PICKUP = json.dumps({"name": "Depot", "latitude": 1.35, "longitude": 103.82})
DROPOFF = json.dumps({"name": "Customer", "latitude": 1.30, "longitude": 103.80})


def _create(**overrides):
    params = {"company_id": "company-001", "pickup": PICKUP, "dropoff": DROPOFF}
    params.update(overrides)
    return current_domain.process(CreateOrder(**params), asynchronous=False)


def _order(order_id):
    return current_domain.repository_for(Order).get(order_id)


@pytest.fixture(autouse=True)
def _no_vendor_backoff(monkeypatch):
    monkeypatch.setenv("VENDOR_DISPATCH_BACKOFF", "0")


class TestCreateOrder:
    def test_create_single_leg_order(self):
        order_id = _create(items=json.dumps([{"name": "Parcel", "sku": "SKU-1", "quantity": 2}]))

        order = _order(order_id)
        assert order.status == OrderStatus.CREATED.value
        assert order.company_id == "company-001"
        assert order.pickup.name == "Depot"
        assert order.items[0].quantity == 2

    def test_preliminary_distance_is_computed(self):
        order = _order(_create())
        assert order.distance > 0
        assert order.time > 0

    def test_create_with_unknown_driver(self):
        with pytest.raises(ObjectNotFoundError):
            _create(driver_id="driver_unknown")

    def test_create_and_dispatch_without_driver_fails(self):
        with pytest.raises(ValidationError):
            _create(dispatch=True)
        assert current_domain.repository_for(Order)._dao.query.all().total == 0

    def test_invalid_payload_is_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(CreateOrder(company_id="company-001"), asynchronous=False)


class TestIntegratedVendor:
    def test_vendor_order_is_attached(self):
        order = _order(_create(integrated_vendor="lalamove"))

        assert order.integrated_vendor == "lalamove"
        vendor_order = json.loads(order.integrated_vendor_order)
        assert vendor_order["status"] == "accepted"
        assert get_vendor().calls[0]["order_ref"] == order.public_id

    def test_vendor_orders_skip_driver_and_dispatch(self):
        order = _order(_create(integrated_vendor="lalamove", driver_id="driver-ignored", dispatch=True))

        assert order.driver_assigned_id is None
        assert order.dispatched is False

    def test_transient_vendor_failure_is_retried(self):
        get_vendor().configure(failures_before_success=1, failure="timeout")

        order = _order(_create(integrated_vendor="lalamove"))

        assert order.integrated_vendor_order is not None
        assert len(get_vendor().calls) == 2

    def test_vendor_failure_creates_no_order(self, monkeypatch):
        monkeypatch.setenv("VENDOR_DISPATCH_ATTEMPTS", "2")
        get_vendor().configure(failures_before_success=10, failure="unavailable")

        with pytest.raises(IntegratedVendorDispatchFailed):
            _create(integrated_vendor="lalamove")

        assert current_domain.repository_for(Order)._dao.query.all().total == 0


class TestScheduleOrder:
    def test_schedule_in_timezone(self):
        order_id = _create()

        current_domain.process(
            ScheduleOrder(order_id=order_id, date="2026-05-01", time="08:00", timezone="Asia/Singapore"),
            asynchronous=False,
        )

        scheduled_at = _order(order_id).scheduled_at
        assert (scheduled_at.year, scheduled_at.month, scheduled_at.day, scheduled_at.hour) == (2026, 5, 1, 0)


class TestRefreshDistanceMatrix:
    def test_refresh_returns_matrix(self):
        order_id = _create()

        matrix = current_domain.process(RefreshDistanceMatrix(order_id=order_id), asynchronous=False)

        order = _order(order_id)
        assert matrix == {"distance": order.distance, "time": order.time}
