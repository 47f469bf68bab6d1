"""Tests for schedule resolution and the distance matrix helpers."""

from datetime import UTC, datetime

import pytest
from protean.exceptions import ValidationError

from fleetops.order.distance import compute_distance_matrix, route_ends
from fleetops.order.events import OrderScheduled
from fleetops.order.order import Order
from fleetops.order.scheduling import resolve_schedule


class TestResolveSchedule:
    def test_local_time_is_converted_to_utc(self):
        scheduled_at, timezone = resolve_schedule("2026-03-14", "09:30", "Asia/Singapore")
        assert scheduled_at == datetime(2026, 3, 14, 1, 30, tzinfo=UTC)
        assert timezone == "Asia/Singapore"

    def test_missing_time_means_midnight(self):
        scheduled_at, _ = resolve_schedule("2026-03-14", None, "UTC")
        assert scheduled_at == datetime(2026, 3, 14, tzinfo=UTC)

    def test_default_timezone_from_environment(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_TIMEZONE", "Asia/Tokyo")
        scheduled_at, timezone = resolve_schedule("2026-03-14", "09:00")
        assert timezone == "Asia/Tokyo"
        assert scheduled_at == datetime(2026, 3, 14, 0, 0, tzinfo=UTC)

    def test_utc_when_no_default(self, monkeypatch):
        monkeypatch.delenv("DEFAULT_TIMEZONE", raising=False)
        _, timezone = resolve_schedule("2026-03-14")
        assert timezone == "UTC"

    def test_unknown_timezone(self):
        with pytest.raises(ValidationError) as exc:
            resolve_schedule("2026-03-14", "09:00", "Mars/Olympus_Mons")
        assert "timezone" in exc.value.messages

    def test_invalid_date(self):
        with pytest.raises(ValidationError) as exc:
            resolve_schedule("2026-02-30")
        assert "date" in exc.value.messages

    def test_schedule_raises_event(self):
        order = Order.create(pickup={"name": "Depot"}, dropoff={"name": "Customer"})
        order._events.clear()
        scheduled_at, timezone = resolve_schedule("2026-03-14", "09:30", "UTC")

        order.schedule(scheduled_at, timezone)

        assert order.scheduled_at == scheduled_at
        assert isinstance(order._events[0], OrderScheduled)


class TestDistanceMatrix:
    def test_single_leg_uses_pickup_and_dropoff(self):
        order = Order.create(
            pickup={"name": "Depot", "latitude": 1.35, "longitude": 103.82},
            dropoff={"name": "Customer", "latitude": 1.30, "longitude": 103.80},
        )
        origin, destination = route_ends(order)
        assert origin.latitude == 1.35
        assert destination.latitude == 1.30

    def test_multi_drop_uses_first_and_current_waypoint(self):
        order = Order.create(
            waypoints=[
                {"name": "Stop 1", "latitude": 1.30, "longitude": 103.80},
                {"name": "Stop 2", "latitude": 1.31, "longitude": 103.81},
                {"name": "Stop 3", "latitude": 1.32, "longitude": 103.82},
            ]
        )
        order.set_current_waypoint(order.ordered_waypoints()[2])

        origin, destination = route_ends(order)

        assert origin.latitude == 1.30
        assert destination.latitude == 1.32

    def test_matrix_is_positive_between_distinct_points(self):
        order = Order.create(
            pickup={"name": "Depot", "latitude": 1.35, "longitude": 103.82},
            dropoff={"name": "Customer", "latitude": 1.30, "longitude": 103.80},
        )
        matrix = compute_distance_matrix(order)
        assert 5000 < matrix["distance"] < 7000
        assert matrix["time"] > 0

    def test_matrix_without_coordinates_is_zero(self):
        order = Order.create(pickup={"name": "Depot"}, dropoff={"name": "Customer"})
        assert compute_distance_matrix(order) == {"distance": 0, "time": 0}
