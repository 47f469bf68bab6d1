"""Tests for the Order aggregate: creation, payload lookups and the activity log."""

import pytest
from protean.exceptions import ValidationError

from fleetops.order.events import ActivityRecorded, OrderCanceled, OrderCreated
from fleetops.order.order import (
    Activity,
    ActivityCode,
    Location,
    Order,
    OrderStatus,
    SubjectType,
    WaypointStatus,
)

PICKUP = {"name": "Depot", "latitude": 1.3521, "longitude": 103.8198}
DROPOFF = {"name": "Customer", "latitude": 1.3001, "longitude": 103.8001}


def _single_leg(**overrides):
    params = {
        "company_id": "company-001",
        "pickup": PICKUP,
        "dropoff": DROPOFF,
        "items": [{"name": "Parcel"}, {"name": "Envelope", "quantity": 2}],
        "driver_id": "driver-001",
    }
    params.update(overrides)
    return Order.create(**params)


def _multi_drop():
    return Order.create(
        company_id="company-001",
        waypoints=[
            {"name": "Stop 1", "latitude": 1.30, "longitude": 103.80},
            {"name": "Stop 2", "latitude": 1.31, "longitude": 103.81},
            {"name": "Stop 3", "latitude": 1.32, "longitude": 103.82},
        ],
        driver_id="driver-001",
    )


class TestOrderCreation:
    def test_single_leg_order_starts_created(self):
        order = _single_leg()
        assert order.status == OrderStatus.CREATED.value
        assert order.dispatched is False
        assert order.started is False
        assert order.public_id.startswith("order_")
        assert order.revision == 0

    def test_places_and_items_get_public_ids(self):
        order = _single_leg()
        assert order.pickup.public_id.startswith("place_")
        assert all(item.public_id.startswith("entity_") for item in order.items)

    def test_creation_records_created_activity(self):
        order = _single_leg()
        timeline = order.timeline()
        assert [entry.code for entry in timeline] == [ActivityCode.CREATED.value]
        assert timeline[0].sequence == 1

    def test_creation_raises_order_created(self):
        order = _single_leg()
        assert len(order._events) == 1
        event = order._events[0]
        assert isinstance(event, OrderCreated)
        assert event.order_id == str(order.id)
        assert event.driver_id == "driver-001"
        assert event.item_count == 2
        assert event.waypoint_count == 0

    def test_multi_drop_points_at_first_waypoint(self):
        order = _multi_drop()
        first = order.ordered_waypoints()[0]
        assert order.current_waypoint_id == str(first.id)
        assert all(w.status_code == WaypointStatus.PENDING.value for w in order.waypoints)
        assert [w.sequence for w in order.ordered_waypoints()] == [0, 1, 2]

    def test_rejects_both_payload_shapes(self):
        with pytest.raises(ValidationError) as exc:
            Order.create(pickup=PICKUP, dropoff=DROPOFF, waypoints=[{"name": "Stop"}])
        assert "payload" in exc.value.messages

    def test_rejects_empty_payload(self):
        with pytest.raises(ValidationError):
            Order.create(company_id="company-001")


class TestPayloadLookups:
    def test_find_waypoint_by_waypoint_public_id(self):
        order = _multi_drop()
        second = order.ordered_waypoints()[1]
        assert order.find_waypoint(second.public_id) is second

    def test_find_waypoint_by_place_public_id(self):
        order = _multi_drop()
        third = order.ordered_waypoints()[2]
        assert order.find_waypoint(third.place.public_id) is third

    def test_find_waypoint_unknown_reference(self):
        order = _multi_drop()
        assert order.find_waypoint("place_unknown") is None
        assert order.find_waypoint(None) is None

    def test_find_item_by_public_id(self):
        order = _single_leg()
        item = order.items[0]
        assert order.find_item(item.public_id) is item

    def test_last_known_location_falls_back_to_pickup(self):
        order = _single_leg()
        location = order.last_known_location()
        assert location.latitude == PICKUP["latitude"]
        assert location.longitude == PICKUP["longitude"]

    def test_last_known_location_falls_back_to_first_waypoint(self):
        order = _multi_drop()
        location = order.last_known_location()
        assert location.latitude == 1.30


class TestActivityLog:
    def test_record_activity_moves_status_to_started(self):
        order = _single_leg()
        order._events.clear()

        order.record_activity(Activity(code="picked_up", status="Picked up"))

        assert order.status == OrderStatus.STARTED.value
        assert order.last_activity_code() == "picked_up"
        assert any(isinstance(e, ActivityRecorded) for e in order._events)

    def test_dispatched_activity_keeps_status_created(self):
        order = _single_leg()
        order.record_activity(Activity(code="dispatched", status="Order dispatched"))
        assert order.status == OrderStatus.CREATED.value

    def test_every_transition_bumps_revision(self):
        order = _single_leg()
        order.record_activity(Activity(code="picked_up", status="Picked up"))
        order.record_activity(Activity(code="arrived_at_dropoff", status="Arrived"))
        assert order.revision == 2

    def test_activity_stores_location(self):
        order = _single_leg()
        location = Location(latitude=1.2, longitude=103.7)
        order.record_activity(Activity(code="picked_up", status="Picked up"), location)
        assert order.timeline()[-1].location == location
        assert order.last_location == location

    def test_item_timeline_is_separate_from_order_timeline(self):
        order = _single_leg()
        item = order.items[0]
        order.record_item_activity(item, Activity(code="picked_up", status="Picked up"))

        assert [e.code for e in order.timeline(SubjectType.ENTITY, item.id)] == ["picked_up"]
        assert order.last_activity_code() == ActivityCode.CREATED.value

    def test_waypoint_activity_sets_status_code_and_cache(self):
        order = _multi_drop()
        waypoint = order.ordered_waypoints()[0]

        order.record_waypoint_activity(waypoint, Activity(code="arrived", status="Arrived"))
        assert waypoint.status_code == WaypointStatus.EN_ROUTE.value
        assert order.waypoints_completed == 0

        order.record_waypoint_activity(waypoint, Activity(code="completed", status="Stop completed"))
        assert waypoint.status_code == WaypointStatus.COMPLETED.value
        assert order.waypoints_completed == 1

    def test_canceled_waypoint_is_not_terminal(self):
        order = _multi_drop()
        waypoint = order.ordered_waypoints()[0]
        order.record_waypoint_activity(waypoint, Activity(code="canceled", status="Stop canceled"))

        assert waypoint.status_code == WaypointStatus.CANCELED.value
        assert order.recount_terminal_waypoints() == 0


class TestCancel:
    def test_cancel_from_any_status(self):
        order = _single_leg()
        order.record_activity(Activity(code="completed", status="Done"))
        order.complete(Activity(code="completed", status="Done"))
        order._events.clear()

        order.cancel()

        assert order.status == OrderStatus.CANCELED.value
        canceled = [e for e in order._events if isinstance(e, OrderCanceled)]
        assert len(canceled) == 1
        assert canceled[0].previous_status == OrderStatus.COMPLETED.value
        assert order.last_activity_code() == ActivityCode.CANCELED.value
