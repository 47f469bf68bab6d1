"""Shared BDD fixtures and step definitions for the FleetOps domain."""

import pytest
from pytest_bdd import given, parsers, then, when

from fleetops.driver.driver import Driver
from fleetops.order.dispatch import DispatchGate
from fleetops.order.engine import OrderLifecycleEngine
from fleetops.order.errors import OrderLifecycleError
from fleetops.order.events import (
    ActivityRecorded,
    DestinationChanged,
    OrderCanceled,
    OrderCompleted,
    OrderDispatched,
    OrderStarted,
    WaypointCompleted,
)
from fleetops.order.order import Order

_ORDER_EVENT_CLASSES = {
    "OrderDispatched": OrderDispatched,
    "OrderStarted": OrderStarted,
    "ActivityRecorded": ActivityRecorded,
    "WaypointCompleted": WaypointCompleted,
    "DestinationChanged": DestinationChanged,
    "OrderCompleted": OrderCompleted,
    "OrderCanceled": OrderCanceled,
}


@pytest.fixture()
def error():
    """Container for captured lifecycle errors."""
    return {"exc": None}


@pytest.fixture()
def engine():
    return OrderLifecycleEngine()


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a driver on shift", target_fixture="driver")
def driver_on_shift():
    driver = Driver.register(name="Dana", company_id="company-bdd", latitude=1.33, longitude=103.81)
    driver._events.clear()
    return driver


@given("a single-leg order assigned to the driver", target_fixture="order")
def single_leg_order(driver):
    order = Order.create(
        company_id="company-bdd",
        pickup={"name": "Depot", "latitude": 1.35, "longitude": 103.82},
        dropoff={"name": "Customer", "latitude": 1.30, "longitude": 103.80},
        items=[{"name": "Parcel"}],
        driver_id=str(driver.id),
    )
    order._events.clear()
    return order


@given(
    parsers.cfparse("a multi-drop order with {count:d} stops assigned to the driver"),
    target_fixture="order",
)
def multi_drop_order(driver, count):
    order = Order.create(
        company_id="company-bdd",
        waypoints=[
            {"name": f"Stop {n}", "latitude": 1.30 + n / 100, "longitude": 103.80 + n / 100}
            for n in range(1, count + 1)
        ],
        driver_id=str(driver.id),
    )
    order._events.clear()
    return order


@given("an adhoc order", target_fixture="order")
def adhoc_order():
    order = Order.create(
        company_id="company-bdd",
        pickup={"name": "Depot", "latitude": 1.35, "longitude": 103.82},
        dropoff={"name": "Customer", "latitude": 1.30, "longitude": 103.80},
        adhoc=True,
        adhoc_distance=3000,
    )
    order._events.clear()
    return order


@given("the order has been dispatched")
def order_dispatched(order):
    DispatchGate().dispatch(order)
    order._events.clear()


@given("the driver has started the order")
def order_started(order, driver, engine):
    engine.start(order, driver)
    order._events.clear()
    driver._events.clear()


# ---------------------------------------------------------------------------
# Shared steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("the driver advances the order {times:d} times"), target_fixture="result")
@when(parsers.cfparse("the driver advances the order {times:d} times"), target_fixture="result")
def advance_order(order, driver, engine, error, times):
    result = None
    try:
        for _ in range(times):
            result = engine.update_activity(order, driver)
    except OrderLifecycleError as exc:
        error["exc"] = exc
    return result


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the last activity is "{code}"'))
def last_activity_is(order, code):
    assert order.last_activity_code() == code


@then(parsers.cfparse('the action fails with "{code}"'))
def action_fails_with(error, code):
    assert error["exc"] is not None, "Expected a lifecycle error but none was raised"
    assert isinstance(error["exc"], OrderLifecycleError)
    assert error["exc"].code == code


@then(parsers.cfparse('the progress is "{progress}"'))
def progress_is(result, progress):
    assert result.progress.value == progress


@then(parsers.cfparse("a {event_type} event is raised"))
def order_event_raised(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in order._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in order._events]}"


@then(parsers.cfparse("exactly {count:d} {event_type} event is raised"))
def order_event_raised_exactly(order, count, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert len([e for e in order._events if isinstance(e, event_cls)]) == count


@then(parsers.cfparse("{count:d} stops are completed"))
def stops_completed(order, count):
    assert order.waypoints_completed == count


@then("the driver is free for another job")
def driver_is_free(driver):
    assert driver.current_job_id is None
