"""Order lifecycle engine — the fulfillment state machine.

Works on loaded aggregates only: command handlers load the order (and its
driver), call into the engine, and persist what it changed. The engine
consults the activity flow for the next step, the waypoint tracker for
multi-drop bookkeeping, and the dispatch gate for dispatch preconditions.

A multi-drop order completes one stop per ``completed`` activity. Until
the last stop is done the call succeeds with progress
``waypoint_completed`` while the order stays open.
"""

from dataclasses import dataclass
from enum import Enum

import structlog
from protean.exceptions import ObjectNotFoundError

from fleetops.adapters import get_flow
from fleetops.order.dispatch import DispatchGate
from fleetops.order.errors import (
    AdhocDriverRequired,
    AlreadyCanceled,
    AlreadyCompleted,
    AlreadyStarted,
    IncompleteWaypoints,
    InvalidDestination,
    NoDriverAssigned,
    NoNextActivity,
    NotDispatchedYet,
)
from fleetops.order.order import Activity, ActivityCode, Order, OrderStatus
from fleetops.order.waypoints import WaypointProgressionTracker

logger = structlog.get_logger(__name__)


class Progress(Enum):
    DISPATCHED = "dispatched"
    ADVANCED = "advanced"
    WAYPOINT_COMPLETED = "waypoint_completed"
    COMPLETED = "completed"


@dataclass
class LifecycleResult:
    order: Order
    activity: Activity | None
    progress: Progress

    @property
    def is_partial(self) -> bool:
        return self.progress == Progress.WAYPOINT_COMPLETED


def _completed_activity() -> Activity:
    return Activity(
        code=ActivityCode.COMPLETED.value,
        status="Order completed",
        details="Driver has completed order for all waypoints",
    )


class OrderLifecycleEngine:
    def __init__(self, flow=None, tracker=None, gate=None):
        self.flow = flow or get_flow()
        self.tracker = tracker or WaypointProgressionTracker()
        self.gate = gate or DispatchGate()

    # -------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------
    def dispatch(self, order) -> LifecycleResult:
        self.gate.dispatch(order)
        return LifecycleResult(order, None, Progress.DISPATCHED)

    # -------------------------------------------------------------------
    # Start
    # -------------------------------------------------------------------
    def start(self, order, driver=None, skip_dispatch: bool = False, assignee=None) -> LifecycleResult:
        """Start the order with its driver.

        ``assignee`` is the driver accepting an adhoc order; it is ignored
        for orders that are not adhoc.
        """
        if order.started:
            raise AlreadyStarted()

        if order.adhoc and assignee is not None:
            order.assign_driver(str(assignee.id))
            driver = assignee

        if driver is None:
            if order.adhoc:
                raise AdhocDriverRequired()
            raise NoDriverAssigned()

        activity = self.flow.next_activity(order)
        if activity is None:
            raise NoNextActivity()

        is_not_dispatched = activity.code == ActivityCode.DISPATCHED.value or not order.dispatched
        if is_not_dispatched and not skip_dispatch:
            raise NotDispatchedYet()
        if is_not_dispatched and activity.code == ActivityCode.DISPATCHED.value:
            activity = self.flow.after_next_activity(order)
            if activity is None:
                raise NoNextActivity()

        order.mark_started(skipped_dispatch=is_not_dispatched)
        driver.assign_job(str(order.id))

        location = order.last_known_location(driver)
        self.tracker.set_first_waypoint(order, location)

        logger.info("Order started", order_id=str(order.id), driver_id=str(driver.id), activity=activity.code)
        return self.update_activity(order, driver, activity=activity, skip_dispatch=skip_dispatch)

    # -------------------------------------------------------------------
    # Activity progression
    # -------------------------------------------------------------------
    def update_activity(
        self,
        order,
        driver=None,
        activity=None,
        proof_id: str | None = None,
        skip_dispatch: bool = False,
    ) -> LifecycleResult:
        if order.status == OrderStatus.CREATED.value and not order.started:
            order.mark_started(skipped_dispatch=skip_dispatch and not order.dispatched)

        if order.status == OrderStatus.COMPLETED.value:
            raise AlreadyCompleted()
        if order.status == OrderStatus.CANCELED.value:
            raise AlreadyCanceled()

        if activity is None:
            activity = self.flow.next_activity(order)
        if activity is None:
            raise NoNextActivity()

        if activity.code == ActivityCode.DISPATCHED.value and skip_dispatch:
            activity = self.flow.after_next_activity(order)
            if activity is None:
                raise NoNextActivity()

        if activity.code == ActivityCode.DISPATCHED.value:
            self.gate.dispatch(order, activity)
            return LifecycleResult(order, activity, Progress.DISPATCHED)

        location = order.last_known_location(driver)
        multi_drop = self.tracker.is_multi_drop(order)

        if multi_drop and not order.current_waypoint_id:
            self.tracker.set_first_waypoint(order, location)

        is_completion = activity.code == ActivityCode.COMPLETED.value

        if is_completion and multi_drop and not self.tracker.all_terminal(order):
            # Close the current stop only
            waypoint = self.tracker.update_waypoint_activity(order, activity, location, proof_id)
            self.tracker.set_next_waypoint_destination(order)
            self.tracker.refresh(order)

            if not self.tracker.all_terminal(order):
                logger.info(
                    "Waypoint completed, order still in progress",
                    order_id=str(order.id),
                    waypoint_id=str(waypoint.id) if waypoint else None,
                    waypoints_completed=order.waypoints_completed,
                    waypoint_count=len(order.waypoints),
                )
                return LifecycleResult(order, activity, Progress.WAYPOINT_COMPLETED)

        if is_completion:
            if driver is not None:
                driver.release_job(str(order.id))
            order.complete(activity, location, proof_id)
            progress = Progress.COMPLETED
            logger.info("Order completed", order_id=str(order.id))
        else:
            order.record_activity(activity, location, proof_id)
            progress = Progress.ADVANCED

        if not multi_drop:
            # One physical leg: every line item shares the order's step
            for item in order.items or []:
                order.record_item_activity(item, activity, location, proof_id)
        else:
            self.tracker.update_waypoint_activity(order, activity, location)

        return LifecycleResult(order, activity, progress)

    def get_next_activity(self, order, waypoint_ref: str | None = None):
        """Preview the next activity without changing anything."""
        if waypoint_ref and self.tracker.is_multi_drop(order):
            waypoint = order.find_waypoint(waypoint_ref)
            if waypoint is None:
                raise ObjectNotFoundError("Waypoint resource not found.")
            return self.flow.waypoint_activity(order, waypoint)
        return self.flow.next_activity(order)

    # -------------------------------------------------------------------
    # Completion / cancellation
    # -------------------------------------------------------------------
    def complete_order(self, order, driver=None) -> LifecycleResult:
        if order.status == OrderStatus.COMPLETED.value:
            raise AlreadyCompleted()
        if order.status == OrderStatus.CANCELED.value:
            raise AlreadyCanceled()

        self.tracker.refresh(order)
        if not self.tracker.all_terminal(order):
            raise IncompleteWaypoints()

        if driver is not None:
            driver.release_job(str(order.id))

        activity = _completed_activity()
        order.complete(activity, order.last_known_location(driver))
        logger.info("Order completed", order_id=str(order.id))
        return LifecycleResult(order, activity, Progress.COMPLETED)

    def cancel_order(self, order, driver=None) -> LifecycleResult:
        """Cancel from any status, including ``completed``."""
        if driver is not None:
            driver.release_job(str(order.id))
        order.cancel(order.last_known_location(driver))
        logger.info("Order canceled", order_id=str(order.id))
        return LifecycleResult(order, None, Progress.ADVANCED)

    # -------------------------------------------------------------------
    # Destination
    # -------------------------------------------------------------------
    def set_destination(self, order, place_ref: str) -> LifecycleResult:
        waypoint = order.find_waypoint(place_ref)
        if waypoint is None:
            raise InvalidDestination()
        order.set_current_waypoint(waypoint)
        return LifecycleResult(order, None, Progress.ADVANCED)
