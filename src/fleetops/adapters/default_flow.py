"""Default activity flows keyed by order type.

Single-leg orders walk pickup → dropoff; multi-drop orders keep repeating
``completed`` at order level, each one closing the current stop.
"""

from fleetops.adapters.flow_port import ActivityFlowPort
from fleetops.order.order import Activity, SubjectType

_CREATED = {"code": "created", "status": "Order created", "details": "New order was created."}
_DISPATCHED = {"code": "dispatched", "status": "Order dispatched", "details": "Order has been dispatched to driver."}
_STARTED = {"code": "started", "status": "Order started", "details": "Driver has started the order."}
_COMPLETED = {"code": "completed", "status": "Order completed", "details": "Driver has completed the order."}

DEFAULT_FLOWS: dict[str, list[dict]] = {
    "default": [
        _CREATED,
        _DISPATCHED,
        _STARTED,
        {"code": "picked_up", "status": "Picked up", "details": "Driver has picked up the order."},
        {"code": "arrived_at_dropoff", "status": "Arrived", "details": "Driver has arrived at the dropoff."},
        _COMPLETED,
    ],
    "multi_drop": [_CREATED, _DISPATCHED, _STARTED, _COMPLETED],
}

WAYPOINT_FLOW: list[dict] = [
    {"code": "en_route", "status": "En route", "details": "Driver is en route to the stop."},
    {"code": "arrived", "status": "Arrived", "details": "Driver has arrived at the stop."},
    {"code": "completed", "status": "Stop completed", "details": "Driver has completed the stop."},
]


class DefaultFlow(ActivityFlowPort):
    """Flow provider backed by in-process flow definitions."""

    def __init__(self, flows: dict[str, list[dict]] | None = None, waypoint_flow: list[dict] | None = None):
        self.flows = flows or DEFAULT_FLOWS
        self.waypoint_flow = waypoint_flow or WAYPOINT_FLOW

    def flow_for(self, order) -> list[dict]:
        if order.order_type != "default" and order.order_type in self.flows:
            return self.flows[order.order_type]
        if len(order.waypoints or []) > 1:
            return self.flows["multi_drop"]
        return self.flows["default"]

    @staticmethod
    def _step(flow: list[dict], last_code: str | None, offset: int):
        codes = [step["code"] for step in flow]
        position = codes.index(last_code) if last_code in codes else -1
        target = position + offset
        if target >= len(flow):
            return None
        return Activity(**flow[target])

    def next_activity(self, order, waypoint=None):
        if waypoint is not None:
            return self.waypoint_activity(order, waypoint)
        return self._step(self.flow_for(order), order.last_activity_code(), 1)

    def after_next_activity(self, order, waypoint=None):
        if waypoint is not None:
            return self._step(self.waypoint_flow, order.last_activity_code(SubjectType.WAYPOINT, waypoint.id), 2)
        return self._step(self.flow_for(order), order.last_activity_code(), 2)

    def waypoint_activity(self, order, waypoint):
        return self._step(self.waypoint_flow, order.last_activity_code(SubjectType.WAYPOINT, waypoint.id), 1)
