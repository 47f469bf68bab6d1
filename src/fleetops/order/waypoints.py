"""Waypoint progression for multi-drop orders.

Keeps the current-waypoint pointer moving through the stops and answers
whether every stop is done, using the order's terminal-count cache instead
of rescanning the waypoints on each update.
"""

from fleetops.order.order import WaypointStatus

# Stops with no work left; the pointer never lands on these.
_CLOSED = {WaypointStatus.COMPLETED.value, WaypointStatus.CANCELED.value}


class WaypointProgressionTracker:
    def is_multi_drop(self, order) -> bool:
        return len(order.waypoints or []) > 1

    def next_open_waypoint(self, order):
        return next((w for w in order.ordered_waypoints() if w.status_code not in _CLOSED), None)

    def set_first_waypoint(self, order, location=None) -> None:
        """Seed the pointer at the first open stop."""
        if location is not None:
            order.last_location = location
        waypoint = self.next_open_waypoint(order)
        if waypoint is not None and str(order.current_waypoint_id or "") != str(waypoint.id):
            order.set_current_waypoint(waypoint)

    def update_waypoint_activity(self, order, activity, location=None, proof_id=None):
        """Record the activity on the current stop; returns the stop, or None without a pointer."""
        waypoint = order.current_waypoint
        if waypoint is None:
            return None
        order.record_waypoint_activity(waypoint, activity, location, proof_id)
        return waypoint

    def set_next_waypoint_destination(self, order) -> None:
        """Move the pointer to the next open stop, or clear it when none remain."""
        waypoint = self.next_open_waypoint(order)
        if str(order.current_waypoint_id or "") != str(waypoint.id if waypoint else ""):
            order.set_current_waypoint(waypoint)

    def refresh(self, order) -> int:
        """Recompute the terminal count from the stops' persisted status codes."""
        return order.recount_terminal_waypoints()

    def all_terminal(self, order) -> bool:
        # Only COMPLETED counts; a CANCELED stop keeps the order open.
        return (order.waypoints_completed or 0) >= len(order.waypoints or [])
