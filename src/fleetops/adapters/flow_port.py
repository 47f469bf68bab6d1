"""Activity flow port — abstract interface for order flow definitions.

A flow is the ordered sequence of valid activities for an order type.
The state machine asks the flow what comes next; it never hard-codes the
steps between dispatch and completion.
"""

from abc import ABC, abstractmethod


class ActivityFlowPort(ABC):
    """Abstract interface for activity flow providers."""

    @abstractmethod
    def next_activity(self, order, waypoint=None):
        """Return the activity that follows the subject's last recorded one.

        Returns:
            Activity, or None when the flow is exhausted.
        """
        ...

    @abstractmethod
    def after_next_activity(self, order, waypoint=None):
        """Return the activity one step beyond ``next_activity`` (used to skip dispatch)."""
        ...

    @abstractmethod
    def waypoint_activity(self, order, waypoint):
        """Return the next activity for a single stop of a multi-drop order."""
        ...
