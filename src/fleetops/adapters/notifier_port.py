"""Notification port — abstract interface for lifecycle notifications."""

from abc import ABC, abstractmethod


class NotifierPort(ABC):
    """Abstract interface for notification sinks."""

    @abstractmethod
    def notify(self, kind: str, order_id: str, recipient_id: str | None = None, **context) -> dict:
        """Deliver a lifecycle notification.

        Args:
            kind: One of "driver_assigned", "order_dispatched", "order_completed", "order_canceled"

        Returns:
            dict with keys: notification_id, status ("sent" or "failed"), error (optional)
        """
        ...
