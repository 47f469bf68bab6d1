"""Fake notifier — records notifications in memory for test assertions."""

from uuid import uuid4

from fleetops.adapters.notifier_port import NotifierPort


class FakeNotifier(NotifierPort):
    """Notifier that records every notification it is asked to send."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Notification delivery failed"):
        """Configure the fake notifier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def notify(self, kind: str, order_id: str, recipient_id: str | None = None, **context) -> dict:
        if not self.should_succeed:
            return {"notification_id": None, "status": "failed", "error": self.failure_reason}

        notification_id = f"ntf-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "notification_id": notification_id,
                "kind": kind,
                "order_id": order_id,
                "recipient_id": recipient_id,
                **context,
            }
        )
        return {"notification_id": notification_id, "status": "sent"}

    def sent_of(self, kind: str) -> list[dict]:
        return [n for n in self.sent if n["kind"] == kind]
