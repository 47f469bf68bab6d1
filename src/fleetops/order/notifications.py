"""Driver notifications — reacts to Order lifecycle events.

Listens for OrderCreated (new assignment), OrderDispatched (to the driver,
or to the nearby pool for adhoc orders), OrderCompleted and OrderCanceled,
and hands each to the configured notifier.
"""

import structlog
from protean.utils.mixins import handle

from fleetops.adapters import get_notifier
from fleetops.domain import fleetops
from fleetops.order.events import OrderCanceled, OrderCompleted, OrderCreated, OrderDispatched
from fleetops.order.order import Order

logger = structlog.get_logger(__name__)


def _send(kind: str, order_id: str, recipient_id: str | None = None, **context) -> None:
    result = get_notifier().notify(kind, order_id, recipient_id, **context)
    if result.get("status") != "sent":
        logger.warning(
            "Driver notification failed",
            kind=kind,
            order_id=order_id,
            recipient_id=recipient_id,
            error=result.get("error"),
        )
        return
    logger.info("Driver notified", kind=kind, order_id=order_id, recipient_id=recipient_id)


@fleetops.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Notifies drivers about changes to the orders they work."""

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        if not event.driver_id:
            return
        _send("order_assigned", str(event.order_id), str(event.driver_id))

    @handle(OrderDispatched)
    def on_order_dispatched(self, event: OrderDispatched) -> None:
        if event.adhoc:
            # Broadcast to drivers within the adhoc radius
            _send("adhoc_order_available", str(event.order_id), distance=event.adhoc_distance)
            return
        _send("order_dispatched", str(event.order_id), str(event.driver_id))

    @handle(OrderCompleted)
    def on_order_completed(self, event: OrderCompleted) -> None:
        _send(
            "order_completed",
            str(event.order_id),
            str(event.driver_id) if event.driver_id else None,
        )

    @handle(OrderCanceled)
    def on_order_canceled(self, event: OrderCanceled) -> None:
        if not event.driver_id:
            return
        _send(
            "order_canceled",
            str(event.order_id),
            str(event.driver_id),
            previous_status=event.previous_status,
        )
