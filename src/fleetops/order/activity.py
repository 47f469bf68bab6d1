"""Activity progression — command, handler and next-activity preview."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, Text

from fleetops.domain import fleetops
from fleetops.order.engine import OrderLifecycleEngine
from fleetops.order.loading import get_order, load_assigned_driver, load_order, persist
from fleetops.order.order import Activity, Order


def activity_from(data) -> Activity | None:
    """Build an Activity from an inbound descriptor (dict or JSON string)."""
    if not data:
        return None
    if isinstance(data, str):
        data = json.loads(data)
    if not data.get("code"):
        raise ValidationError({"activity": ["Activity code is required."]})
    return Activity(
        code=data["code"],
        status=data.get("status") or data["code"].replace("_", " ").capitalize(),
        details=data.get("details"),
    )


@fleetops.command(part_of="Order")
class UpdateActivity:
    order_id = Identifier(required=True)
    company_id = Identifier()
    expected_revision = Integer()
    activity = Text()  # JSON: {code, status, details}; next flow step when absent
    proof_id = Identifier()
    skip_dispatch = Boolean(default=False)


@fleetops.command_handler(part_of=Order)
class UpdateActivityHandler:
    @handle(UpdateActivity)
    def update_activity(self, command):
        order = load_order(command)
        driver = load_assigned_driver(order)
        result = OrderLifecycleEngine().update_activity(
            order,
            driver,
            activity=activity_from(command.activity),
            proof_id=command.proof_id,
            skip_dispatch=bool(command.skip_dispatch),
        )
        persist(order, driver)
        return result.progress.value


def next_activity(order_ref: str, company_id: str | None = None, waypoint: str | None = None):
    """Preview the activity that would be recorded next; nothing is changed."""
    order = get_order(order_ref, company_id)
    return OrderLifecycleEngine().get_next_activity(order, waypoint)
