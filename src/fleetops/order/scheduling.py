"""Order scheduling — command and handler.

The scheduled moment is given as a local date, an optional local time and
a timezone name, and stored in UTC.
"""

import os
from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String

from fleetops.domain import fleetops
from fleetops.order.loading import load_order, persist
from fleetops.order.order import Order


def default_timezone() -> str:
    return os.environ.get("DEFAULT_TIMEZONE") or "UTC"


def resolve_schedule(day: str, at: str | None = None, timezone: str | None = None) -> tuple[datetime, str]:
    """Combine a local date and time in ``timezone`` into an aware UTC datetime."""
    timezone = timezone or default_timezone()
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError({"timezone": [f"Unknown timezone: {timezone}"]}) from exc

    try:
        local_date = date.fromisoformat(day)
        local_time = time.fromisoformat(at) if at else time(0, 0)
    except ValueError as exc:
        raise ValidationError({"date": [f"Invalid date or time: {day} {at or ''}".strip()]}) from exc

    local = datetime.combine(local_date, local_time, tzinfo=zone)
    return local.astimezone(UTC), timezone


@fleetops.command(part_of="Order")
class ScheduleOrder:
    order_id = Identifier(required=True)
    company_id = Identifier()
    expected_revision = Integer()
    date = String(required=True, max_length=10)  # YYYY-MM-DD
    time = String(max_length=8)  # HH:MM[:SS]
    timezone = String(max_length=64)


@fleetops.command_handler(part_of=Order)
class ScheduleOrderHandler:
    @handle(ScheduleOrder)
    def schedule_order(self, command):
        order = load_order(command)
        scheduled_at, timezone = resolve_schedule(command.date, command.time, command.timezone)
        order.schedule(scheduled_at, timezone)
        persist(order)
        return scheduled_at.isoformat()
