"""Order aggregate (CQRS) — the core of the fleetops domain.

The Order aggregate owns its payload: either a single leg (pickup, dropoff
and optional return place) or an ordered sequence of waypoints, plus the
line items being moved. Every step of the fulfillment is appended to a
single activity log whose rows are keyed by subject (the order itself, a
waypoint, or a line item).

State Machine:
    CREATED → STARTED → COMPLETED
    {CREATED, STARTED, COMPLETED} → CANCELED   (unconditional cancel)

Flags progress independently of status:
    dispatched  requires a driver assignment or an adhoc order
    started     requires dispatched, unless the caller skips dispatch
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from fleetops.domain import fleetops
from fleetops.order.events import (
    ActivityRecorded,
    DestinationChanged,
    DistanceMatrixUpdated,
    DriverAssigned,
    OrderCanceled,
    OrderCompleted,
    OrderCreated,
    OrderDispatched,
    OrderScheduled,
    OrderStarted,
    VendorOrderCreated,
    WaypointCompleted,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    CREATED = "created"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELED = "canceled"


class WaypointStatus(Enum):
    PENDING = "PENDING"
    EN_ROUTE = "EN_ROUTE"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"


class ActivityCode(Enum):
    """Activity codes the state machine itself reacts to.

    Flows may define any number of other codes; those are recorded as-is.
    """

    CREATED = "created"
    DISPATCHED = "dispatched"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELED = "canceled"


class SubjectType(Enum):
    ORDER = "order"
    WAYPOINT = "waypoint"
    ENTITY = "entity"


class PodMethod(Enum):
    SCAN = "scan"
    SIGNATURE = "signature"


def new_public_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:10]}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@fleetops.value_object(part_of="Order")
class Location:
    """A geographic point."""

    latitude = Float(min_value=-90.0, max_value=90.0)
    longitude = Float(min_value=-180.0, max_value=180.0)


@fleetops.value_object(part_of="Order")
class Place:
    """A named place an order picks up from, drops off at, or stops by."""

    place_id = Identifier(required=True)
    public_id = String(required=True, max_length=50)
    name = String(max_length=255)
    street = String(max_length=255)
    city = String(max_length=100)
    latitude = Float()
    longitude = Float()

    @property
    def location(self):
        if self.latitude is None or self.longitude is None:
            return None
        return Location(latitude=self.latitude, longitude=self.longitude)


@fleetops.value_object(part_of="Order")
class Activity:
    """A step descriptor in an order, waypoint or line item timeline."""

    code = String(required=True, max_length=100)
    status = String(required=True, max_length=255)
    details = String(max_length=500)


def place_from(data: dict) -> Place:
    """Build a Place from an inbound payload dict, minting identifiers when absent."""
    return Place(
        place_id=data.get("place_id") or str(uuid4()),
        public_id=data.get("public_id") or new_public_id("place"),
        name=data.get("name"),
        street=data.get("street"),
        city=data.get("city"),
        latitude=data.get("latitude"),
        longitude=data.get("longitude"),
    )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@fleetops.entity(part_of="Order")
class Waypoint:
    """One stop in a multi-drop sequence."""

    public_id = String(required=True, max_length=50)
    place = ValueObject(Place, required=True)
    sequence = Integer(required=True, min_value=0)
    status_code = String(
        max_length=20,
        choices=WaypointStatus,
        default=WaypointStatus.PENDING.value,
    )

    @property
    def is_terminal(self) -> bool:
        return self.status_code == WaypointStatus.COMPLETED.value

    def matches(self, ref: str) -> bool:
        return ref in (self.public_id, str(self.id), self.place.public_id, str(self.place.place_id))


@fleetops.entity(part_of="Order")
class LineItem:
    """A shipped good tracked within the order payload."""

    public_id = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    sku = String(max_length=100)
    quantity = Integer(default=1, min_value=1)


@fleetops.entity(part_of="Order")
class ActivityEntry:
    """A row in the activity log of the order, one of its waypoints, or a line item."""

    subject_type = String(required=True, max_length=20, choices=SubjectType)
    subject_id = Identifier(required=True)
    code = String(required=True, max_length=100)
    status = String(required=True, max_length=255)
    details = String(max_length=500)
    location = ValueObject(Location)
    proof_id = Identifier()
    sequence = Integer(required=True)
    created_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@fleetops.aggregate
class Order:
    public_id = String(required=True, max_length=50)
    company_id = Identifier()
    order_type = String(max_length=50, default="default")
    status = String(choices=OrderStatus, default=OrderStatus.CREATED.value)

    dispatched = Boolean(default=False)
    dispatched_at = DateTime()
    started = Boolean(default=False)
    started_at = DateTime()
    adhoc = Boolean(default=False)
    adhoc_distance = Integer(min_value=0)
    driver_assigned_id = Identifier()

    pickup = ValueObject(Place)
    dropoff = ValueObject(Place)
    return_place = ValueObject(Place)
    waypoints = HasMany(Waypoint)
    items = HasMany(LineItem)
    current_waypoint_id = Identifier()
    waypoints_completed = Integer(default=0)

    activities = HasMany(ActivityEntry)
    last_location = ValueObject(Location)

    scheduled_at = DateTime()
    pod_required = Boolean(default=False)
    pod_method = String(max_length=20, choices=PodMethod)
    distance = Integer()
    time = Integer()
    integrated_vendor = String(max_length=100)
    integrated_vendor_order = Text()

    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        company_id: str | None = None,
        order_type: str = "default",
        pickup: dict | None = None,
        dropoff: dict | None = None,
        return_place: dict | None = None,
        waypoints: list[dict] | None = None,
        items: list[dict] | None = None,
        driver_id: str | None = None,
        adhoc: bool = False,
        adhoc_distance: int | None = None,
        pod_required: bool = False,
        pod_method: str | None = None,
        scheduled_at: datetime | None = None,
    ):
        """Create a new order with its payload."""
        waypoints = waypoints or []
        if waypoints and (pickup or dropoff):
            raise ValidationError({"payload": ["Payload takes either pickup/dropoff or waypoints, not both"]})
        if not waypoints and not (pickup or dropoff):
            raise ValidationError({"payload": ["Attempted to attach invalid payload to order."]})

        now = datetime.now(UTC)
        order = cls(
            public_id=new_public_id("order"),
            company_id=company_id,
            order_type=order_type or "default",
            status=OrderStatus.CREATED.value,
            adhoc=adhoc,
            adhoc_distance=adhoc_distance,
            driver_assigned_id=driver_id,
            pickup=place_from(pickup) if pickup else None,
            dropoff=place_from(dropoff) if dropoff else None,
            return_place=place_from(return_place) if return_place else None,
            pod_required=pod_required,
            pod_method=pod_method,
            scheduled_at=scheduled_at,
            created_at=now,
            updated_at=now,
        )

        for sequence, place_data in enumerate(waypoints):
            order.add_waypoints(
                Waypoint(
                    public_id=new_public_id("waypoint"),
                    place=place_from(place_data),
                    sequence=sequence,
                )
            )
        for item_data in items or []:
            order.add_items(
                LineItem(
                    public_id=item_data.get("public_id") or new_public_id("entity"),
                    name=item_data["name"],
                    sku=item_data.get("sku"),
                    quantity=item_data.get("quantity", 1),
                )
            )

        first = order.ordered_waypoints()
        if first:
            order.current_waypoint_id = str(first[0].id)

        order.add_activities(
            ActivityEntry(
                subject_type=SubjectType.ORDER.value,
                subject_id=str(order.id),
                code=ActivityCode.CREATED.value,
                status="Order created",
                details="New order was created.",
                sequence=1,
                created_at=now,
            )
        )
        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                company_id=company_id,
                order_type=order.order_type,
                driver_id=driver_id,
                adhoc=adhoc,
                waypoint_count=len(waypoints),
                item_count=len(items or []),
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Payload lookups
    # -------------------------------------------------------------------
    def ordered_waypoints(self) -> list:
        return sorted(self.waypoints or [], key=lambda w: w.sequence)

    def find_waypoint(self, ref: str | None):
        if not ref:
            return None
        return next((w for w in self.ordered_waypoints() if w.matches(ref)), None)

    def find_item(self, ref: str | None):
        if not ref:
            return None
        return next((i for i in (self.items or []) if ref in (i.public_id, str(i.id))), None)

    @property
    def current_waypoint(self):
        if not self.current_waypoint_id:
            return None
        return next((w for w in (self.waypoints or []) if str(w.id) == str(self.current_waypoint_id)), None)

    @property
    def has_driver_assigned(self) -> bool:
        return bool(self.driver_assigned_id)

    def timeline(self, subject_type: SubjectType = SubjectType.ORDER, subject_id: str | None = None) -> list:
        """Activity entries of one subject, oldest first."""
        subject_id = str(subject_id or self.id)
        entries = [
            e
            for e in (self.activities or [])
            if e.subject_type == subject_type.value and str(e.subject_id) == subject_id
        ]
        return sorted(entries, key=lambda e: e.sequence)

    def last_activity_code(self, subject_type: SubjectType = SubjectType.ORDER, subject_id: str | None = None):
        entries = self.timeline(subject_type, subject_id)
        return entries[-1].code if entries else None

    def last_known_location(self, driver=None):
        """Best known position: the driver's, then the last recorded one, then the first stop."""
        if driver is not None and driver.location is not None:
            return driver.location
        if self.last_location is not None:
            return self.last_location
        if self.pickup is not None:
            return self.pickup.location
        waypoints = self.ordered_waypoints()
        if waypoints:
            return waypoints[0].place.location
        return None

    # -------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------
    def _touch(self, now: datetime) -> None:
        self.updated_at = now
        self.revision = (self.revision or 0) + 1

    def _append_activity(self, activity, subject_type, subject_id, location, proof_id, now):
        self.add_activities(
            ActivityEntry(
                subject_type=subject_type.value,
                subject_id=str(subject_id),
                code=activity.code,
                status=activity.status,
                details=activity.details or "",
                location=location,
                proof_id=proof_id,
                sequence=len(self.activities or []) + 1,
                created_at=now,
            )
        )
        self.raise_(
            ActivityRecorded(
                order_id=str(self.id),
                subject_type=subject_type.value,
                subject_id=str(subject_id),
                code=activity.code,
                status=activity.status,
                proof_id=proof_id,
                recorded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Activity log
    # -------------------------------------------------------------------
    def record_activity(self, activity, location=None, proof_id=None) -> None:
        """Append an activity to the order's own timeline."""
        now = datetime.now(UTC)
        self._append_activity(activity, SubjectType.ORDER, self.id, location, proof_id, now)
        if location is not None:
            self.last_location = location
        if self.status == OrderStatus.CREATED.value and activity.code not in (
            ActivityCode.CREATED.value,
            ActivityCode.DISPATCHED.value,
        ):
            self.status = OrderStatus.STARTED.value
        self._touch(now)

    def record_item_activity(self, item, activity, location=None, proof_id=None) -> None:
        """Append an activity to a line item's timeline."""
        now = datetime.now(UTC)
        self._append_activity(activity, SubjectType.ENTITY, item.id, location, proof_id, now)
        self._touch(now)

    def record_waypoint_activity(self, waypoint, activity, location=None, proof_id=None) -> None:
        """Append an activity to a waypoint's timeline and move its status code."""
        now = datetime.now(UTC)
        self._append_activity(activity, SubjectType.WAYPOINT, waypoint.id, location, proof_id, now)

        if waypoint.is_terminal:
            # Completed stops are final; later activity only extends their timeline
            if location is not None:
                self.last_location = location
            self._touch(now)
            return

        if activity.code == ActivityCode.COMPLETED.value:
            target = WaypointStatus.COMPLETED
        elif activity.code == ActivityCode.CANCELED.value:
            target = WaypointStatus.CANCELED
        else:
            target = WaypointStatus.EN_ROUTE

        was_terminal = waypoint.is_terminal
        waypoint.status_code = target.value
        if waypoint.is_terminal and not was_terminal:
            self.waypoints_completed = (self.waypoints_completed or 0) + 1
        elif was_terminal and not waypoint.is_terminal:
            self.waypoints_completed = max((self.waypoints_completed or 0) - 1, 0)

        if target in (WaypointStatus.COMPLETED, WaypointStatus.CANCELED):
            self.raise_(
                WaypointCompleted(
                    order_id=str(self.id),
                    waypoint_id=str(waypoint.id),
                    status_code=target.value,
                    waypoints_completed=self.waypoints_completed,
                    waypoint_count=len(self.waypoints or []),
                    completed_at=now,
                )
            )
        if location is not None:
            self.last_location = location
        self._touch(now)

    def recount_terminal_waypoints(self) -> int:
        """Rebuild the terminal-count cache from the waypoints' own status codes."""
        self.waypoints_completed = sum(1 for w in (self.waypoints or []) if w.is_terminal)
        return self.waypoints_completed

    # -------------------------------------------------------------------
    # Driver assignment
    # -------------------------------------------------------------------
    def assign_driver(self, driver_id: str) -> None:
        now = datetime.now(UTC)
        self.driver_assigned_id = driver_id
        self._touch(now)
        self.raise_(DriverAssigned(order_id=str(self.id), driver_id=driver_id, assigned_at=now))

    # -------------------------------------------------------------------
    # Dispatch / start
    # -------------------------------------------------------------------
    def mark_dispatched(self, activity, location=None) -> None:
        """Flag the order as dispatched. Preconditions are enforced by DispatchGate."""
        now = datetime.now(UTC)
        self.dispatched = True
        self.dispatched_at = now
        self._append_activity(activity, SubjectType.ORDER, self.id, location, None, now)
        self._touch(now)
        self.raise_(
            OrderDispatched(
                order_id=str(self.id),
                driver_id=self.driver_assigned_id,
                adhoc=bool(self.adhoc),
                adhoc_distance=self.adhoc_distance,
                dispatched_at=now,
            )
        )

    def mark_started(self, skipped_dispatch: bool = False) -> None:
        now = datetime.now(UTC)
        self.started = True
        self.started_at = now
        self._touch(now)
        self.raise_(
            OrderStarted(
                order_id=str(self.id),
                driver_id=self.driver_assigned_id,
                skipped_dispatch=skipped_dispatch,
                started_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Destination
    # -------------------------------------------------------------------
    def set_current_waypoint(self, waypoint) -> None:
        now = datetime.now(UTC)
        self.current_waypoint_id = str(waypoint.id) if waypoint is not None else None
        self._touch(now)
        self.raise_(
            DestinationChanged(
                order_id=str(self.id),
                waypoint_id=self.current_waypoint_id,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Completion / cancellation
    # -------------------------------------------------------------------
    def complete(self, activity, location=None, proof_id=None) -> None:
        """Record the final activity and close the order."""
        now = datetime.now(UTC)
        self._append_activity(activity, SubjectType.ORDER, self.id, location, proof_id, now)
        self.status = OrderStatus.COMPLETED.value
        if location is not None:
            self.last_location = location
        self._touch(now)
        self.raise_(
            OrderCompleted(
                order_id=str(self.id),
                company_id=self.company_id,
                driver_id=self.driver_assigned_id,
                completed_at=now,
            )
        )

    def cancel(self, location=None) -> None:
        """Cancel the order, whatever its current status."""
        now = datetime.now(UTC)
        previous = self.status
        self._append_activity(
            Activity(
                code=ActivityCode.CANCELED.value,
                status="Order canceled",
                details="Order was canceled.",
            ),
            SubjectType.ORDER,
            self.id,
            location,
            None,
            now,
        )
        self.status = OrderStatus.CANCELED.value
        self._touch(now)
        self.raise_(
            OrderCanceled(
                order_id=str(self.id),
                driver_id=self.driver_assigned_id,
                previous_status=previous,
                canceled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Scheduling, distance, vendor
    # -------------------------------------------------------------------
    def schedule(self, scheduled_at: datetime, timezone: str) -> None:
        now = datetime.now(UTC)
        self.scheduled_at = scheduled_at
        self._touch(now)
        self.raise_(OrderScheduled(order_id=str(self.id), scheduled_at=scheduled_at, timezone=timezone))

    def update_distance_matrix(self, distance: int, time: int) -> None:
        now = datetime.now(UTC)
        self.distance = distance
        self.time = time
        self._touch(now)
        self.raise_(DistanceMatrixUpdated(order_id=str(self.id), distance=distance, time=time, updated_at=now))

    def attach_vendor_order(self, integrated_vendor: str, vendor_order: str) -> None:
        now = datetime.now(UTC)
        self.integrated_vendor = integrated_vendor
        self.integrated_vendor_order = vendor_order
        self._touch(now)
        self.raise_(
            VendorOrderCreated(
                order_id=str(self.id),
                integrated_vendor=integrated_vendor,
                vendor_order=vendor_order,
                created_at=now,
            )
        )
