"""Pydantic request/response schemas for the FleetOps API.

These are external contracts — separate from internal Protean commands.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class PlaceSchema(BaseModel):
    public_id: str | None = None
    name: str | None = None
    street: str | None = None
    city: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class LineItemSchema(BaseModel):
    public_id: str | None = None
    name: str
    sku: str | None = None
    quantity: int = Field(ge=1, default=1)


class ActivitySchema(BaseModel):
    code: str
    status: str | None = None
    details: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    order_type: str = "default"
    pickup: PlaceSchema | None = None
    dropoff: PlaceSchema | None = None
    return_place: PlaceSchema | None = None
    waypoints: list[PlaceSchema] = Field(default_factory=list)
    items: list[LineItemSchema] = Field(default_factory=list)
    driver: str | None = None
    adhoc: bool = False
    adhoc_distance: int | None = Field(default=None, ge=0)
    pod_required: bool = False
    pod_method: str | None = Field(default=None, pattern="^(scan|signature)$")
    dispatch: bool = False
    integrated_vendor: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "pickup": {"name": "Warehouse 7", "latitude": 1.3521, "longitude": 103.8198},
                    "dropoff": {"name": "Customer", "latitude": 1.3001, "longitude": 103.8001},
                    "items": [{"name": "Parcel", "quantity": 1}],
                    "driver": "driver_3f9a1c2b7d",
                    "dispatch": True,
                }
            ]
        }
    }


class RevisionedRequest(BaseModel):
    expected_revision: int | None = None


class StartOrderRequest(RevisionedRequest):
    skip_dispatch: bool = False
    assign: str | None = None


class UpdateActivityRequest(RevisionedRequest):
    activity: ActivitySchema | None = None
    proof: str | None = None
    skip_dispatch: bool = False


class ScheduleOrderRequest(RevisionedRequest):
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    timezone: str | None = None


class CaptureQrRequest(BaseModel):
    code: str | None = None
    raw_data: str | None = None
    data: dict | None = None


class CaptureSignatureRequest(BaseModel):
    signature: str
    remarks: str | None = None
    data: dict | None = None


# ---------------------------------------------------------------------------
# Driver Request Schemas
# ---------------------------------------------------------------------------
class RegisterDriverRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class UpdateLocationRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class WaypointResponse(BaseModel):
    id: str
    public_id: str
    place_id: str
    place_public_id: str
    sequence: int
    status_code: str


class LineItemResponse(BaseModel):
    id: str
    public_id: str
    name: str
    quantity: int


class OrderResponse(BaseModel):
    id: str
    public_id: str
    company_id: str | None = None
    order_type: str
    status: str
    dispatched: bool
    started: bool
    adhoc: bool
    driver_assigned_id: str | None = None
    current_waypoint_id: str | None = None
    waypoints_completed: int = 0
    waypoints: list[WaypointResponse] = Field(default_factory=list)
    items: list[LineItemResponse] = Field(default_factory=list)
    scheduled_at: str | None = None
    distance: int | None = None
    time: int | None = None
    integrated_vendor: str | None = None
    revision: int = 0
    progress: str | None = None

    @classmethod
    def from_order(cls, order, progress: str | None = None) -> "OrderResponse":
        return cls(
            id=str(order.id),
            public_id=order.public_id,
            company_id=str(order.company_id) if order.company_id else None,
            order_type=order.order_type,
            status=order.status,
            dispatched=bool(order.dispatched),
            started=bool(order.started),
            adhoc=bool(order.adhoc),
            driver_assigned_id=str(order.driver_assigned_id) if order.driver_assigned_id else None,
            current_waypoint_id=str(order.current_waypoint_id) if order.current_waypoint_id else None,
            waypoints_completed=order.waypoints_completed or 0,
            waypoints=[
                WaypointResponse(
                    id=str(w.id),
                    public_id=w.public_id,
                    place_id=str(w.place.place_id),
                    place_public_id=w.place.public_id,
                    sequence=w.sequence,
                    status_code=w.status_code,
                )
                for w in order.ordered_waypoints()
            ],
            items=[
                LineItemResponse(id=str(i.id), public_id=i.public_id, name=i.name, quantity=i.quantity)
                for i in order.items or []
            ],
            scheduled_at=order.scheduled_at.isoformat() if order.scheduled_at else None,
            distance=order.distance,
            time=order.time,
            integrated_vendor=order.integrated_vendor,
            revision=order.revision or 0,
            progress=progress,
        )


class ActivityResponse(BaseModel):
    code: str
    status: str
    details: str | None = None


class DistanceMatrixResponse(BaseModel):
    distance: int
    time: int


class ProofResponse(BaseModel):
    id: str
    public_id: str
    order_id: str
    method: str
    subject_type: str
    subject_id: str
    remarks: str | None = None
    file_path: str | None = None


class DriverResponse(BaseModel):
    id: str
    public_id: str
    name: str
    current_job_id: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
