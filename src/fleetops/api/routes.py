"""FastAPI routes for the FleetOps domain — orders, proofs and drivers.

The tenant is passed explicitly in the ``X-Company-Id`` header. Every
order command is processed under that order's lock.
"""

import json

from fastapi import APIRouter, Header
from protean.utils.globals import current_domain

from fleetops.api.schemas import (
    ActivityResponse,
    CaptureQrRequest,
    CaptureSignatureRequest,
    CreateOrderRequest,
    DistanceMatrixResponse,
    DriverResponse,
    OrderResponse,
    ProofResponse,
    RegisterDriverRequest,
    RevisionedRequest,
    ScheduleOrderRequest,
    StartOrderRequest,
    StatusResponse,
    UpdateActivityRequest,
    UpdateLocationRequest,
)
from fleetops.driver.driver import Driver
from fleetops.driver.registration import RegisterDriver, UpdateDriverLocation
from fleetops.order.activity import UpdateActivity, next_activity
from fleetops.order.cancellation import CancelOrder
from fleetops.order.completion import CompleteOrder
from fleetops.order.creation import CreateOrder
from fleetops.order.destination import SetDestination
from fleetops.order.dispatch import DispatchOrder
from fleetops.order.distance import RefreshDistanceMatrix
from fleetops.order.errors import NoNextActivity
from fleetops.order.loading import get_order
from fleetops.order.locking import process_locked
from fleetops.order.scheduling import ScheduleOrder
from fleetops.order.start import StartOrder
from fleetops.proof.capture import CaptureQrScan, CaptureSignature
from fleetops.proof.proof import Proof


def _dump(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        return json.dumps([v.model_dump(exclude_none=True) for v in value])
    return json.dumps(value.model_dump(exclude_none=True))


def _order_response(order_id: str, company_id: str | None, progress: str | None = None) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id, company_id), progress)


def _proof_response(proof_id: str) -> ProofResponse:
    proof = current_domain.repository_for(Proof).get(proof_id)
    return ProofResponse(
        id=str(proof.id),
        public_id=proof.public_id,
        order_id=str(proof.order_id),
        method=proof.method,
        subject_type=proof.subject_type,
        subject_id=str(proof.subject_id),
        remarks=proof.remarks,
        file_path=proof.file_path,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(
    body: CreateOrderRequest,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    command = CreateOrder(
        company_id=company_id,
        order_type=body.order_type,
        pickup=_dump(body.pickup),
        dropoff=_dump(body.dropoff),
        return_place=_dump(body.return_place),
        waypoints=_dump(body.waypoints),
        items=_dump(body.items),
        driver_id=body.driver,
        adhoc=body.adhoc,
        adhoc_distance=body.adhoc_distance,
        pod_required=body.pod_required,
        pod_method=body.pod_method,
        dispatch=body.dispatch,
        integrated_vendor=body.integrated_vendor,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(order_id, company_id)


@order_router.post("/{order_id}/dispatch", response_model=OrderResponse)
async def dispatch_order(
    order_id: str,
    body: RevisionedRequest | None = None,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    command = DispatchOrder(
        order_id=order_id,
        company_id=company_id,
        expected_revision=body.expected_revision if body else None,
    )
    process_locked(command)
    return _order_response(order_id, company_id)


@order_router.post("/{order_id}/start", response_model=OrderResponse)
async def start_order(
    order_id: str,
    body: StartOrderRequest | None = None,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    body = body or StartOrderRequest()
    command = StartOrder(
        order_id=order_id,
        company_id=company_id,
        expected_revision=body.expected_revision,
        skip_dispatch=body.skip_dispatch,
        assign=body.assign,
    )
    progress = process_locked(command)
    return _order_response(order_id, company_id, progress)


@order_router.post("/{order_id}/update-activity", response_model=OrderResponse)
async def update_activity(
    order_id: str,
    body: UpdateActivityRequest | None = None,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    body = body or UpdateActivityRequest()
    command = UpdateActivity(
        order_id=order_id,
        company_id=company_id,
        expected_revision=body.expected_revision,
        activity=_dump(body.activity),
        proof_id=body.proof,
        skip_dispatch=body.skip_dispatch,
    )
    progress = process_locked(command)
    return _order_response(order_id, company_id, progress)


@order_router.get("/{order_id}/next-activity", response_model=ActivityResponse)
async def get_next_activity(
    order_id: str,
    waypoint: str | None = None,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> ActivityResponse:
    activity = next_activity(order_id, company_id, waypoint)
    if activity is None:
        raise NoNextActivity()
    return ActivityResponse(code=activity.code, status=activity.status, details=activity.details)


@order_router.post("/{order_id}/complete", response_model=OrderResponse)
async def complete_order(
    order_id: str,
    body: RevisionedRequest | None = None,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    command = CompleteOrder(
        order_id=order_id,
        company_id=company_id,
        expected_revision=body.expected_revision if body else None,
    )
    process_locked(command)
    return _order_response(order_id, company_id)


@order_router.delete("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    process_locked(CancelOrder(order_id=order_id, company_id=company_id))
    return _order_response(order_id, company_id)


@order_router.post("/{order_id}/set-destination/{place_id}", response_model=OrderResponse)
async def set_destination(
    order_id: str,
    place_id: str,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    process_locked(SetDestination(order_id=order_id, company_id=company_id, place_id=place_id))
    return _order_response(order_id, company_id)


@order_router.patch("/{order_id}/schedule", response_model=OrderResponse)
async def schedule_order(
    order_id: str,
    body: ScheduleOrderRequest,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> OrderResponse:
    command = ScheduleOrder(
        order_id=order_id,
        company_id=company_id,
        expected_revision=body.expected_revision,
        date=body.date,
        time=body.time,
        timezone=body.timezone,
    )
    process_locked(command)
    return _order_response(order_id, company_id)


@order_router.get("/{order_id}/distance-and-time", response_model=DistanceMatrixResponse)
async def distance_and_time(
    order_id: str,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> DistanceMatrixResponse:
    matrix = process_locked(RefreshDistanceMatrix(order_id=order_id, company_id=company_id))
    return DistanceMatrixResponse(**matrix)


@order_router.post("/{order_id}/capture-qr", status_code=201, response_model=ProofResponse)
@order_router.post("/{order_id}/capture-qr/{subject}", status_code=201, response_model=ProofResponse)
async def capture_qr(
    order_id: str,
    body: CaptureQrRequest,
    subject: str | None = None,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> ProofResponse:
    command = CaptureQrScan(
        order_id=order_id,
        company_id=company_id,
        subject=subject,
        code=body.code,
        raw_data=body.raw_data,
        data=json.dumps(body.data) if body.data is not None else None,
    )
    proof_id = process_locked(command)
    return _proof_response(proof_id)


@order_router.post("/{order_id}/capture-signature", status_code=201, response_model=ProofResponse)
@order_router.post("/{order_id}/capture-signature/{subject}", status_code=201, response_model=ProofResponse)
async def capture_signature(
    order_id: str,
    body: CaptureSignatureRequest,
    subject: str | None = None,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> ProofResponse:
    command = CaptureSignature(
        order_id=order_id,
        company_id=company_id,
        subject=subject,
        signature=body.signature,
        remarks=body.remarks,
        data=json.dumps(body.data) if body.data is not None else None,
    )
    proof_id = process_locked(command)
    return _proof_response(proof_id)


# ---------------------------------------------------------------------------
# Driver Router
# ---------------------------------------------------------------------------
driver_router = APIRouter(prefix="/drivers", tags=["drivers"])


def _driver_response(driver_id: str) -> DriverResponse:
    driver = current_domain.repository_for(Driver).get(driver_id)
    return DriverResponse(
        id=str(driver.id),
        public_id=driver.public_id,
        name=driver.name,
        current_job_id=str(driver.current_job_id) if driver.current_job_id else None,
        latitude=driver.latitude,
        longitude=driver.longitude,
    )


@driver_router.post("", status_code=201, response_model=DriverResponse)
async def register_driver(
    body: RegisterDriverRequest,
    company_id: str | None = Header(default=None, alias="X-Company-Id"),
) -> DriverResponse:
    command = RegisterDriver(
        company_id=company_id,
        name=body.name,
        latitude=body.latitude,
        longitude=body.longitude,
    )
    driver_id = current_domain.process(command, asynchronous=False)
    return _driver_response(driver_id)


@driver_router.put("/{driver_id}/location", response_model=StatusResponse)
async def update_driver_location(driver_id: str, body: UpdateLocationRequest) -> StatusResponse:
    command = UpdateDriverLocation(
        driver_id=driver_id,
        latitude=body.latitude,
        longitude=body.longitude,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
