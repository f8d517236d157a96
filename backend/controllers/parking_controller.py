"""HTTP controller layer for zone setup and request lifecycle operations."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from backend.controllers.dependencies import get_parking_service, to_http_exception
from backend.domain.errors import ParkingEngineError
from backend.domain.models import ParkingRequest
from backend.services.parking_service import ParkingCoordinatorService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["parking"])


class ZoneResponse(BaseModel):
    zone_id: int = Field(ge=0)


class AddSlotsRequest(BaseModel):
    count: int = Field(gt=0)


class AddSlotsResponse(BaseModel):
    zone_id: int = Field(ge=0)
    slot_ids: list[int]


class EntryRequest(BaseModel):
    """Input DTO validated before entering service layer."""

    vehicle_id: str = Field(min_length=1, max_length=64)
    requested_zone: int = Field(ge=0)

    @field_validator("vehicle_id")
    @classmethod
    def strip_vehicle_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("vehicle_id must not be blank")
        return stripped


class EntryResponse(BaseModel):
    request_id: int = Field(gt=0)
    penalty: float = Field(ge=0.0)
    slot_id: Optional[int] = None
    zone_id: Optional[int] = None
    queued: bool


class RequestStatusResponse(BaseModel):
    request_id: int = Field(gt=0)
    vehicle_id: str
    state: str
    slot_id: Optional[int] = None
    zone_id: Optional[int] = None
    penalty: float = Field(ge=0.0)


class ReleaseResponse(BaseModel):
    request_id: int = Field(gt=0)
    charge: float = Field(ge=0.0)
    total_revenue: float = Field(ge=0.0)


class RollbackRequest(BaseModel):
    k: int = Field(gt=0)


class RollbackResponse(BaseModel):
    reset_request_ids: list[int]


class SearchResponse(BaseModel):
    vehicle_id: str
    request_id: int = Field(gt=0)


def _to_status_response(request: ParkingRequest) -> RequestStatusResponse:
    return RequestStatusResponse(
        request_id=request.request_id,
        vehicle_id=request.vehicle_id,
        state=request.state.value,
        slot_id=request.allocated_slot_id,
        zone_id=request.allocated_zone_id,
        penalty=request.penalty,
    )


@router.post("/zones", response_model=ZoneResponse, status_code=status.HTTP_201_CREATED)
async def add_zone(
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> ZoneResponse:
    return ZoneResponse(zone_id=service.add_zone())


@router.post(
    "/zones/{zone_id}/slots",
    response_model=AddSlotsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_slots(
    zone_id: int,
    payload: AddSlotsRequest,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> AddSlotsResponse:
    try:
        slot_ids = service.add_slots(zone_id, payload.count)
        return AddSlotsResponse(zone_id=zone_id, slot_ids=slot_ids)
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc


@router.post("/requests", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def entry(
    payload: EntryRequest,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> EntryResponse:
    """Create a request; it is allocated now or queued until capacity frees up."""
    try:
        outcome = service.entry(payload.vehicle_id, payload.requested_zone)
        return EntryResponse(
            request_id=outcome.request_id,
            penalty=outcome.penalty,
            slot_id=outcome.slot_id,
            zone_id=outcome.zone_id,
            queued=outcome.queued,
        )
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected entry failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create request",
        ) from exc


@router.post("/requests/{request_id}/occupy", response_model=RequestStatusResponse)
async def occupy(
    request_id: int,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> RequestStatusResponse:
    try:
        return _to_status_response(service.occupy(request_id))
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc


@router.post("/requests/{request_id}/release", response_model=ReleaseResponse)
async def release(
    request_id: int,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> ReleaseResponse:
    try:
        outcome = service.release(request_id)
        return ReleaseResponse(
            request_id=outcome.request_id,
            charge=outcome.charge,
            total_revenue=service.total_revenue,
        )
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected release failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to release request",
        ) from exc


@router.post("/requests/{request_id}/cancel", response_model=RequestStatusResponse)
async def cancel(
    request_id: int,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> RequestStatusResponse:
    try:
        return _to_status_response(service.cancel(request_id))
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc


@router.get("/requests/{request_id}", response_model=RequestStatusResponse)
async def get_request(
    request_id: int,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> RequestStatusResponse:
    try:
        return _to_status_response(service.get_request(request_id))
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc


@router.post("/vehicles/{vehicle_id}/exit", response_model=ReleaseResponse)
async def exit_by_vehicle(
    vehicle_id: str,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> ReleaseResponse:
    try:
        outcome = service.exit_by_vehicle(vehicle_id)
        return ReleaseResponse(
            request_id=outcome.request_id,
            charge=outcome.charge,
            total_revenue=service.total_revenue,
        )
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc


@router.get("/vehicles/{vehicle_id}", response_model=SearchResponse)
async def search(
    vehicle_id: str,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> SearchResponse:
    request_id = service.search(vehicle_id)
    if request_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"vehicle {vehicle_id!r} not found",
        )
    return SearchResponse(vehicle_id=vehicle_id, request_id=request_id)


@router.post("/rollback", response_model=RollbackResponse)
async def rollback(
    payload: RollbackRequest,
    service: ParkingCoordinatorService = Depends(get_parking_service),
) -> RollbackResponse:
    """Undo the most recent allocation decisions, newest first."""
    try:
        return RollbackResponse(reset_request_ids=service.rollback_last_k(payload.k))
    except ParkingEngineError as exc:
        raise to_http_exception(exc) from exc
