"""Controller layer for read-only dashboard and statistics endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.controllers.dependencies import get_dashboard_service
from backend.services.dashboard_service import DashboardStatisticsService
from backend.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["dashboard"])


class ZoneRow(BaseModel):
    zone_id: int = Field(ge=0)
    total_slots: int = Field(ge=0)
    free_count: int = Field(ge=0)
    allocated_count: int = Field(ge=0)
    occupied_count: int = Field(ge=0)
    free_slot_ids: list[int]


class RosterRow(BaseModel):
    request_id: int = Field(gt=0)
    vehicle_id: str = Field(min_length=1)
    state: str
    requested_zone: int = Field(ge=0)
    slot_id: Optional[int] = None
    zone_id: Optional[int] = None
    penalty: float = Field(ge=0.0)
    charge: float = Field(ge=0.0)


class StatsResponse(BaseModel):
    tick: int = Field(ge=0)
    total_revenue: float = Field(ge=0.0)
    rate_per_tick: float = Field(ge=0.0)
    pending_queue_length: int = Field(ge=0)
    rollback_depth: int = Field(ge=0)
    completed_count: int = Field(ge=0)
    cancelled_count: int = Field(ge=0)
    average_completed_duration_ticks: float = Field(ge=0.0)


class DashboardResponse(BaseModel):
    summary: StatsResponse
    zones: list[ZoneRow]
    requests: list[RosterRow]


@router.get("/dashboard", response_model=DashboardResponse, status_code=status.HTTP_200_OK)
async def dashboard(
    service: DashboardStatisticsService = Depends(get_dashboard_service),
) -> DashboardResponse:
    try:
        return DashboardResponse(**service.dashboard())
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected dashboard failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build dashboard",
        ) from exc


@router.get("/zones", response_model=list[ZoneRow])
async def list_zones(
    service: DashboardStatisticsService = Depends(get_dashboard_service),
) -> list[ZoneRow]:
    return [ZoneRow(**vars(row)) for row in service.zone_overview()]


@router.get("/requests", response_model=list[RosterRow])
async def list_requests(
    service: DashboardStatisticsService = Depends(get_dashboard_service),
) -> list[RosterRow]:
    return [RosterRow(**vars(row)) for row in service.request_roster()]


@router.get("/stats", response_model=StatsResponse)
async def stats(
    service: DashboardStatisticsService = Depends(get_dashboard_service),
) -> StatsResponse:
    return StatsResponse(**service.summary())
