"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from backend.domain.errors import (
    InsufficientHistoryError,
    InvalidTransitionError,
    NotFoundError,
    ParkingEngineError,
)
from backend.services.dashboard_service import DashboardStatisticsService
from backend.services.parking_service import ParkingCoordinatorService


def get_parking_service(request: Request) -> ParkingCoordinatorService:
    service = getattr(request.app.state, "parking_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Parking service is not initialized",
        )
    return service


def get_dashboard_service(request: Request) -> DashboardStatisticsService:
    service = getattr(request.app.state, "dashboard_service", None)
    if service is None:
        parking_service = getattr(request.app.state, "parking_service", None)
        if parking_service is not None:
            service = DashboardStatisticsService(parking_service)
            request.app.state.dashboard_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Dashboard service is not initialized",
        )
    return service


def to_http_exception(exc: ParkingEngineError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (InvalidTransitionError, InsufficientHistoryError)):
        status_code = status.HTTP_409_CONFLICT
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=status_code, detail=str(exc))
