"""
app.py — FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the engine services and registers routers.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from backend.controllers.dashboard_controller import router as dashboard_router
from backend.controllers.parking_controller import router as parking_router
from backend.services.dashboard_service import DashboardStatisticsService
from backend.services.parking_service import ParkingCoordinatorService
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    One coordinator owns all engine state for the process lifetime; the
    dashboard service reads from that same instance.
    """
    settings = settings or get_settings()

    parking_service = ParkingCoordinatorService(settings=settings)
    dashboard_service = DashboardStatisticsService(parking_service)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.include_router(parking_router)
    app.include_router(dashboard_router)

    app.state.settings = settings
    app.state.parking_service = parking_service
    app.state.dashboard_service = dashboard_service

    return app


def _startup(app: FastAPI) -> None:
    parking_service: ParkingCoordinatorService = app.state.parking_service
    zones = parking_service.registry.zones
    logger.info(
        "Startup complete | zones=%s | slots=%s | rate_per_tick=%.2f | cross_zone_penalty=%.2f",
        len(zones),
        len(parking_service.registry),
        parking_service.rate_per_tick,
        parking_service.cross_zone_penalty,
    )


# Module-level app object for uvicorn
app = create_app()
