"""Read-only statistics over engine state for the operator dashboard."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional

from backend.domain.models import RequestState, SlotStatus
from backend.services.parking_service import ParkingCoordinatorService


@dataclass(frozen=True)
class ZoneOverview:
    zone_id: int
    total_slots: int
    free_count: int
    allocated_count: int
    occupied_count: int
    free_slot_ids: list[int]


@dataclass(frozen=True)
class RosterRow:
    request_id: int
    vehicle_id: str
    state: str
    requested_zone: int
    slot_id: Optional[int]
    zone_id: Optional[int]
    penalty: float
    charge: float


class DashboardStatisticsService:
    """Aggregates zones, requests and revenue without mutating anything."""

    def __init__(self, parking_service: ParkingCoordinatorService) -> None:
        self._parking_service = parking_service

    def zone_overview(self) -> list[ZoneOverview]:
        registry = self._parking_service.registry
        rows: list[ZoneOverview] = []
        for zone in registry.zones:
            rows.append(
                ZoneOverview(
                    zone_id=zone.zone_id,
                    total_slots=len(zone.slots),
                    free_count=zone.free_count(),
                    allocated_count=registry.count_in_status(zone.zone_id, SlotStatus.ALLOCATED),
                    occupied_count=registry.count_in_status(zone.zone_id, SlotStatus.OCCUPIED),
                    free_slot_ids=zone.free_slot_ids(),
                )
            )
        return rows

    def request_roster(self) -> list[RosterRow]:
        return [
            RosterRow(
                request_id=request.request_id,
                vehicle_id=request.vehicle_id,
                state=request.state.value,
                requested_zone=request.requested_zone,
                slot_id=request.allocated_slot_id,
                zone_id=request.allocated_zone_id,
                penalty=float(request.penalty),
                charge=float(request.charge),
            )
            for request in self._parking_service.ledger
        ]

    def average_completed_duration(self) -> float:
        durations = [
            request.duration_ticks
            for request in self._parking_service.ledger
            if request.state is RequestState.RELEASED and request.duration_ticks is not None
        ]
        if not durations:
            return 0.0
        return float(sum(durations) / len(durations))

    def summary(self) -> dict[str, Any]:
        ledger = self._parking_service.ledger
        return {
            "tick": self._parking_service.tick,
            "total_revenue": float(self._parking_service.total_revenue),
            "rate_per_tick": float(self._parking_service.rate_per_tick),
            "pending_queue_length": len(self._parking_service.pending_queue),
            "rollback_depth": len(self._parking_service.rollback_log),
            "completed_count": ledger.count_in_state(RequestState.RELEASED),
            "cancelled_count": ledger.count_in_state(RequestState.CANCELLED),
            "average_completed_duration_ticks": self.average_completed_duration(),
        }

    def dashboard(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "zones": [asdict(row) for row in self.zone_overview()],
            "requests": [asdict(row) for row in self.request_roster()],
        }
