"""Coordinator for entry, occupancy, release, cancel, rollback and search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from backend.domain.constraints import EngineConfig, validate_engine_config
from backend.domain.errors import InvalidArgumentError, NotFoundError
from backend.domain.models import (
    HOLDING_STATES,
    ParkingRequest,
    RequestState,
    RollbackAction,
)
from backend.repository.pending_queue import PendingQueue
from backend.repository.request_ledger import RequestLedger
from backend.repository.slot_registry import SlotRegistry
from backend.services.matching_service import select_slot
from backend.services.rollback_service import RollbackLog
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class EntryOutcome:
    request_id: int
    penalty: float
    slot_id: Optional[int]
    zone_id: Optional[int]

    @property
    def queued(self) -> bool:
        return self.slot_id is None


@dataclass(frozen=True)
class ReleaseOutcome:
    request_id: int
    slot_id: int
    duration_ticks: int
    charge: float


class ParkingCoordinatorService:
    """Business logic orchestration for the parking allocation engine.

    Owns the tick clock and the revenue total. Every externally triggered
    mutator (entry, occupy, release, cancel, rollback) advances the tick
    first, then validates, then mutates; a failure leaves slots, requests,
    the backlog and the journal untouched.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[SlotRegistry] = None,
        ledger: Optional[RequestLedger] = None,
        pending_queue: Optional[PendingQueue] = None,
        rollback_log: Optional[RollbackLog] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._config = EngineConfig.from_settings(self._settings)
        validate_engine_config(self._config)

        self._registry = registry or SlotRegistry(self._config.slot_id_zone_stride)
        self._ledger = ledger or RequestLedger()
        self._pending = pending_queue or PendingQueue()
        self._rollback_log = rollback_log or RollbackLog()
        self._tick = 0
        self._total_revenue = 0.0

        for _ in range(self._config.initial_zone_count):
            zone_id = self._registry.add_zone()
            if self._config.initial_slots_per_zone > 0:
                self._registry.add_slots(zone_id, self._config.initial_slots_per_zone)

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def total_revenue(self) -> float:
        return self._total_revenue

    @property
    def rate_per_tick(self) -> float:
        return self._config.rate_per_tick

    @property
    def cross_zone_penalty(self) -> float:
        return self._config.cross_zone_penalty

    @property
    def registry(self) -> SlotRegistry:
        return self._registry

    @property
    def ledger(self) -> RequestLedger:
        return self._ledger

    @property
    def pending_queue(self) -> PendingQueue:
        return self._pending

    @property
    def rollback_log(self) -> RollbackLog:
        return self._rollback_log

    def _advance_tick(self) -> int:
        self._tick += 1
        return self._tick

    def add_zone(self) -> int:
        return self._registry.add_zone()

    def add_slots(self, zone_id: int, count: int) -> list[int]:
        # New capacity is not offered to the backlog until a freeing event.
        return self._registry.add_slots(zone_id, count)

    def get_request(self, request_id: int) -> ParkingRequest:
        return self._ledger.get(request_id)

    def _try_allocate(self, request: ParkingRequest, tick: int) -> bool:
        candidate = select_slot(
            request.requested_zone,
            self._registry.zones,
            self._config.cross_zone_penalty,
        )
        if candidate is None:
            return False

        request.transition(RequestState.ALLOCATED, tick)
        request.assign(candidate)
        self._registry.allocate(candidate.slot_id)
        self._rollback_log.record(
            RollbackAction(
                request_id=request.request_id,
                slot_id=candidate.slot_id,
                zone_id=candidate.zone_id,
                prior_state=RequestState.REQUESTED,
            )
        )
        logger.info(
            "Slot allocated | request_id=%s | slot_id=%s | zone_id=%s | penalty=%.2f",
            request.request_id,
            candidate.slot_id,
            candidate.zone_id,
            candidate.penalty,
        )
        return True

    def _replay_pending(self, tick: int) -> list[int]:
        def is_waiting(request_id: int) -> bool:
            request = self._ledger.find(request_id)
            return request is not None and request.state is RequestState.REQUESTED

        def try_allocate(request_id: int) -> bool:
            return self._try_allocate(self._ledger.get(request_id), tick)

        allocated = self._pending.replay(is_waiting, try_allocate)
        if allocated:
            logger.info(
                "Pending requests allocated | request_ids=%s | still_pending=%s",
                allocated,
                len(self._pending),
            )
        return allocated

    def entry(self, vehicle_id: str, requested_zone: int) -> EntryOutcome:
        """Create a request and place it now, or queue it when nothing is free."""
        tick = self._advance_tick()
        if not vehicle_id or not vehicle_id.strip():
            raise InvalidArgumentError("vehicle_id must be non-empty")
        if not self._registry.has_zone(requested_zone):
            raise NotFoundError(f"zone {requested_zone} does not exist")

        request = self._ledger.create(vehicle_id, requested_zone, tick)
        if not self._try_allocate(request, tick):
            self._pending.enqueue(request.request_id)
            logger.info(
                "No slot available; request queued | request_id=%s | vehicle_id=%s | "
                "pending=%s",
                request.request_id,
                vehicle_id,
                len(self._pending),
            )
        return EntryOutcome(
            request_id=request.request_id,
            penalty=request.penalty,
            slot_id=request.allocated_slot_id,
            zone_id=request.allocated_zone_id,
        )

    def occupy(self, request_id: int) -> ParkingRequest:
        tick = self._advance_tick()
        request = self._ledger.get(request_id)
        request.transition(RequestState.OCCUPIED, tick)
        self._registry.occupy(request.allocated_slot_id, tick)
        logger.info(
            "Slot occupied | request_id=%s | slot_id=%s | tick=%s",
            request_id,
            request.allocated_slot_id,
            tick,
        )
        return request

    def release(self, request_id: int) -> ReleaseOutcome:
        """Close an occupancy, bill it and hand the slot to the backlog."""
        tick = self._advance_tick()
        return self._release(self._ledger.get(request_id), tick)

    def _release(self, request: ParkingRequest, tick: int) -> ReleaseOutcome:
        request_id = request.request_id
        slot_id = request.allocated_slot_id
        request.transition(RequestState.RELEASED, tick)

        duration = request.duration_ticks or 0
        charge = duration * self._config.rate_per_tick + request.penalty
        request.charge = charge
        self._total_revenue += charge
        request.clear_allocation()
        self._registry.release(slot_id)
        logger.info(
            "Slot released | request_id=%s | slot_id=%s | duration_ticks=%s | charge=%.2f",
            request_id,
            slot_id,
            duration,
            charge,
        )
        self._replay_pending(tick)
        return ReleaseOutcome(
            request_id=request_id,
            slot_id=slot_id,
            duration_ticks=duration,
            charge=charge,
        )

    def exit_by_vehicle(self, vehicle_id: str) -> ReleaseOutcome:
        tick = self._advance_tick()
        request = self._ledger.latest_for_vehicle(vehicle_id, states=HOLDING_STATES)
        if request is None:
            raise NotFoundError(f"vehicle {vehicle_id!r} holds no slot")
        return self._release(request, tick)

    def cancel(self, request_id: int) -> ParkingRequest:
        tick = self._advance_tick()
        request = self._ledger.get(request_id)
        slot_id = request.allocated_slot_id
        request.transition(RequestState.CANCELLED, tick)
        self._pending.discard(request_id)
        logger.info("Request cancelled | request_id=%s | slot_id=%s", request_id, slot_id)

        if slot_id is not None:
            request.clear_allocation()
            self._registry.release(slot_id)
            self._replay_pending(tick)
        return request

    def rollback_last_k(self, k: int) -> list[int]:
        """Undo the ``k`` newest allocations; returns the ids reset to REQUESTED.

        Reset requests join the tail of the backlog and wait for the next
        slot-freeing event.
        """
        tick = self._advance_tick()
        undone = self._rollback_log.undo_last(
            k,
            registry=self._registry,
            ledger=self._ledger,
            tick=tick,
        )
        logger.info(
            "Rollback completed | requested=%s | reset=%s | journal_depth=%s",
            k,
            len(undone),
            len(self._rollback_log),
        )
        if undone:
            self._replay_pending(tick)
            # Enqueued after the replay: reset requests wait for the next trigger.
            for action in reversed(undone):
                self._pending.enqueue(action.request_id)
        return [action.request_id for action in undone]

    def search(self, vehicle_id: str) -> Optional[int]:
        return self._ledger.search(vehicle_id)
