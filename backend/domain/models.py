"""Domain models for parking slots, zones and vehicle requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from backend.domain.errors import InvalidTransitionError


class SlotStatus(str, Enum):
    FREE = "FREE"
    ALLOCATED = "ALLOCATED"
    OCCUPIED = "OCCUPIED"


class RequestState(str, Enum):
    REQUESTED = "REQUESTED"
    ALLOCATED = "ALLOCATED"
    OCCUPIED = "OCCUPIED"
    RELEASED = "RELEASED"
    CANCELLED = "CANCELLED"


ALLOWED_TRANSITIONS: dict[RequestState, frozenset[RequestState]] = {
    RequestState.REQUESTED: frozenset({RequestState.ALLOCATED, RequestState.CANCELLED}),
    RequestState.ALLOCATED: frozenset({RequestState.OCCUPIED, RequestState.CANCELLED}),
    RequestState.OCCUPIED: frozenset({RequestState.RELEASED}),
    RequestState.RELEASED: frozenset(),
    RequestState.CANCELLED: frozenset(),
}

OPEN_STATES = frozenset(
    {RequestState.REQUESTED, RequestState.ALLOCATED, RequestState.OCCUPIED}
)
HOLDING_STATES = frozenset({RequestState.ALLOCATED, RequestState.OCCUPIED})
TERMINAL_STATES = frozenset({RequestState.RELEASED, RequestState.CANCELLED})


@dataclass
class Slot:
    slot_id: int
    zone_id: int
    status: SlotStatus = SlotStatus.FREE
    occupied_since_tick: Optional[int] = None

    @property
    def is_free(self) -> bool:
        return self.status is SlotStatus.FREE


@dataclass
class Zone:
    zone_id: int
    slots: list[Slot] = field(default_factory=list)

    def free_count(self) -> int:
        return sum(1 for slot in self.slots if slot.is_free)

    def free_slot_ids(self) -> list[int]:
        return [slot.slot_id for slot in self.slots if slot.is_free]


@dataclass(frozen=True)
class SlotCandidate:
    slot_id: int
    zone_id: int
    penalty: float


@dataclass(frozen=True)
class RollbackAction:
    """Journal entry written when a request is allocated a slot."""

    request_id: int
    slot_id: int
    zone_id: int
    prior_state: RequestState


@dataclass
class ParkingRequest:
    """One vehicle's demand for a slot, tracked from entry to a terminal state."""

    request_id: int
    vehicle_id: str
    requested_zone: int
    request_tick: int
    state: RequestState = RequestState.REQUESTED
    allocated_slot_id: Optional[int] = None
    allocated_zone_id: Optional[int] = None
    start_tick: Optional[int] = None
    end_tick: Optional[int] = None
    penalty: float = 0.0
    charge: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.state in OPEN_STATES

    @property
    def holds_slot(self) -> bool:
        return self.state in HOLDING_STATES

    @property
    def duration_ticks(self) -> Optional[int]:
        if self.start_tick is None or self.end_tick is None:
            return None
        return self.end_tick - self.start_tick

    def can_transition(self, target: RequestState) -> bool:
        return target in ALLOWED_TRANSITIONS[self.state]

    def transition(self, target: RequestState, tick: int) -> None:
        if not self.can_transition(target):
            raise InvalidTransitionError(self.request_id, self.state.value, target.value)
        self.state = target
        if target in (RequestState.ALLOCATED, RequestState.OCCUPIED):
            # occupancy start supersedes allocation start as the billing origin
            self.start_tick = tick
        elif target is RequestState.RELEASED:
            self.end_tick = tick

    def assign(self, candidate: SlotCandidate) -> None:
        self.allocated_slot_id = candidate.slot_id
        self.allocated_zone_id = candidate.zone_id
        self.penalty = candidate.penalty

    def clear_allocation(self) -> None:
        self.allocated_slot_id = None
        self.allocated_zone_id = None
