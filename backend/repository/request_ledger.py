"""Append-only history of every parking request."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from backend.domain.errors import NotFoundError
from backend.domain.models import HOLDING_STATES, ParkingRequest, RequestState


class RequestLedger:
    """Single source of truth for request lifecycle state.

    Request ids are dense and start at 1, so the request with id ``n`` always
    lives at position ``n - 1``. Entries are never deleted; rollback
    overwrites them in place.
    """

    def __init__(self) -> None:
        self._requests: list[ParkingRequest] = []

    def __len__(self) -> int:
        return len(self._requests)

    def __iter__(self) -> Iterator[ParkingRequest]:
        return iter(self._requests)

    def create(self, vehicle_id: str, requested_zone: int, tick: int) -> ParkingRequest:
        request = ParkingRequest(
            request_id=len(self._requests) + 1,
            vehicle_id=vehicle_id,
            requested_zone=requested_zone,
            request_tick=tick,
        )
        self._requests.append(request)
        return request

    def find(self, request_id: int) -> Optional[ParkingRequest]:
        if 1 <= request_id <= len(self._requests):
            return self._requests[request_id - 1]
        return None

    def get(self, request_id: int) -> ParkingRequest:
        request = self.find(request_id)
        if request is None:
            raise NotFoundError(f"request {request_id} does not exist")
        return request

    def reset(self, request_id: int, tick: int) -> ParkingRequest:
        """Replace a request with a fresh REQUESTED copy of its identity."""
        previous = self.get(request_id)
        fresh = ParkingRequest(
            request_id=previous.request_id,
            vehicle_id=previous.vehicle_id,
            requested_zone=previous.requested_zone,
            request_tick=tick,
        )
        self._requests[request_id - 1] = fresh
        return fresh

    def for_vehicle(self, vehicle_id: str) -> list[ParkingRequest]:
        return [request for request in self._requests if request.vehicle_id == vehicle_id]

    def latest_for_vehicle(
        self,
        vehicle_id: str,
        states: Optional[Iterable[RequestState]] = None,
    ) -> Optional[ParkingRequest]:
        wanted = frozenset(states) if states is not None else None
        for request in reversed(self._requests):
            if request.vehicle_id != vehicle_id:
                continue
            if wanted is None or request.state in wanted:
                return request
        return None

    def search(self, vehicle_id: str) -> Optional[int]:
        """Newest open request for the vehicle, else its newest request of any state."""
        request = self.latest_for_vehicle(
            vehicle_id,
            states=(RequestState.REQUESTED, *HOLDING_STATES),
        )
        if request is None:
            request = self.latest_for_vehicle(vehicle_id)
        return request.request_id if request is not None else None

    def count_in_state(self, state: RequestState) -> int:
        return sum(1 for request in self._requests if request.state is state)
