from __future__ import annotations

from dataclasses import replace

import pytest

from backend.domain.errors import InsufficientHistoryError, InvalidArgumentError
from backend.domain.models import RequestState, RollbackAction, SlotStatus
from backend.services.parking_service import ParkingCoordinatorService
from backend.services.rollback_service import RollbackLog
from backend.utils.config import get_settings


def _build_service(*slot_counts: int) -> ParkingCoordinatorService:
    settings = replace(
        get_settings(),
        rate_per_tick=1.0,
        cross_zone_penalty=5.0,
        slot_id_zone_stride=1000,
        initial_zone_count=0,
        initial_slots_per_zone=0,
    )
    service = ParkingCoordinatorService(settings=settings)
    for count in slot_counts:
        zone_id = service.add_zone()
        if count:
            service.add_slots(zone_id, count)
    return service


def test_peek_returns_newest_first_without_consuming():
    log = RollbackLog()
    for request_id in (1, 2, 3):
        log.record(RollbackAction(request_id, request_id, 0, RequestState.REQUESTED))

    assert [action.request_id for action in log.peek(2)] == [3, 2]
    assert log.peek(0) == []
    assert len(log) == 3


def test_undo_last_resets_newest_allocations():
    service = _build_service(2, 1)
    first = service.entry("V1", 0)
    second = service.entry("V2", 0)
    third = service.entry("V3", 0)
    assert third.penalty == 5.0

    reset_ids = service.rollback_last_k(2)

    assert reset_ids == [third.request_id, second.request_id]
    for outcome in (second, third):
        request = service.get_request(outcome.request_id)
        assert request.state is RequestState.REQUESTED
        assert request.allocated_slot_id is None
        assert request.allocated_zone_id is None
        assert request.penalty == 0.0
        assert request.start_tick is None
        assert request.request_tick == service.tick
        assert service.registry.get_slot(outcome.slot_id).status is SlotStatus.FREE

    untouched = service.get_request(first.request_id)
    assert untouched.state is RequestState.ALLOCATED
    assert untouched.allocated_slot_id == 0
    assert len(service.rollback_log) == 1


def test_rollback_beyond_journal_fails_without_mutation():
    service = _build_service(2)
    first = service.entry("V1", 0)

    with pytest.raises(InsufficientHistoryError):
        service.rollback_last_k(2)

    request = service.get_request(first.request_id)
    assert request.state is RequestState.ALLOCATED
    assert service.registry.get_slot(0).status is SlotStatus.ALLOCATED
    assert len(service.rollback_log) == 1


@pytest.mark.parametrize("k", [0, -2])
def test_non_positive_rollback_count_is_rejected(k):
    service = _build_service(1)
    service.entry("V1", 0)

    with pytest.raises(InvalidArgumentError):
        service.rollback_last_k(k)
    assert len(service.rollback_log) == 1


def test_rollback_of_occupied_request_frees_slot():
    service = _build_service(1)
    outcome = service.entry("V1", 0)
    service.occupy(outcome.request_id)

    service.rollback_last_k(1)

    assert service.get_request(outcome.request_id).state is RequestState.REQUESTED
    assert service.registry.get_slot(0).status is SlotStatus.FREE
    assert service.registry.get_slot(0).occupied_since_tick is None


def test_rollback_leaves_released_request_terminal():
    service = _build_service(1)
    outcome = service.entry("V1", 0)
    service.occupy(outcome.request_id)
    service.release(outcome.request_id)
    revenue = service.total_revenue

    assert service.rollback_last_k(1) == []

    request = service.get_request(outcome.request_id)
    assert request.state is RequestState.RELEASED
    assert service.total_revenue == revenue
    assert len(service.rollback_log) == 0


def test_rollback_consumes_cancelled_entries_without_reviving_them():
    service = _build_service(1)
    first = service.entry("V1", 0)
    service.cancel(first.request_id)
    second = service.entry("V2", 0)
    assert second.slot_id == first.slot_id

    assert service.rollback_last_k(2) == [second.request_id]

    assert service.get_request(first.request_id).state is RequestState.CANCELLED
    assert service.registry.get_slot(0).status is SlotStatus.FREE


def test_rollback_replays_pending_backlog():
    service = _build_service(1)
    holder = service.entry("V1", 0)
    waiting = service.entry("V2", 0)
    assert waiting.queued

    assert service.rollback_last_k(1) == [holder.request_id]

    assert service.get_request(waiting.request_id).state is RequestState.ALLOCATED
    assert service.get_request(holder.request_id).state is RequestState.REQUESTED
    assert service.pending_queue.snapshot() == [holder.request_id]
    assert len(service.rollback_log) == 1


def test_rolled_back_request_is_allocated_on_next_release():
    service = _build_service(1, 1)
    first = service.entry("V1", 0)
    second = service.entry("V2", 0)
    assert second.zone_id == 1

    assert service.rollback_last_k(1) == [second.request_id]
    assert service.get_request(second.request_id).state is RequestState.REQUESTED
    assert service.pending_queue.snapshot() == [second.request_id]

    service.occupy(first.request_id)
    service.release(first.request_id)

    request = service.get_request(second.request_id)
    assert request.state is RequestState.ALLOCATED
    assert request.allocated_slot_id == 0
    assert request.penalty == 0.0
    assert len(service.pending_queue) == 0


def test_rolled_back_requests_queue_oldest_first():
    service = _build_service(2)
    first = service.entry("V1", 0)
    second = service.entry("V2", 0)

    service.rollback_last_k(2)

    assert service.pending_queue.snapshot() == [first.request_id, second.request_id]
