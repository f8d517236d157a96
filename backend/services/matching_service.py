"""Slot selection: cost model and deterministic tie-breaking."""

from __future__ import annotations

from typing import Iterable, Optional

from backend.domain.models import SlotCandidate, Zone


CROSS_ZONE_PENALTY = 5.0


def collect_candidates(
    requested_zone: int,
    zones: Iterable[Zone],
    cross_zone_penalty: float = CROSS_ZONE_PENALTY,
) -> list[SlotCandidate]:
    """Tag every free slot with the surcharge it would cost this request."""
    candidates: list[SlotCandidate] = []
    for zone in zones:
        penalty = 0.0 if zone.zone_id == requested_zone else float(cross_zone_penalty)
        for slot in zone.slots:
            if slot.is_free:
                candidates.append(
                    SlotCandidate(slot_id=slot.slot_id, zone_id=zone.zone_id, penalty=penalty)
                )
    return candidates


def candidate_cost(candidate: SlotCandidate, requested_zone: int) -> tuple[bool, float, int]:
    # Zone match outranks the surcharge, which may be configured as zero.
    return (candidate.zone_id != requested_zone, candidate.penalty, candidate.slot_id)


def select_slot(
    requested_zone: int,
    zones: Iterable[Zone],
    cross_zone_penalty: float = CROSS_ZONE_PENALTY,
) -> Optional[SlotCandidate]:
    """Return the cheapest free slot, or ``None`` when every slot is taken.

    Same-zone slots always beat cross-zone ones; among equal penalties the
    lowest slot id wins. Nothing is mutated: the caller marks the slot.
    """
    candidates = collect_candidates(requested_zone, zones, cross_zone_penalty)
    if not candidates:
        return None
    return min(candidates, key=lambda candidate: candidate_cost(candidate, requested_zone))
