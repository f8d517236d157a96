"""In-memory store of zones and their parking slots."""

from __future__ import annotations

from typing import Optional, Sequence

from sortedcontainers import SortedDict

from backend.domain.errors import InvalidArgumentError, NotFoundError
from backend.domain.models import Slot, SlotStatus, Zone
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class SlotRegistry:
    """Owns every slot, grouped by zone, with an ordered index keyed by slot id.

    Zones own their slot lists; the index only references those same objects,
    and slots are never removed, so index entries cannot outlive their slot.
    Status mutators assume the caller already checked the request lifecycle.
    """

    def __init__(self, slot_id_zone_stride: int = 1000) -> None:
        if slot_id_zone_stride <= 0:
            raise InvalidArgumentError("slot_id_zone_stride must be > 0")
        self._stride = slot_id_zone_stride
        self._zones: list[Zone] = []
        self._index: SortedDict = SortedDict()

    @property
    def zones(self) -> Sequence[Zone]:
        return tuple(self._zones)

    @property
    def slot_id_zone_stride(self) -> int:
        return self._stride

    def __len__(self) -> int:
        return len(self._index)

    def add_zone(self) -> int:
        zone_id = len(self._zones)
        self._zones.append(Zone(zone_id=zone_id))
        logger.info("Zone added | zone_id=%s", zone_id)
        return zone_id

    def has_zone(self, zone_id: int) -> bool:
        return 0 <= zone_id < len(self._zones)

    def get_zone(self, zone_id: int) -> Zone:
        if not self.has_zone(zone_id):
            raise NotFoundError(f"zone {zone_id} does not exist")
        return self._zones[zone_id]

    def add_slots(self, zone_id: int, count: int) -> list[int]:
        if count <= 0:
            raise InvalidArgumentError("slot count must be > 0")
        zone = self.get_zone(zone_id)
        start = len(zone.slots)
        if start + count > self._stride:
            raise InvalidArgumentError(
                f"zone {zone_id} cannot hold more than {self._stride} slots"
            )

        base = zone_id * self._stride
        created: list[int] = []
        for position in range(start, start + count):
            slot = Slot(slot_id=base + position, zone_id=zone_id)
            zone.slots.append(slot)
            self._index[slot.slot_id] = slot
            created.append(slot.slot_id)
        logger.info(
            "Slots added | zone_id=%s | count=%s | first_slot_id=%s",
            zone_id,
            count,
            created[0],
        )
        return created

    def find_by_id(self, slot_id: int) -> Optional[Slot]:
        return self._index.get(slot_id)

    def get_slot(self, slot_id: int) -> Slot:
        slot = self.find_by_id(slot_id)
        if slot is None:
            raise NotFoundError(f"slot {slot_id} does not exist")
        return slot

    def slot_ids_in_zone(self, zone_id: int) -> list[int]:
        """Range scan over the ordered index for one zone's id block."""
        self.get_zone(zone_id)
        low = zone_id * self._stride
        return list(self._index.irange(low, low + self._stride - 1))

    def free_count_of(self, zone_id: int) -> int:
        return self.get_zone(zone_id).free_count()

    def free_slot_ids_of(self, zone_id: int) -> list[int]:
        return self.get_zone(zone_id).free_slot_ids()

    def total_slots_of(self, zone_id: int) -> int:
        return len(self.get_zone(zone_id).slots)

    def count_in_status(self, zone_id: int, status: SlotStatus) -> int:
        return sum(1 for slot in self.get_zone(zone_id).slots if slot.status is status)

    def allocate(self, slot_id: int) -> None:
        slot = self.get_slot(slot_id)
        slot.status = SlotStatus.ALLOCATED
        slot.occupied_since_tick = None

    def occupy(self, slot_id: int, tick: int) -> None:
        slot = self.get_slot(slot_id)
        slot.status = SlotStatus.OCCUPIED
        slot.occupied_since_tick = tick

    def release(self, slot_id: int) -> None:
        slot = self.get_slot(slot_id)
        slot.status = SlotStatus.FREE
        slot.occupied_since_tick = None
