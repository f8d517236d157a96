"""Undo journal for slot allocation decisions."""

from __future__ import annotations

from backend.domain.errors import InsufficientHistoryError, InvalidArgumentError
from backend.domain.models import TERMINAL_STATES, RollbackAction
from backend.repository.request_ledger import RequestLedger
from backend.repository.slot_registry import SlotRegistry
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class RollbackLog:
    """LIFO journal with one entry per successful allocation."""

    def __init__(self) -> None:
        self._actions: list[RollbackAction] = []

    def __len__(self) -> int:
        return len(self._actions)

    def record(self, action: RollbackAction) -> None:
        self._actions.append(action)
        logger.debug(
            "Allocation journaled | request_id=%s | slot_id=%s | depth=%s",
            action.request_id,
            action.slot_id,
            len(self._actions),
        )

    def peek(self, k: int) -> list[RollbackAction]:
        """Return up to ``k`` newest entries, newest first, without consuming them."""
        if k <= 0:
            return []
        return list(reversed(self._actions[-k:]))

    def undo_last(
        self,
        k: int,
        *,
        registry: SlotRegistry,
        ledger: RequestLedger,
        tick: int,
    ) -> list[RollbackAction]:
        """Revert the ``k`` newest allocations, newest first.

        Both preconditions are checked before anything is popped. Each
        reverted request is overwritten with a fresh REQUESTED copy, which
        drops its penalty, ticks and slot. Entries whose request has since
        reached RELEASED or CANCELLED are consumed without touching it.
        """
        if k <= 0:
            raise InvalidArgumentError("rollback count must be > 0")
        if k > len(self._actions):
            raise InsufficientHistoryError(
                f"cannot roll back {k} allocations; journal holds {len(self._actions)}"
            )

        undone: list[RollbackAction] = []
        for _ in range(k):
            action = self._actions.pop()
            request = ledger.find(action.request_id)
            if request is None:
                logger.warning(
                    "Rollback skipped missing request | request_id=%s", action.request_id
                )
                continue
            if request.state in TERMINAL_STATES:
                logger.info(
                    "Rollback skipped terminal request | request_id=%s | state=%s",
                    request.request_id,
                    request.state.value,
                )
                continue

            if request.holds_slot and request.allocated_slot_id == action.slot_id:
                registry.release(action.slot_id)
            ledger.reset(action.request_id, tick)
            undone.append(action)
            logger.info(
                "Allocation rolled back | request_id=%s | slot_id=%s | zone_id=%s",
                action.request_id,
                action.slot_id,
                action.zone_id,
            )
        return undone
