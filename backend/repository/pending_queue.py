"""FIFO backlog of requests waiting for a free slot."""

from __future__ import annotations

from collections import deque
from typing import Callable


class PendingQueue:
    def __init__(self) -> None:
        self._request_ids: deque[int] = deque()

    def __len__(self) -> int:
        return len(self._request_ids)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._request_ids

    def enqueue(self, request_id: int) -> None:
        self._request_ids.append(request_id)

    def discard(self, request_id: int) -> bool:
        try:
            self._request_ids.remove(request_id)
        except ValueError:
            return False
        return True

    def snapshot(self) -> list[int]:
        return list(self._request_ids)

    def replay(
        self,
        is_waiting: Callable[[int], bool],
        try_allocate: Callable[[int], bool],
    ) -> list[int]:
        """Offer freed capacity to queued requests in arrival order.

        At most one pass over the current backlog is made. Ids that are no
        longer waiting are dropped. The first id that cannot be placed goes
        back to the head of the queue and the pass stops there.
        """
        allocated: list[int] = []
        for _ in range(len(self._request_ids)):
            if not self._request_ids:
                break
            request_id = self._request_ids.popleft()
            if not is_waiting(request_id):
                continue
            if not try_allocate(request_id):
                self._request_ids.appendleft(request_id)
                break
            allocated.append(request_id)
        return allocated
