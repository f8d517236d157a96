"""Recoverable failures raised by the parking engine."""

from __future__ import annotations


class ParkingEngineError(Exception):
    """Base exception for engine operations rejected before any mutation."""


class NotFoundError(ParkingEngineError):
    """Raised when a request, zone, slot or vehicle id is unknown."""


class InvalidTransitionError(ParkingEngineError):
    """Raised when the request lifecycle rejects the requested edge."""

    def __init__(self, request_id: int, current: str, target: str) -> None:
        super().__init__(
            f"request {request_id} cannot move from {current} to {target}"
        )
        self.request_id = request_id
        self.current = current
        self.target = target


class InsufficientHistoryError(ParkingEngineError):
    """Raised when more rollbacks are requested than the journal holds."""


class InvalidArgumentError(ParkingEngineError):
    """Raised for non-positive counts and blank identifiers."""
