"""Domain-level validation rules for the allocation engine."""

from __future__ import annotations

from dataclasses import dataclass

from backend.utils.config import Settings


@dataclass(frozen=True)
class EngineConfig:
    rate_per_tick: float
    cross_zone_penalty: float
    slot_id_zone_stride: int
    initial_zone_count: int
    initial_slots_per_zone: int

    @classmethod
    def from_settings(cls, settings: Settings) -> "EngineConfig":
        return cls(
            rate_per_tick=settings.rate_per_tick,
            cross_zone_penalty=settings.cross_zone_penalty,
            slot_id_zone_stride=settings.slot_id_zone_stride,
            initial_zone_count=settings.initial_zone_count,
            initial_slots_per_zone=settings.initial_slots_per_zone,
        )


def validate_engine_config(config: EngineConfig) -> None:
    if config.rate_per_tick < 0.0:
        raise ValueError("rate_per_tick must be >= 0")
    if config.cross_zone_penalty < 0.0:
        raise ValueError("cross_zone_penalty must be >= 0")
    if config.slot_id_zone_stride <= 0:
        raise ValueError("slot_id_zone_stride must be > 0")
    if config.initial_zone_count < 0:
        raise ValueError("initial_zone_count must be >= 0")
    if config.initial_slots_per_zone < 0:
        raise ValueError("initial_slots_per_zone must be >= 0")
    if config.initial_slots_per_zone > config.slot_id_zone_stride:
        raise ValueError("initial_slots_per_zone must not exceed slot_id_zone_stride")
