"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    rate_per_tick: float
    cross_zone_penalty: float
    slot_id_zone_stride: int
    initial_zone_count: int
    initial_slots_per_zone: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings once per process; call ``get_settings.cache_clear()`` to reload."""
    return Settings(
        app_name=os.getenv("APP_NAME", "Smart Parking Allocation Engine"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        rate_per_tick=_env_float("PARKING_RATE_PER_TICK", 1.0),
        cross_zone_penalty=_env_float("PARKING_CROSS_ZONE_PENALTY", 5.0),
        slot_id_zone_stride=_env_int("PARKING_SLOT_ID_ZONE_STRIDE", 1000),
        initial_zone_count=_env_int("PARKING_INITIAL_ZONES", 0),
        initial_slots_per_zone=_env_int("PARKING_INITIAL_SLOTS_PER_ZONE", 0),
    )
