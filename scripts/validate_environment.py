#!/usr/bin/env python3
"""Validate local parking engine environment readiness."""

from __future__ import annotations

import importlib
import sys
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.domain.models import RequestState
from backend.services.dashboard_service import DashboardStatisticsService
from backend.services.parking_service import ParkingCoordinatorService
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1 — Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2 — Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("sortedcontainers", "sortedcontainers"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    from importlib.metadata import PackageNotFoundError, version

    import_errors: list[str] = []
    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except (ImportError, PackageNotFoundError) as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3 — Engine smoke scenario: one zone, one slot, three ticks of occupancy
    settings = replace(
        get_settings(),
        rate_per_tick=2.0,
        initial_zone_count=0,
        initial_slots_per_zone=0,
    )
    try:
        service = ParkingCoordinatorService(settings=settings)
        zone_id = service.add_zone()
        service.add_slots(zone_id, 1)
        outcome = service.entry("SMOKE-1", zone_id)
        service.occupy(outcome.request_id)
        service.entry("SMOKE-2", zone_id)
        service.entry("SMOKE-3", zone_id)
        released = service.release(outcome.request_id)
        if released.charge != 6.0:
            raise RuntimeError(f"expected charge 6.0, got {released.charge}")
        if service.get_request(2).state is not RequestState.ALLOCATED:
            raise RuntimeError("queued request was not allocated after release")
        ok, line = _print_result(
            "Engine smoke scenario",
            True,
            f": charge={released.charge:.2f}",
        )
    except Exception as exc:
        ok, line = _print_result("Engine smoke scenario", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4 — Dashboard aggregation
    if ok:
        try:
            summary = DashboardStatisticsService(service).summary()
            if summary["completed_count"] != 1 or summary["pending_queue_length"] != 1:
                raise RuntimeError(f"unexpected summary {summary}")
            ok, line = _print_result("Dashboard aggregation", True)
        except Exception as exc:
            ok, line = _print_result("Dashboard aggregation", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Parking Engine Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
