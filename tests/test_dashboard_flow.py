from __future__ import annotations

from dataclasses import replace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from backend.controllers.dashboard_controller import router as dashboard_router
from backend.controllers.parking_controller import router as parking_router
from backend.utils.config import get_settings


def _build_test_settings(**overrides):
    get_settings.cache_clear()
    base = get_settings()
    defaults = {
        "rate_per_tick": 1.5,
        "cross_zone_penalty": 5.0,
        "slot_id_zone_stride": 1000,
        "initial_zone_count": 0,
        "initial_slots_per_zone": 0,
    }
    defaults.update(overrides)
    return replace(base, **defaults)


@pytest.fixture()
def client():
    app = create_app(_build_test_settings())
    with TestClient(app) as test_client:
        yield test_client


def _setup_single_slot(client: TestClient) -> None:
    assert client.post("/zones").json() == {"zone_id": 0}
    response = client.post("/zones/0/slots", json={"count": 1})
    assert response.status_code == 201
    assert response.json() == {"zone_id": 0, "slot_ids": [0]}


def test_entry_occupy_exit_flow_updates_stats(client):
    _setup_single_slot(client)

    first = client.post("/requests", json={"vehicle_id": "V1", "requested_zone": 0})
    assert first.status_code == 201
    assert first.json()["queued"] is False
    assert first.json()["slot_id"] == 0

    occupied = client.post("/requests/1/occupy")
    assert occupied.status_code == 200
    assert occupied.json()["state"] == "OCCUPIED"

    second = client.post("/requests", json={"vehicle_id": "V2", "requested_zone": 0})
    assert second.json()["queued"] is True

    exited = client.post("/vehicles/V1/exit")
    assert exited.status_code == 200
    body = exited.json()
    assert body["request_id"] == 1
    assert body["charge"] == pytest.approx(3.0)
    assert body["total_revenue"] == pytest.approx(3.0)

    stats = client.get("/stats").json()
    assert stats["completed_count"] == 1
    assert stats["pending_queue_length"] == 0
    assert stats["rollback_depth"] == 2
    assert stats["tick"] == 4

    assert client.get("/vehicles/V2").json() == {"vehicle_id": "V2", "request_id": 2}
    assert client.get("/requests/2").json()["state"] == "ALLOCATED"


def test_dashboard_lists_zones_and_roster(client):
    _setup_single_slot(client)
    client.post("/requests", json={"vehicle_id": "V1", "requested_zone": 0})

    body = client.get("/dashboard").json()

    assert body["zones"][0]["free_count"] == 0
    assert body["zones"][0]["allocated_count"] == 1
    assert body["requests"][0]["vehicle_id"] == "V1"
    assert body["requests"][0]["state"] == "ALLOCATED"
    assert body["summary"]["total_revenue"] == 0.0
    assert client.get("/zones").json()[0]["total_slots"] == 1
    assert len(client.get("/requests").json()) == 1


def test_rollback_endpoint_resets_latest_allocation(client):
    _setup_single_slot(client)
    client.post("/requests", json={"vehicle_id": "V1", "requested_zone": 0})

    response = client.post("/rollback", json={"k": 1})

    assert response.status_code == 200
    assert response.json() == {"reset_request_ids": [1]}
    assert client.get("/requests/1").json()["state"] == "REQUESTED"
    assert client.get("/zones").json()[0]["free_slot_ids"] == [0]


@pytest.mark.parametrize(
    ("method", "path", "payload", "expected_status"),
    [
        ("post", "/requests/99/occupy", None, 404),
        ("post", "/requests/1/release", None, 409),
        ("post", "/rollback", {"k": 5}, 409),
        ("post", "/rollback", {"k": 0}, 422),
        ("post", "/zones/7/slots", {"count": 1}, 404),
        ("post", "/zones/0/slots", {"count": 0}, 422),
        ("post", "/zones/0/slots", {"count": 1000}, 400),
        ("post", "/requests", {"vehicle_id": "V9", "requested_zone": 5}, 404),
        ("post", "/requests", {"vehicle_id": "  ", "requested_zone": 0}, 422),
        ("post", "/vehicles/GHOST/exit", None, 404),
        ("get", "/vehicles/GHOST", None, 404),
    ],
)
def test_engine_errors_map_to_http_status(client, method, path, payload, expected_status):
    _setup_single_slot(client)
    client.post("/requests", json={"vehicle_id": "V1", "requested_zone": 0})

    if payload is None:
        response = getattr(client, method)(path)
    else:
        response = getattr(client, method)(path, json=payload)

    assert response.status_code == expected_status


def test_missing_parking_service_returns_503():
    app = FastAPI()
    app.include_router(parking_router)
    app.include_router(dashboard_router)

    client = TestClient(app)

    assert client.post("/zones").status_code == 503
    assert client.get("/stats").status_code == 503
