import base64
import json

import pytest
import respx
from fastapi.testclient import TestClient

from salon_dashboard.api import app

BASE = "http://dashboard.test"
SUPABASE = "https://project.supabase.test"


def auth_cookie(token: str = "jwt") -> dict:
    raw = json.dumps({"access_token": token}).encode()
    return {"sb-ref-auth-token": "base64-" + base64.urlsafe_b64encode(raw).decode().rstrip("=")}


@pytest.fixture
def client():
    return TestClient(app, cookies=auth_cookie())


def test_health():
    assert TestClient(app).get("/health").json() == {"status": "ok"}


def test_requires_session():
    resp = TestClient(app).get("/dashboard/appointments")
    assert resp.status_code == 401


def test_upcoming_appointments(client):
    with respx.mock(base_url=BASE) as m:
        m.get("/api/appointments").respond(
            200,
            json=[None, {"id": "a1", "date": "2024-05-01", "time": "2024-05-01T14:30:00Z", "serviceName": "Haircut"}],
        )
        resp = client.get("/dashboard/appointments")

    assert resp.status_code == 200
    assert resp.json() == [
        {
            "id": "a1",
            "display_date": "1 Mayıs 2024",
            "display_time": "17:30",
            "staff_name": "Belirtilmemiş",
            "service_name": "Haircut",
            "staff_label": "Berber: Belirtilmemiş",
        }
    ]


def test_cancel_success(client):
    with respx.mock(base_url=BASE) as m:
        m.delete("/api/appointments/a1").respond(
            200, json={}, headers={"set-cookie": "sb-ref-auth-token=refreshed; Path=/"}
        )
        resp = client.delete("/dashboard/appointments/a1")

    assert resp.status_code == 200
    assert resp.json() == {"message": "cancelled", "appointment_id": "a1"}
    assert "sb-ref-auth-token=refreshed" in resp.headers["set-cookie"]


def test_cancel_failure_passes_error_through(client):
    with respx.mock(base_url=BASE) as m:
        m.delete("/api/appointments/a1").respond(400, json={"error": "Already passed"})
        resp = client.delete("/dashboard/appointments/a1")

    assert resp.status_code == 400
    assert resp.json() == {"error": "Already passed"}


def test_current_user(client):
    with respx.mock(base_url=SUPABASE) as m:
        m.get("/auth/v1/user").respond(200, json={"id": "u1"})
        resp = client.get("/dashboard/me")
    assert resp.json() == {"id": "u1"}


def test_cancel_failure_keeps_refreshed_cookie(client):
    with respx.mock(base_url=BASE) as m:
        m.delete("/api/appointments/a1").respond(
            409, json={"error": "Already cancelled"}, headers={"set-cookie": "sb-ref-auth-token=rotated; Path=/"}
        )
        resp = client.delete("/dashboard/appointments/a1")

    assert resp.status_code == 409
    assert resp.json() == {"error": "Already cancelled"}
    assert "sb-ref-auth-token=rotated" in resp.headers["set-cookie"]
