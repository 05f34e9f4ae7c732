"""
Tests for the HTTP surface: webhook, uploads, listings and health.
"""

from __future__ import annotations

import io
import tempfile

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from conftest import RecordingPlatform
from reminderbot.core.config import Settings
from reminderbot.domain.entities.conversation_state import Stage
from reminderbot.main import app
from reminderbot.wiring.dependencies import build_container, get_container


def _xlsx(rows: list[dict]) -> bytes:
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


@pytest.fixture
def container():
    with tempfile.TemporaryDirectory() as tmpdir:
        cfg = Settings(
            _env_file=None,
            BUSINESS_TIMEZONE="America/New_York",
            DATA_DIR=tmpdir,
            ENV="dev",
            AUTO_REPLY_ENABLED=True,
        )
        built = build_container(cfg, platform=RecordingPlatform())
        app.dependency_overrides[get_container] = lambda: built
        yield built
        app.dependency_overrides.clear()


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(app)


def test_health_reports_connection(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["connected"] is True


def test_upload_appointments_and_list(client):
    content = _xlsx(
        [
            {"name": "Ann", "phone": 15551230001, "appointmentTime": "2030-03-04 14:00"},
            {"name": "Bob", "phone": "15551230002", "appointmentTime": "2030-03-05 10:00"},
        ]
    )

    resp = client.post("/api/v1/appointments/upload", files={"file": ("appts.xlsx", content)})

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert body["new"] == 2
    assert body["persisted"] is True

    listing = client.get("/api/v1/appointments").json()
    assert [a["phone"] for a in listing["appointments"]] == ["15551230001", "15551230002"]


def test_upload_with_wrong_columns_is_400(client):
    content = _xlsx([{"who": "Ann", "number": "1", "when": "2030-03-04 14:00"}])

    resp = client.post("/api/v1/appointments/upload", files={"file": ("bad.xlsx", content)})

    assert resp.status_code == 400
    assert "name, phone, appointmentTime" in resp.json()["detail"]


def test_clear_appointments(client, container):
    client.post(
        "/api/v1/appointments/upload",
        files={"file": ("a.xlsx", _xlsx([{"name": "Ann", "phone": "111", "appointmentTime": "2030-03-04 14:00"}]))},
    )

    resp = client.post("/api/v1/appointments/clear")

    assert resp.status_code == 200
    assert container.appointments.all() == []


def test_status_upload_and_list(client):
    content = _xlsx(
        [
            {"name": "Ann", "phone": "111", "status": "No"},
            {"name": "Bob", "phone": "222", "status": "yes"},
        ]
    )

    resp = client.post("/api/v1/statuses/upload", files={"file": ("s.xlsx", content)})

    assert resp.status_code == 200
    assert resp.json()["added"] == 2
    listing = client.get("/api/v1/statuses").json()
    assert listing["no_count"] == 1
    assert listing["yes_count"] == 1

    assert client.post("/api/v1/statuses/clear").json()["persisted"] is True
    assert client.get("/api/v1/statuses").json()["count"] == 0


def test_webhook_advances_dialogue(client, container):
    client.post(
        "/api/v1/appointments/upload",
        files={"file": ("a.xlsx", _xlsx([{"name": "Ann", "phone": "111", "appointmentTime": "2030-03-04 14:00"}]))},
    )
    payload = {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "changes": [
                    {
                        "value": {
                            "messages": [
                                {"from": "111", "id": "wamid.1", "timestamp": "1", "type": "text", "text": {"body": "cancel"}}
                            ]
                        }
                    }
                ]
            }
        ],
    }

    resp = client.post("/webhooks/whatsapp", json=payload)

    assert resp.status_code == 200
    state = container.conversations.get_state("111")
    assert state is not None
    assert state.stage == Stage.CONFIRMING_CANCELLATION


def test_webhook_rejects_invalid_json(client):
    resp = client.post("/webhooks/whatsapp", content=b"{nope", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400


def test_webhook_verification_requires_token(client):
    resp = client.get(
        "/webhooks/whatsapp",
        params={"hub.mode": "subscribe", "hub.verify_token": "wrong", "hub.challenge": "42"},
    )

    assert resp.status_code == 403


def test_lifespan_closes_transport_on_shutdown(container, monkeypatch):
    monkeypatch.setattr("reminderbot.main.get_container", lambda: container)

    with TestClient(app) as lifespan_client:
        assert lifespan_client.get("/health").status_code == 200
        assert container.platform.closed is False

    assert container.platform.closed is True
