"""Tests for the USSD session debug endpoints."""

from fastapi.testclient import TestClient

from telehealth_ussd.containers import AppContainer
from tests.conftest import START

HEADERS = {"X-Admin-Token": "admin-token"}


def _start_dialog(client: TestClient, session_id: str) -> None:
    client.post(
        "/api/ussd/session",
        json={"sessionId": session_id, "phoneNumber": "+23276000000", "text": ""},
    )
    client.post(
        "/api/ussd/session",
        json={"sessionId": session_id, "phoneNumber": "+23276000000", "text": "2"},
    )


def test_list_sessions_dumps_live_sessions(client: TestClient) -> None:
    _start_dialog(client, "abc")

    response = client.get("/admin/ussd/sessions", headers=HEADERS)

    assert response.status_code == 200
    sessions = response.json()["sessions"]
    assert len(sessions) == 1
    assert sessions[0] == {
        "session_id": "abc",
        "phone_number": "+23276000000",
        "service_code": None,
        "step": 2,
        "service_context": "health_tips",
        "history": ["", "2"],
        "created_at": START.isoformat(),
        "last_activity_at": START.isoformat(),
    }


def test_list_sessions_requires_token(client: TestClient) -> None:
    response = client.get("/admin/ussd/sessions")

    assert response.status_code == 401


def test_session_detail(client: TestClient) -> None:
    _start_dialog(client, "abc")

    found = client.get("/admin/ussd/sessions/abc", headers=HEADERS)
    missing = client.get("/admin/ussd/sessions/missing", headers=HEADERS)

    assert found.status_code == 200
    assert found.json()["step"] == 2
    assert missing.status_code == 404


def test_clear_session(client: TestClient, container: AppContainer) -> None:
    _start_dialog(client, "abc")
    _start_dialog(client, "def")

    response = client.delete("/admin/ussd/sessions/abc", headers=HEADERS)
    again = client.delete("/admin/ussd/sessions/abc", headers=HEADERS)

    assert response.status_code == 200
    assert response.json() == {"msg": "Session cleared"}
    assert again.status_code == 404
    assert again.json() == {"detail": "Session not found"}
    assert container.session_store.get("abc") is None
    assert container.session_store.get("def") is not None
