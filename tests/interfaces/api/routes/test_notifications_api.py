"""Integration tests for the notification endpoints and websocket feed."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notification_hub.infrastructure.repositories import NotificationRepository
from notification_hub.infrastructure.security import create_access_token

from conftest import make_notification


def _auth(user_id: str = "user-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}


@pytest.fixture()
def client(reset_database):
    """Return a test client bound to a clean application instance."""

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture()
def repository(db_session):
    repository = NotificationRepository(db_session)
    for index in range(4):
        repository.create(make_notification(f"n{index}", minutes=index))
    repository.create(make_notification("s", minutes=9, silent=True))
    repository.create(make_notification("foreign", user_id="user-2"))
    return repository


def test_requires_bearer_token(client: TestClient) -> None:
    assert client.get("/notifications/").status_code == 401

    response = client.get("/notifications/", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_list_recent_and_full_log(client: TestClient, repository) -> None:
    response = client.get("/notifications/", params={"limit": 2}, headers=_auth())
    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == ["s", "n3"]

    everything = client.get("/notifications/", params={"all": "true"}, headers=_auth())
    assert len(everything.json()) == 5
    assert "foreign" not in {item["id"] for item in everything.json()}


def test_history_is_paginated(client: TestClient, repository) -> None:
    response = client.get(
        "/notifications/history", params={"page": 2, "page_size": 2}, headers=_auth()
    )

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == ["n2", "n1"]
    assert (body["total"], body["page"], body["page_size"]) == (5, 2, 2)


def test_mark_as_read_and_read_all(client: TestClient, repository) -> None:
    response = client.post("/notifications/n0/read", headers=_auth())
    assert response.status_code == 200
    assert response.json()["read"] is True

    assert client.post("/notifications/foreign/read", headers=_auth()).status_code == 404

    response = client.post("/notifications/read-all", headers=_auth())
    assert response.json() == {"updated": 3}

    repository.session.expire_all()
    assert repository.get("s").read is False


def test_websocket_rejects_missing_or_bad_token(client: TestClient) -> None:
    from starlette.websockets import WebSocketDisconnect

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws") as websocket:
            websocket.receive_json()

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/notifications/ws?token=garbage") as websocket:
            websocket.receive_json()


def test_websocket_status_ping_and_ack(client: TestClient, repository) -> None:
    token = create_access_token({"sub": "user-1"})

    with client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
        assert websocket.receive_json() == {"type": "status", "status": "SUBSCRIBED"}

        websocket.send_json({"type": "ack", "ids": ["n1", "unknown"]})
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

    repository.session.expire_all()
    assert repository.get("n1").read is True
