"""
Tests for the device WebSocket endpoint.

The TestClient stands in for the microcontroller: it connects to the device
socket, receives forwarded frames and answers correlated ones.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketDisconnect

from gateway.api.deps import get_hub
from gateway.main import app


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_device_connect_and_disconnect_updates_status(client):
    with client.websocket_connect("/"):
        assert client.get("/status").json()["device"]["connected"] is True

    assert client.get("/status").json()["device"]["connected"] is False


def test_fire_and_forget_frame_reaches_device(client):
    with client.websocket_connect("/") as device:
        response = client.post("/save_tag", json={"tag": "A1"})
        assert response.status_code == 200

        frame = device.receive_json()

    assert frame == {"operation": "save_tag", "method": "POST", "body": {"tag": "A1"}}


def test_login_round_trip_over_device_socket(client):
    with client.websocket_connect("/") as device:
        with ThreadPoolExecutor(max_workers=1) as pool:
            pending = pool.submit(
                client.post, "/login", json={"login": "a", "password": "b"}
            )
            frame = device.receive_json()
            device.send_json({"id": frame["id"], "ok": True})
            response = pending.result(timeout=5)

    assert frame["operation"] == "login"
    assert response.status_code == 200
    assert response.json() == {"id": frame["id"], "ok": True}


def test_malformed_device_frames_are_ignored(client):
    with client.websocket_connect("/") as device:
        device.send_text("not json")
        device.send_bytes(b"\x00\x01")
        device.send_json({"id": "unknown"})

        response = client.post("/logout", json={})
        assert response.status_code == 200
        assert device.receive_json()["operation"] == "logout"

    assert client.get("/status").json()["unmatched_replies"] == 1


def test_new_device_closes_silent_old_device(client):
    """The replaced socket is closed without waiting for it to send anything."""
    with client.websocket_connect("/") as first:
        with client.websocket_connect("/") as second:
            assert get_hub().registry.is_available() is True

            with pytest.raises(WebSocketDisconnect) as exc_info:
                first.receive_json()
            assert exc_info.value.code == 4001

            client.post("/logout", json={})
            assert second.receive_json()["operation"] == "logout"

        assert client.get("/status").json()["device"]["connected"] is False
