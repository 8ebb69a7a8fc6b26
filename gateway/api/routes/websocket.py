"""
WebSocket endpoint the device connects to.

WebSocket <DEVICE_WS_PATH> (default ``/``)
-----------------------------------------
The microcontroller opens this socket once and keeps it open.  Only one
device is bound at a time: a new connection replaces the previous one, whose
pending requests fail and whose socket is closed at once with code 4001.

Gateway -> device
-----------------
    {"id": "<hex>", "operation": "login", "method": "POST", "body": {...}}

``id`` is present only when an HTTP caller is waiting for the answer.

Device -> gateway
-----------------
    {"id": "<hex>", ...reply fields...}

Frames echoing a pending ``id`` complete that caller's request.  Everything
else (no id, unknown id, late replies, invalid JSON) is logged and dropped.
"""

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from gateway.api.deps import get_hub
from gateway.config import settings
from gateway.device.connection import DeviceConnection
from gateway.device.hub import DeviceHub

logger = logging.getLogger(__name__)
router = APIRouter()


def _peer(websocket: WebSocket) -> str:
    if websocket.client is None:
        return "unknown"
    return f"{websocket.client.host}:{websocket.client.port}"


@router.websocket(settings.device_ws_path)
async def device_endpoint(websocket: WebSocket, hub: DeviceHub = Depends(get_hub)) -> None:
    await websocket.accept()

    conn = DeviceConnection(websocket, peer=_peer(websocket))
    previous = hub.registry.attach(conn)

    try:
        if previous is not None:
            await previous.close(code=4001, reason="Replaced by a newer device connection")

        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            if not hub.registry.is_current(conn):
                # Replaced; the newer connection already closed this socket.
                break

            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            if raw is None:
                continue
            hub.inbound.handle(raw)

    except WebSocketDisconnect:
        logger.info("Device websocket %s disconnected", conn.peer)
    except Exception as exc:
        logger.error("Device websocket error: %s", exc)
    finally:
        hub.registry.detach(conn)
        conn.invalidate()
