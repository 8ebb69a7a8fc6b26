"""
Handle for the device's WebSocket.

The microcontroller opens exactly one WebSocket to the gateway and keeps it
open.  ``DeviceConnection`` wraps the accepted socket so the registry, the
forwarder and the stress stream never touch Starlette objects directly.

Usage
-----
    conn = DeviceConnection(websocket, peer="10.0.0.7:51234")
    if conn.is_open:
        await conn.send('{"operation": "logout", "method": "POST", "body": {}}')
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi.websockets import WebSocketState

from gateway.errors import TransportError

logger = logging.getLogger(__name__)


class DeviceConnection:
    """One accepted device WebSocket."""

    def __init__(self, websocket: Any, peer: str = "") -> None:
        self.websocket = websocket
        self.peer = peer
        self.connected_at = datetime.now(timezone.utc)
        self._invalidated = False

    @property
    def is_open(self) -> bool:
        if self._invalidated:
            return False
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def invalidate(self) -> None:
        """Mark the connection unusable; later sends raise ``TransportError``."""
        self._invalidated = True

    async def close(self, code: int = 1000, reason: str = "") -> None:
        """Invalidate and close the socket; a socket that is already gone is ignored."""
        self._invalidated = True
        try:
            await self.websocket.close(code=code, reason=reason)
        except Exception as exc:
            logger.debug("Closing device socket %s failed: %s", self.peer, exc)
        else:
            logger.info("Closed device socket %s (code %d)", self.peer, code)

    async def send(self, text: str) -> None:
        if self._invalidated:
            raise TransportError("connection was replaced or closed")
        try:
            await self.websocket.send_text(text)
        except Exception as exc:
            logger.warning("Send to device %s failed: %s", self.peer, exc)
            raise TransportError(f"send failed: {exc}") from exc

    def __repr__(self) -> str:
        return f"DeviceConnection(peer={self.peer!r}, open={self.is_open})"
