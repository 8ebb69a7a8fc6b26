"""
JSON framing for the device WebSocket.

Outbound frames
---------------
    {"id": "<hex>", "operation": "login", "method": "POST", "body": {...}}

``id`` is only present when the caller waits for a correlated reply.

Inbound frames
--------------
Any JSON object.  A reply to a waiting request echoes the ``id`` field; all
other fields are passed back to the caller untouched.
"""

import json
from typing import Any

from pydantic import BaseModel, Field

from gateway.errors import MalformedDeviceFrameError


class DeviceFrame(BaseModel):
    """A message sent from the gateway to the device."""

    id: str | None = None
    operation: str
    method: str
    body: dict[str, Any] = Field(default_factory=dict)


def encode_frame(frame: DeviceFrame) -> str:
    """Serialise *frame* to compact JSON text, omitting ``id`` when unset."""
    data = frame.model_dump()
    if data["id"] is None:
        del data["id"]
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def decode_frame(raw: str | bytes) -> dict[str, Any]:
    """
    Parse an inbound device frame.

    Raises ``MalformedDeviceFrameError`` if *raw* is not UTF-8, not JSON, or
    not a JSON object.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedDeviceFrameError(f"frame is not valid UTF-8: {exc}") from exc

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise MalformedDeviceFrameError(f"frame is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise MalformedDeviceFrameError(
            f"frame must be a JSON object, got {type(payload).__name__}"
        )
    return payload


def stress_frame(counter: int) -> DeviceFrame:
    """Synthetic uncorrelated login frame emitted by the stress stream."""
    return DeviceFrame(
        operation="login",
        method="POST",
        body={"login": f"admin{counter}", "password": f"pass{counter}"},
    )
