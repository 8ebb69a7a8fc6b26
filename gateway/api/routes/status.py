"""
GET /status — gateway and device link health check.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gateway.api.deps import get_hub
from gateway.device.hub import DeviceHub

router = APIRouter()


class StatusResponse(BaseModel):
    status: str
    device: dict
    pending_requests: int
    unmatched_replies: int
    stream: dict


@router.get("/status", response_model=StatusResponse)
def get_status(hub: DeviceHub = Depends(get_hub)) -> StatusResponse:
    """
    Returns the gateway status and the state of the device link.

    - **status**: ``"ok"`` if a device is attached, ``"degraded"`` otherwise.
    - **device**: whether it is connected, its address and when it connected.
    - **pending_requests**: waiting-mode calls currently in flight.
    - **unmatched_replies**: device replies dropped because their id was
      unknown or had already expired.
    - **stream**: whether the stress test is running and how many frames the
      current (or last) run sent.
    """
    conn = hub.registry.active
    connected = hub.registry.is_available()

    return StatusResponse(
        status="ok" if connected else "degraded",
        device={
            "connected": connected,
            "peer": conn.peer if conn is not None else None,
            "connected_at": conn.connected_at.isoformat() if conn is not None else None,
        },
        pending_requests=len(hub.table),
        unmatched_replies=hub.table.unmatched_replies,
        stream={
            "active": hub.stream.is_active,
            "messages_sent": hub.stream.messages_sent,
        },
    )
