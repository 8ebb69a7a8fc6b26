"""
Shared FastAPI dependencies.
"""

import logging

from fastapi import HTTPException

from gateway.config import settings
from gateway.device.hub import DeviceHub
from gateway.errors import (
    AlreadyActiveError,
    DeviceDetachedError,
    GatewayError,
    NotConnectedError,
    RequestTimeoutError,
    TransportError,
)

logger = logging.getLogger(__name__)

_hub: DeviceHub | None = None

_STATUS_CODES: tuple[tuple[type[GatewayError], int], ...] = (
    (NotConnectedError, 503),
    (TransportError, 500),
    (RequestTimeoutError, 504),
    (DeviceDetachedError, 504),
    (AlreadyActiveError, 400),
)


def get_hub() -> DeviceHub:
    """Return the process-wide device hub, creating it if necessary."""
    global _hub
    if _hub is None:
        _hub = DeviceHub.from_settings(settings)
    return _hub


async def shutdown_hub() -> None:
    """Close the device hub on shutdown; the next ``get_hub`` builds a fresh one."""
    global _hub
    hub, _hub = _hub, None
    if hub is not None:
        await hub.close()


def http_error(exc: GatewayError) -> HTTPException:
    """
    Translate a gateway error into the HTTP error reported to the caller.

    - **503** — no device attached.
    - **500** — the device link failed while sending.
    - **504** — no reply in time, or the device went away mid-request.
    - **400** — stress test already running.
    """
    status_code = 500
    for error_cls, code in _STATUS_CODES:
        if isinstance(exc, error_cls):
            status_code = code
            break
    return HTTPException(
        status_code=status_code,
        detail={"status": "error", "message": exc.reason},
    )
