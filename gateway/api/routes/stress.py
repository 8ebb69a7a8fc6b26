"""
Stress test control.

GET /stress/start (alias GET /enviar)
    Starts the background stream of synthetic login frames and returns
    immediately.  **503** without a device, **400** if already running.

GET /stress/stop (alias GET /parar)
    Stops the stream.  Always **200**, running or not.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gateway.api.deps import get_hub, http_error
from gateway.device.hub import DeviceHub
from gateway.errors import GatewayError

logger = logging.getLogger(__name__)
router = APIRouter()


class StressResponse(BaseModel):
    status: str
    message: str


@router.get("/stress/start", response_model=StressResponse)
@router.get("/enviar", response_model=StressResponse, include_in_schema=False)
async def start_stress(hub: DeviceHub = Depends(get_hub)) -> StressResponse:
    try:
        hub.stream.start()
    except GatewayError as exc:
        logger.warning("Stress test not started: %s", exc.reason)
        raise http_error(exc) from exc
    return StressResponse(status="ok", message="Stress test started")


@router.get("/stress/stop", response_model=StressResponse)
@router.get("/parar", response_model=StressResponse, include_in_schema=False)
async def stop_stress(hub: DeviceHub = Depends(get_hub)) -> StressResponse:
    hub.stream.stop()
    return StressResponse(status="ok", message="Stress test stopped")
