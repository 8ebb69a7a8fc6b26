"""
Device command endpoints, one route per entry in ``gateway.operations``.

Each route forwards its JSON body to the device untouched, tagged with the
operation name and the HTTP method of the call:

    POST /save_tag  {"tag": "A1"}
      -> {"operation": "save_tag", "method": "POST", "body": {"tag": "A1"}}

``POST /login`` waits for the device's correlated reply and returns it as the
response body.  Every other route answers as soon as the frame is written.

GET routes accept a body too.  The body must be a JSON object; an empty
body or ``null`` forwards ``{}``.  On a GET, an unparseable or non-object
body is treated as ``{}``; on any other method it is a **400**.
"""

import json
import logging
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from gateway.api.deps import get_hub, http_error
from gateway.device.hub import DeviceHub
from gateway.errors import GatewayError
from gateway.operations import OPERATIONS, Operation

logger = logging.getLogger(__name__)

router = APIRouter()


class CommandResponse(BaseModel):
    status: str
    message: str


async def _read_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError as exc:
        if request.method == "GET":
            logger.debug("Ignoring malformed GET body on %s", request.url.path)
            return {}
        raise HTTPException(
            status_code=400,
            detail={"status": "error", "message": f"Invalid JSON body: {exc}"},
        ) from exc
    if body is None:
        return {}
    if not isinstance(body, dict):
        if request.method == "GET":
            logger.debug("Ignoring non-object GET body on %s", request.url.path)
            return {}
        raise HTTPException(
            status_code=400,
            detail={
                "status": "error",
                "message": f"Body must be a JSON object, got {type(body).__name__}",
            },
        )
    return body


def _make_endpoint(operation: Operation) -> Callable[..., Awaitable[Any]]:
    if operation.waits_for_reply:

        async def forward_and_wait(
            request: Request, hub: DeviceHub = Depends(get_hub)
        ) -> dict[str, Any]:
            body = await _read_body(request)
            try:
                return await hub.forwarder.request(operation.name, request.method, body)
            except GatewayError as exc:
                logger.warning("'%s' failed: %s", operation.name, exc.reason)
                raise http_error(exc) from exc

        return forward_and_wait

    async def forward(
        request: Request, hub: DeviceHub = Depends(get_hub)
    ) -> CommandResponse:
        body = await _read_body(request)
        try:
            await hub.forwarder.send(operation.name, request.method, body)
        except GatewayError as exc:
            logger.warning("'%s' failed: %s", operation.name, exc.reason)
            raise http_error(exc) from exc
        return CommandResponse(
            status="ok",
            message=f"Command '{operation.name}' ({request.method}) sent to device",
        )

    return forward


for _operation in OPERATIONS:
    router.add_api_route(
        f"/{_operation.name}",
        _make_endpoint(_operation),
        methods=[_operation.http_method],
        name=_operation.name,
        response_model=None if _operation.waits_for_reply else CommandResponse,
    )
