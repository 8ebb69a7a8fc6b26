"""
Request forwarder: turns an HTTP call into a device frame.

Two modes:

* ``send``: fire-and-forget.  Returns once the frame is written.
* ``request``: waiting.  Attaches a fresh id, registers it in the
  correlation table *before* writing (a fast device must not be able to reply
  before the id is known), then waits for the reply, timeout or detach.
"""

import logging
from typing import Any

from gateway.device.codec import DeviceFrame, encode_frame
from gateway.device.correlation import CorrelationTable
from gateway.device.registry import DeviceRegistry
from gateway.errors import GatewayError, NotConnectedError

logger = logging.getLogger(__name__)


class RequestForwarder:
    def __init__(self, registry: DeviceRegistry, table: CorrelationTable) -> None:
        self._registry = registry
        self._table = table

    async def send(
        self, operation: str, method: str, body: dict[str, Any] | None = None
    ) -> None:
        """Forward *operation* without waiting for a reply."""
        frame = DeviceFrame(
            operation=operation,
            method=method.upper(),
            body={} if body is None else body,
        )
        await self._registry.send(encode_frame(frame))
        logger.info("Forwarded '%s' (%s) to device", operation, frame.method)

    async def request(
        self,
        operation: str,
        method: str,
        body: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        """
        Forward *operation* and return the device's correlated reply.

        Raises ``NotConnectedError`` (nothing registered), ``TransportError``
        (entry removed again), ``RequestTimeoutError`` or a
        ``DeviceDetachedError`` subclass.
        """
        if not self._registry.is_available():
            raise NotConnectedError()

        request_id = self._table.new_id()
        frame = DeviceFrame(
            id=request_id,
            operation=operation,
            method=method.upper(),
            body={} if body is None else body,
        )
        future = self._table.register(request_id, timeout)

        try:
            await self._registry.send(encode_frame(frame))
        except GatewayError:
            self._table.discard(request_id)
            raise

        logger.info(
            "Forwarded '%s' (%s) to device as %s, awaiting reply",
            operation,
            frame.method,
            request_id,
        )
        try:
            return await future
        finally:
            # No-op unless the caller was cancelled while waiting.
            self._table.discard(request_id)
