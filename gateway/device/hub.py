"""
Wiring for the device-side components.

One ``DeviceHub`` owns the correlation table, the connection registry, the
forwarder, the inbound handler and the stress stream, all bound to the same
device slot.
"""

import logging

from gateway.config import Settings
from gateway.device.correlation import CorrelationTable
from gateway.device.forwarder import RequestForwarder
from gateway.device.inbound import DeviceInboundHandler
from gateway.device.registry import DeviceRegistry
from gateway.device.stream import StreamDriver

logger = logging.getLogger(__name__)


class DeviceHub:
    def __init__(self, request_timeout: float, stream_interval: float) -> None:
        self.table = CorrelationTable(timeout=request_timeout)
        self.registry = DeviceRegistry(self.table)
        self.forwarder = RequestForwarder(self.registry, self.table)
        self.inbound = DeviceInboundHandler(self.table)
        self.stream = StreamDriver(self.registry, interval=stream_interval)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeviceHub":
        return cls(
            request_timeout=settings.request_timeout_ms / 1000,
            stream_interval=settings.stress_interval_ms / 1000,
        )

    async def close(self) -> None:
        """Stop streaming and fail anything still waiting on the device."""
        await self.stream.aclose()
        self.registry.reset()
        logger.info("Device hub closed")
