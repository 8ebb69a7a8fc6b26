# Device link: connection slot, request correlation and stress streaming
from gateway.device.codec import DeviceFrame, decode_frame, encode_frame
from gateway.device.connection import DeviceConnection
from gateway.device.correlation import CorrelationTable, PendingRequest
from gateway.device.forwarder import RequestForwarder
from gateway.device.hub import DeviceHub
from gateway.device.inbound import DeviceInboundHandler
from gateway.device.registry import DeviceRegistry
from gateway.device.stream import StreamDriver

__all__ = [
    "DeviceFrame",
    "decode_frame",
    "encode_frame",
    "DeviceConnection",
    "CorrelationTable",
    "PendingRequest",
    "RequestForwarder",
    "DeviceHub",
    "DeviceInboundHandler",
    "DeviceRegistry",
    "StreamDriver",
]
