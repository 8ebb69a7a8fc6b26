"""Error types raised by the device gateway core."""


class GatewayError(Exception):
    """Base class for every failure the gateway reports to a caller."""

    default_reason = "gateway error"

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class NotConnectedError(GatewayError):
    """No device is attached, or the active connection is no longer open."""

    default_reason = "device not connected"


class TransportError(GatewayError):
    """A write on an ostensibly open device connection failed."""

    default_reason = "send failed"


class RequestTimeoutError(GatewayError):
    """No matching device reply arrived before the deadline."""

    default_reason = "device did not reply in time"


class DeviceDetachedError(GatewayError):
    """The device connection went away while a request was in flight."""

    default_reason = "device detached"


class DeviceDisconnectedError(DeviceDetachedError):
    default_reason = "device disconnected"


class DeviceReplacedError(DeviceDetachedError):
    default_reason = "device replaced by a newer connection"


class AlreadyActiveError(GatewayError):
    default_reason = "stress test already running"


class DuplicateIdError(GatewayError):
    default_reason = "request id already registered"


class MalformedDeviceFrameError(GatewayError):
    """An inbound device frame could not be decoded. Never surfaced to callers."""

    default_reason = "malformed device frame"
