"""Routes frames received from the device to the waiting callers."""

import logging

from gateway.device.codec import decode_frame
from gateway.device.correlation import CorrelationTable
from gateway.errors import MalformedDeviceFrameError

logger = logging.getLogger(__name__)


class DeviceInboundHandler:
    def __init__(self, table: CorrelationTable) -> None:
        self._table = table

    def handle(self, raw: str | bytes) -> bool:
        """
        Process one inbound frame.  Returns ``True`` if it completed a
        pending request.

        Malformed frames, frames without ``id`` and replies for ids that are
        no longer pending are logged and dropped; none of them can affect a
        waiting caller.
        """
        try:
            payload = decode_frame(raw)
        except MalformedDeviceFrameError as exc:
            logger.warning("Discarding device frame: %s", exc.reason)
            return False

        request_id = payload.get("id")
        if request_id is None:
            logger.debug("Uncorrelated device frame: %s", payload)
            return False

        resolved = self._table.resolve(str(request_id), payload)
        if resolved:
            logger.info("Reply received for %s", request_id)
        return resolved
