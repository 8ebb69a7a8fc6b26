"""
Correlation table: request id -> pending completion.

Every waiting-mode request registers an ``asyncio.Future`` under a fresh id
before its frame is sent.  The entry leaves the table exactly once, through
whichever of these happens first:

- ``resolve``: the device replied with the matching id
- timer expiry: ``RequestTimeoutError`` after the configured deadline
- ``cancel_all``: the device disconnected or was replaced
- ``discard``: the forwarder gave up (send failure, caller gone)

Each path starts with ``dict.pop``.  Whichever path pops the entry owns the
future; the others find nothing and return ``False``.  No path awaits between
the pop and completing the future, so the event loop cannot interleave a
second completion.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from gateway.errors import DuplicateIdError, RequestTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT: float = 3.0


@dataclass
class PendingRequest:
    """One in-flight correlated call."""

    request_id: str
    future: asyncio.Future
    created_at: float
    timer: asyncio.TimerHandle | None = None


class CorrelationTable:
    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout
        self.unmatched_replies = 0
        self._pending: dict[str, PendingRequest] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._pending

    def new_id(self) -> str:
        """Return an identifier not currently registered."""
        while True:
            request_id = uuid.uuid4().hex
            if request_id not in self._pending:
                return request_id

    def register(self, request_id: str, timeout: float | None = None) -> asyncio.Future:
        """
        Register *request_id* and return the future its reply will complete.

        Raises ``DuplicateIdError`` if the id is already pending.  Must be
        called from a running event loop.
        """
        if request_id in self._pending:
            raise DuplicateIdError(f"request id {request_id} already registered")

        loop = asyncio.get_running_loop()
        deadline = self.timeout if timeout is None else timeout
        pending = PendingRequest(
            request_id=request_id,
            future=loop.create_future(),
            created_at=time.monotonic(),
        )
        pending.timer = loop.call_later(deadline, self._expire, request_id, deadline)
        self._pending[request_id] = pending
        return pending.future

    def resolve(self, request_id: str, payload: Any) -> bool:
        """Complete *request_id* with *payload*.  Unknown ids are dropped."""
        pending = self._take(request_id)
        if pending is None:
            self.unmatched_replies += 1
            logger.debug("Dropping reply for unknown or expired id %s", request_id)
            return False
        if not pending.future.done():
            pending.future.set_result(payload)
        logger.debug(
            "Resolved %s after %.1f ms",
            request_id,
            (time.monotonic() - pending.created_at) * 1000,
        )
        return True

    def fail(self, request_id: str, error: BaseException) -> bool:
        pending = self._take(request_id)
        if pending is None:
            return False
        if not pending.future.done():
            pending.future.set_exception(error)
        return True

    def discard(self, request_id: str) -> bool:
        """Drop *request_id* without signalling; a still-waiting future is cancelled."""
        pending = self._take(request_id)
        if pending is None:
            return False
        pending.future.cancel()
        return True

    def cancel_all(self, make_error: Callable[[], BaseException]) -> int:
        """Fail every pending request with a fresh ``make_error()``; return the count."""
        drained = list(self._pending.values())
        self._pending.clear()
        for pending in drained:
            if pending.timer is not None:
                pending.timer.cancel()
            if not pending.future.done():
                pending.future.set_exception(make_error())
        return len(drained)

    def _take(self, request_id: str) -> PendingRequest | None:
        pending = self._pending.pop(request_id, None)
        if pending is not None and pending.timer is not None:
            pending.timer.cancel()
        return pending

    def _expire(self, request_id: str, deadline: float) -> None:
        if self.fail(
            request_id,
            RequestTimeoutError(f"no reply from device within {deadline * 1000:.0f} ms"),
        ):
            logger.warning("Request %s timed out", request_id)
