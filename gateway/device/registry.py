"""
Single-slot registry for the active device connection.

The device accepts one gateway link at a time, and the gateway accepts one
device.  A newer connection always wins: attaching it invalidates the old
handle and fails every in-flight request with ``DeviceReplacedError``.  A
close event for a connection that was already replaced is ignored so a late
disconnect can never clobber the newer device.

Every slot mutation is a plain synchronous method (no ``await`` inside), so
on the event loop each one runs to completion before any other coroutine can
observe the registry.  Sends are not serialised here.
"""

import logging
from typing import Any, Callable

from gateway.device.correlation import CorrelationTable
from gateway.errors import (
    DeviceDetachedError,
    DeviceDisconnectedError,
    DeviceReplacedError,
    NotConnectedError,
)

logger = logging.getLogger(__name__)


class DeviceRegistry:
    def __init__(self, table: CorrelationTable) -> None:
        self._table = table
        self._active: Any | None = None
        self._detach_listeners: list[Callable[[], None]] = []

    @property
    def active(self) -> Any | None:
        """The current connection handle, or ``None``."""
        return self._active

    def add_detach_listener(self, callback: Callable[[], None]) -> None:
        """Call *callback* whenever the active connection is replaced or lost."""
        self._detach_listeners.append(callback)

    def is_available(self) -> bool:
        return self._active is not None and self._active.is_open

    def is_current(self, conn: Any) -> bool:
        """True if *conn* is still the active connection and still open."""
        return conn is self._active and conn.is_open

    def attach(self, conn: Any) -> Any | None:
        """Make *conn* the active connection; return the one it replaced, if any."""
        previous = self._active
        self._active = conn
        if previous is not None:
            previous.invalidate()
            logger.warning(
                "Device connection %s replaced by %s",
                getattr(previous, "peer", "?"),
                getattr(conn, "peer", "?"),
            )
            self._on_detached(DeviceReplacedError)
        logger.info("Device connected: %s", getattr(conn, "peer", "?"))
        return previous

    def detach(self, conn: Any) -> bool:
        """
        Clear *conn* from the slot.

        Returns ``False`` (and does nothing) if *conn* is not the active
        connection any more.
        """
        if conn is not self._active:
            logger.debug(
                "Ignoring close of stale device connection %s",
                getattr(conn, "peer", "?"),
            )
            return False
        self._active = None
        conn.invalidate()
        logger.info("Device disconnected: %s", getattr(conn, "peer", "?"))
        self._on_detached(DeviceDisconnectedError)
        return True

    def reset(self) -> None:
        """Detach whatever connection is active (used on shutdown)."""
        if self._active is not None:
            self.detach(self._active)

    async def send(self, text: str) -> None:
        conn = self._active
        if conn is None or not conn.is_open:
            raise NotConnectedError()
        await conn.send(text)

    def _on_detached(self, error_cls: type[DeviceDetachedError]) -> None:
        cancelled = self._table.cancel_all(error_cls)
        if cancelled:
            logger.warning(
                "Failed %d pending request(s): %s", cancelled, error_cls.default_reason
            )
        for callback in self._detach_listeners:
            callback()
