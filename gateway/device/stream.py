"""
Stress stream: a detached loop that floods the device with synthetic,
uncorrelated login frames.

Design
------
- At most one run at a time.  ``start`` refuses with ``AlreadyActiveError``
  while a run is active and with ``NotConnectedError`` when no device is
  attached.
- Each run captures the connection that was active at start and a run
  generation number.  Every iteration checks the active flag, the generation
  and ``registry.is_current(conn)``; a stop request, a newer run, or the device
  going away ends the loop within one interval.  A send is never interrupted
  half-way.
- A failed send ends the run; nothing is retried.
- Frames carry no ``id`` and never touch the correlation table, so replies to
  them are dropped by the inbound handler.
"""

import asyncio
import logging
from typing import Any

from gateway.device.codec import encode_frame, stress_frame
from gateway.device.registry import DeviceRegistry
from gateway.errors import AlreadyActiveError, GatewayError, NotConnectedError

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL: float = 0.01


class StreamDriver:
    def __init__(self, registry: DeviceRegistry, interval: float = DEFAULT_INTERVAL) -> None:
        self._registry = registry
        self._interval = interval
        self._active = False
        self._generation = 0
        self._tasks: set[asyncio.Task] = set()
        self.messages_sent = 0
        registry.add_detach_listener(self.stop)

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Begin a run in the background and return immediately."""
        if not self._registry.is_available():
            raise NotConnectedError()
        if self._active:
            raise AlreadyActiveError()

        self._active = True
        self._generation += 1
        self.messages_sent = 0
        task = asyncio.create_task(
            self._run(self._registry.active, self._generation),
            name=f"stress_stream_{self._generation}",
        )
        # A stopped run may still be in its last sleep when the next one starts.
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def stop(self) -> None:
        """Request the current run to end.  Safe to call at any time."""
        if self._active:
            logger.info("Stress stream stop requested")
        self._active = False

    async def aclose(self) -> None:
        """Stop and wait for every background run still alive (used on shutdown)."""
        self.stop()
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _should_continue(self, conn: Any, generation: int) -> bool:
        return (
            self._active
            and generation == self._generation
            and self._registry.is_current(conn)
        )

    async def _run(self, conn: Any, generation: int) -> None:
        logger.info("Stress stream started (interval=%.0f ms)", self._interval * 1000)
        counter = 0
        try:
            while self._should_continue(conn, generation):
                try:
                    await conn.send(encode_frame(stress_frame(counter)))
                except GatewayError as exc:
                    logger.error("Stress stream send failed: %s", exc.reason)
                    break

                logger.debug("Stress message %d sent", counter)
                counter += 1
                if generation == self._generation:
                    self.messages_sent = counter
                await asyncio.sleep(self._interval)
        except asyncio.CancelledError:
            logger.info("Stress stream cancelled")
            raise
        finally:
            if generation == self._generation:
                self._active = False
            logger.info("Stress stream finished after %d message(s)", counter)
