"""
Tests for the correlation table (gateway.device.correlation).
"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from gateway.device.correlation import CorrelationTable
from gateway.errors import (
    DeviceDisconnectedError,
    DuplicateIdError,
    RequestTimeoutError,
)


def test_resolve_completes_future_exactly_once():
    async def run_test():
        table = CorrelationTable(timeout=1.0)
        future = table.register("abc")

        assert table.resolve("abc", {"id": "abc", "ok": True}) is True
        assert await future == {"id": "abc", "ok": True}

        # Second reply for the same id is dropped.
        assert table.resolve("abc", {"id": "abc", "ok": False}) is False
        assert "abc" not in table
        assert table.unmatched_replies == 1

    asyncio.run(run_test())


def test_timeout_fails_request_and_late_reply_is_dropped():
    async def run_test():
        table = CorrelationTable(timeout=0.02)
        future = table.register("late")

        with pytest.raises(RequestTimeoutError):
            await future

        assert len(table) == 0
        assert table.resolve("late", {"id": "late"}) is False
        assert table.unmatched_replies == 1

    asyncio.run(run_test())


def test_resolve_disarms_timer():
    async def run_test():
        table = CorrelationTable(timeout=0.02)
        future = table.register("fast")
        table.resolve("fast", {"id": "fast"})

        await asyncio.sleep(0.05)

        assert future.result() == {"id": "fast"}

    asyncio.run(run_test())


def test_per_request_timeout_overrides_default():
    async def run_test():
        table = CorrelationTable(timeout=10.0)
        future = table.register("short", timeout=0.01)

        with pytest.raises(RequestTimeoutError):
            await asyncio.wait_for(future, timeout=1.0)

    asyncio.run(run_test())


def test_duplicate_id_rejected():
    async def run_test():
        table = CorrelationTable()
        table.register("dup")
        with pytest.raises(DuplicateIdError):
            table.register("dup")
        assert len(table) == 1
        table.discard("dup")

    asyncio.run(run_test())


def test_cancel_all_fails_every_pending_request_once():
    async def run_test():
        table = CorrelationTable(timeout=1.0)
        futures = [table.register(f"r{i}") for i in range(3)]

        assert table.cancel_all(DeviceDisconnectedError) == 3
        assert len(table) == 0

        results = await asyncio.gather(*futures, return_exceptions=True)
        assert all(isinstance(r, DeviceDisconnectedError) for r in results)
        # Each future got its own exception instance.
        assert len({id(r) for r in results}) == 3

        # Nothing left to resolve or cancel.
        assert table.resolve("r0", {}) is False
        assert table.cancel_all(DeviceDisconnectedError) == 0

    asyncio.run(run_test())


def test_discard_cancels_waiting_future():
    async def run_test():
        table = CorrelationTable(timeout=1.0)
        future = table.register("gone")

        assert table.discard("gone") is True
        assert future.cancelled()
        assert table.discard("gone") is False

    asyncio.run(run_test())


def test_timer_ignores_cancelled_caller():
    """A caller that stopped waiting leaves the entry to the timer, which must not blow up."""

    async def run_test():
        table = CorrelationTable(timeout=0.01)
        future = table.register("abandoned")
        future.cancel()

        await asyncio.sleep(0.03)

        assert len(table) == 0

    asyncio.run(run_test())


def test_new_id_skips_registered_ids():
    async def run_test():
        table = CorrelationTable()
        table.register("aaaa")
        with patch(
            "gateway.device.correlation.uuid.uuid4",
            side_effect=[MagicMock(hex="aaaa"), MagicMock(hex="bbbb")],
        ):
            assert table.new_id() == "bbbb"
        table.discard("aaaa")

    asyncio.run(run_test())
