#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Correlation table tests.

Each waiter must finish exactly once:
  - resolve() before the deadline delivers the payload
  - otherwise the waiter times out and a late resolve() is a no-op
"""

from __future__ import annotations

import asyncio

import pytest

from wb.connector_web.server.correlation import CorrelationTable
from wb.connector_web.server.errors import CallbackTimeoutError, DuplicateIdError


@pytest.mark.asyncio
async def test_resolve_delivers_payload_once():
    table = CorrelationTable()
    waiter = await table.register("r1")
    task = asyncio.create_task(table.wait(waiter, 1.0))
    await asyncio.sleep(0)

    assert await table.resolve("r1", b"\x00\x05") is True
    assert await task == b"\x00\x05"

    # Second delivery for the same id finds nothing
    assert await table.resolve("r1", b"\x00\x06") is False
    assert len(table) == 0


@pytest.mark.asyncio
async def test_resolve_without_waiter_is_noop():
    table = CorrelationTable()
    assert await table.resolve("unknown", b"data") is False
    assert len(table) == 0


@pytest.mark.asyncio
async def test_resolve_before_wait_is_kept_by_future():
    """Callback may arrive between register() and wait()"""
    table = CorrelationTable()
    waiter = await table.register("r1")
    assert await table.resolve("r1", b"early") is True
    assert await table.wait(waiter, 0.5) == b"early"


@pytest.mark.asyncio
async def test_timeout_removes_waiter_and_late_resolve_is_noop():
    table = CorrelationTable()
    waiter = await table.register("r1")

    with pytest.raises(CallbackTimeoutError) as exc_info:
        await table.wait(waiter, 0.05)

    assert exc_info.value.async_id == "r1"
    assert isinstance(exc_info.value, TimeoutError)
    assert "r1" not in table
    assert await table.resolve("r1", b"\x00\x05") is False


@pytest.mark.asyncio
async def test_waiter_records_deadline():
    table = CorrelationTable()
    waiter = await table.register("r1")
    task = asyncio.create_task(table.wait(waiter, 2.0))
    await asyncio.sleep(0)

    assert waiter.deadline is not None
    assert waiter.deadline >= waiter.created_at + 2.0

    await table.resolve("r1", b"x")
    await task


@pytest.mark.asyncio
async def test_duplicate_register_replaces_old_waiter():
    table = CorrelationTable()
    old = await table.register("r1")
    new = await table.register("r1")

    assert len(table) == 1
    with pytest.raises(DuplicateIdError):
        await table.wait(old, 0.5)

    # The old waiter's cleanup must not remove the newer registration
    assert "r1" in table
    assert await table.resolve("r1", b"ok") is True
    assert await table.wait(new, 0.5) == b"ok"


@pytest.mark.asyncio
async def test_cancelled_caller_leaves_no_waiter():
    table = CorrelationTable()
    waiter = await table.register("r1")
    task = asyncio.create_task(table.wait(waiter, 5.0))
    await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert "r1" not in table
    assert await table.resolve("r1", b"late") is False


@pytest.mark.asyncio
async def test_concurrent_waiters_are_independent():
    table = CorrelationTable()
    w1 = await table.register("r1")
    w2 = await table.register("r2")
    t1 = asyncio.create_task(table.wait(w1, 1.0))
    t2 = asyncio.create_task(table.wait(w2, 1.0))
    await asyncio.sleep(0)

    # Order of callbacks doesn't matter, correlation is by id
    await table.resolve("r2", b"two")
    await table.resolve("r1", b"one")

    assert await t1 == b"one"
    assert await t2 == b"two"


@pytest.mark.asyncio
async def test_cancel_all():
    table = CorrelationTable()
    waiter = await table.register("r1")
    task = asyncio.create_task(table.wait(waiter, 5.0))
    await asyncio.sleep(0)

    assert await table.cancel_all() == 1
    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(table) == 0
