#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Notification router tests.

We check 2 kinds of callback batches:

1) async-responses (callback -> router -> correlation table):
   - payload is base64 decoded
   - waiter registered for the id gets the raw bytes

2) notifications (callback -> router -> fan-out relay):
   - payload is base64 decoded and interpreted by resource path
   - every connected subscriber gets event <ep> with the value

Broken entries must never abort their siblings.
"""

from __future__ import annotations

import asyncio
import base64

import pytest

from wb.connector_web.server.correlation import CorrelationTable
from wb.connector_web.server.relay import FanOutRelay
from wb.connector_web.server.router import NotificationRouter, decode_notification


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _build(fake_sio):
    table = CorrelationTable()
    relay = FanOutRelay(fake_sio)
    relay.add_subscriber("sid1")
    return table, relay, NotificationRouter(table, relay)


@pytest.mark.asyncio
async def test_async_response_resolves_waiter(fake_sio):
    table, _, router = _build(fake_sio)
    waiter = await table.register("r1")

    await router.handle({"async-responses": [{"id": "r1", "payload": b64(b"\x00\x05")}]})

    assert await table.wait(waiter, 0.5) == b"\x00\x05"


@pytest.mark.asyncio
async def test_replayed_batch_is_noop(fake_sio):
    table, _, router = _build(fake_sio)
    waiter = await table.register("r1")
    task = asyncio.create_task(table.wait(waiter, 1.0))
    await asyncio.sleep(0)

    body = {"async-responses": [{"id": "r1", "payload": b64(b"\x00\x05")}]}
    await router.handle(body)
    await router.handle(body)

    assert await task == b"\x00\x05"
    assert len(table) == 0


@pytest.mark.asyncio
async def test_notification_is_published(fake_sio):
    _, relay, router = _build(fake_sio)

    await router.handle(
        {"notifications": [{"ep": "device-1", "path": "/3200/0/5501", "payload": b64(b"\x01\x02")}]}
    )
    await relay.drain()

    assert fake_sio.received("sid1") == [("device-1", 258)]


@pytest.mark.asyncio
async def test_text_notification_is_published_as_string(fake_sio):
    _, relay, router = _build(fake_sio)

    await router.handle(
        {"notifications": [{"ep": "device-1", "path": "/Test5/0/D", "payload": b64(b"ff0000")}]}
    )
    await relay.drain()

    assert fake_sio.received("sid1") == [("device-1", "ff0000")]


@pytest.mark.asyncio
async def test_broken_entries_do_not_abort_siblings(fake_sio):
    table, relay, router = _build(fake_sio)
    waiter = await table.register("r1")

    await router.handle(
        {
            "async-responses": [
                {"id": "bad", "payload": "!!! not base64"},
                "not an object",
                {"payload": b64(b"\x00\x01")},  # no id
                {"id": "r1", "payload": b64(b"\x00\x05")},
            ],
            "notifications": [
                {"ep": "device-1", "path": "/3200/0/5501", "payload": b64(b"\x01")},  # too short
                {"ep": "device-1", "path": "/3200/0/5501"},  # no payload
                {"ep": "device-2", "path": "/3200/0/5501", "payload": b64(b"\x00\x09")},
            ],
        }
    )
    await relay.drain()

    assert await table.wait(waiter, 0.5) == b"\x00\x05"
    assert fake_sio.received("sid1") == [("device-2", 9)]


@pytest.mark.asyncio
async def test_missing_payload_keeps_waiter_pending(fake_sio):
    table, _, router = _build(fake_sio)
    await table.register("r1")

    await router.handle({"async-responses": [{"id": "r1", "status": 404}]})

    assert "r1" in table


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"async-responses": []},
        {"notifications": None},
        {"async-responses": "oops"},
        [],
        "text",
        None,
    ],
)
async def test_odd_bodies_are_ignored(fake_sio, body):
    table, relay, router = _build(fake_sio)

    await router.handle(body)
    await relay.drain()

    assert len(table) == 0
    assert fake_sio.emitted == []


def test_decode_notification_keeps_raw_bytes():
    n = decode_notification({"ep": "device-1", "path": "/3200/0/5501", "payload": b64(b"\x00\x05")})
    assert n is not None
    assert n.endpoint_id == "device-1"
    assert n.raw == b"\x00\x05"
    assert n.value == 5
