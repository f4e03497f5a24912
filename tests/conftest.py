#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from wb.connector_web.server.cloud.base import DeviceCloudClient


class FakeSio:
    """
    Minimal socketio.AsyncServer stub:
    - on() collects handlers
    - emit() records (sid, event, data); sids in `broken` raise,
      sids in `slow` wait until `gate` is set
    """

    def __init__(self) -> None:
        self.handlers: Dict[str, Any] = {}
        self.emitted: List[Tuple[Optional[str], str, Any]] = []
        self.broken: set = set()
        self.slow: set = set()
        self.gate = asyncio.Event()

    def on(self, event: str, handler: Any = None) -> None:
        self.handlers[event] = handler

    async def emit(self, event: str, data: Any = None, to: Optional[str] = None) -> None:
        if to in self.broken:
            raise ConnectionError("socket %s is gone" % to)
        if to in self.slow:
            await self.gate.wait()
        self.emitted.append((to, event, data))

    def received(self, sid: str) -> List[Tuple[str, Any]]:
        return [(event, data) for to, event, data in self.emitted if to == sid]


class FakeCloud(DeviceCloudClient):
    """
    DeviceCloudClient stub:
    - every call is recorded in `calls`
    - *_error attributes make the matching call raise
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[Any, ...]] = []
        self.read_response: Dict[str, Any] = {"async-response-id": "r1"}
        self.read_error: Optional[Exception] = None
        self.subscribe_error: Optional[Exception] = None
        self.write_error: Optional[Exception] = None
        self.execute_error: Optional[Exception] = None
        self.callback_error: Optional[Exception] = None
        self.closed = False

    async def read(self, endpoint_id: str, path: str) -> Dict[str, Any]:
        self.calls.append(("read", endpoint_id, path))
        if self.read_error:
            raise self.read_error
        return self.read_response

    async def subscribe(self, endpoint_id: str, path: str) -> int:
        self.calls.append(("subscribe", endpoint_id, path))
        if self.subscribe_error:
            raise self.subscribe_error
        return 202

    async def write(self, endpoint_id: str, path: str, body: str) -> int:
        self.calls.append(("write", endpoint_id, path, body))
        if self.write_error:
            raise self.write_error
        return 202

    async def execute(self, endpoint_id: str, path: str, body: Optional[str] = None) -> int:
        self.calls.append(("execute", endpoint_id, path))
        if self.execute_error:
            raise self.execute_error
        return 202

    async def register_callback(self, url: str) -> int:
        self.calls.append(("register_callback", url))
        if self.callback_error:
            raise self.callback_error
        return 204

    async def close(self) -> None:
        self.closed = True

    def calls_of(self, name: str) -> List[Tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]


async def wait_registered(table: Any, async_id: str, timeout: float = 1.0) -> None:
    """Let the event loop run until a waiter for async_id appears"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while async_id not in table:
        if loop.time() > deadline:
            raise AssertionError("waiter %r was never registered" % async_id)
        await asyncio.sleep(0.001)


@pytest.fixture
def fake_sio() -> FakeSio:
    return FakeSio()


@pytest.fixture
def fake_cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture(name="wait_registered")
def wait_registered_fixture():
    return wait_registered
