#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Fan-out of device events to connected Socket.IO clients
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, FrozenSet, Set

logger = logging.getLogger(__name__)


class FanOutRelay:
    """
    Republishes decoded device events to every connected subscriber

    Each subscriber gets its own emit task, so a slow or broken socket
    can't delay or fail delivery to the others. No replay: a subscriber
    only sees events published while it is connected
    """

    def __init__(self, sio: Any) -> None:
        """
        Args:
            sio: socketio.AsyncServer (anything with async emit(event, data, to=sid))
        """
        self._sio = sio
        self._subscribers: Set[str] = set()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def subscribers(self) -> FrozenSet[str]:
        return frozenset(self._subscribers)

    def add_subscriber(self, sid: str) -> None:
        self._subscribers.add(sid)
        logger.debug("Subscriber %r connected (total=%d)", sid, len(self._subscribers))

    def remove_subscriber(self, sid: str) -> None:
        self._subscribers.discard(sid)
        logger.debug("Subscriber %r disconnected (total=%d)", sid, len(self._subscribers))

    def publish(self, endpoint_id: str, value: Any) -> int:
        """
        Schedule delivery of value under event name endpoint_id

        Returns number of subscribers the event was scheduled for
        """
        targets = list(self._subscribers)
        if not targets:
            logger.debug("No subscribers for event %r, dropping value %r", endpoint_id, value)
            return 0

        for sid in targets:
            task = asyncio.create_task(self._emit(sid, endpoint_id, value))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        logger.debug("Publishing %r=%r to %d subscriber(s)", endpoint_id, value, len(targets))
        return len(targets)

    async def _emit(self, sid: str, endpoint_id: str, value: Any) -> None:
        try:
            await self._sio.emit(endpoint_id, value, to=sid)
        except Exception as e:
            logger.warning("Emit %r to subscriber %r failed: %r", endpoint_id, sid, e)

    async def drain(self) -> None:
        """Wait for in-flight emits (used by shutdown and tests)"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
