#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .errors import CallbackTimeoutError, DuplicateIdError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Waiter:
    """
    One outstanding read waiting for its async response

    The future is the only completion point: whoever removes the waiter
    from the table (resolve() or the timeout path) owns its outcome
    """

    async_id: str
    created_at: float
    future: asyncio.Future = field(repr=False)
    deadline: Optional[float] = None


class CorrelationTable:
    """
    Maps async-response-id -> Waiter

    Responsibilities:
      - register(): create a Waiter for an id issued by the remote platform
      - resolve(): fulfil and remove the Waiter when its callback arrives
      - wait(): suspend the caller until resolve() or the deadline

    Notes:
      - All mutations happen under one asyncio.Lock, no I/O while it is held
      - A late or repeated resolve() is a no-op returning False
    """

    def __init__(self) -> None:
        self._waiters: Dict[str, Waiter] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._waiters)

    def __contains__(self, async_id: str) -> bool:
        return async_id in self._waiters

    async def register(self, async_id: str) -> Waiter:
        loop = asyncio.get_running_loop()
        waiter = Waiter(async_id=async_id, created_at=loop.time(), future=loop.create_future())

        async with self._lock:
            previous = self._waiters.get(async_id)
            self._waiters[async_id] = waiter

        if previous is not None:
            # Should never happen with a sane remote platform: keep the newest
            # waiter and release the old one instead of letting it time out
            logger.warning("Duplicate async-response-id %r, replacing pending waiter", async_id)
            if not previous.future.done():
                previous.future.set_exception(DuplicateIdError(async_id))

        logger.debug("Registered waiter for %r (pending=%d)", async_id, len(self._waiters))
        return waiter

    async def resolve(self, async_id: str, payload: bytes) -> bool:
        """Deliver payload to the waiter of async_id. Returns False if there is none"""
        async with self._lock:
            waiter = self._waiters.pop(async_id, None)

        if waiter is None:
            logger.debug("No waiter for %r (late, duplicate or timed out)", async_id)
            return False

        if waiter.future.done():
            # wait_for() already gave up on it
            logger.debug("Waiter for %r already finished, dropping payload", async_id)
            return False

        waiter.future.set_result(payload)
        logger.debug("Resolved waiter for %r", async_id)
        return True

    async def wait(self, waiter: Waiter, timeout: float) -> bytes:
        """
        Suspend until the waiter is resolved or timeout elapses

        Raises CallbackTimeoutError on timeout, the waiter is removed first
        so a late resolve() finds nothing
        """
        loop = asyncio.get_running_loop()
        waiter.deadline = loop.time() + timeout

        try:
            return await asyncio.wait_for(waiter.future, timeout=timeout)
        except asyncio.TimeoutError:
            if waiter.future.done() and not waiter.future.cancelled():
                # resolve() won the race in the same loop iteration
                return waiter.future.result()
            logger.warning("Waiter for %r timed out after %gs", waiter.async_id, timeout)
            raise CallbackTimeoutError(waiter.async_id, timeout) from None
        finally:
            # Timeout or caller cancellation must not leave an abandoned waiter behind
            if not waiter.future.done():
                waiter.future.cancel()
            async with self._lock:
                # A newer registration for the same id must survive
                if self._waiters.get(waiter.async_id) is waiter:
                    del self._waiters[waiter.async_id]

    async def cancel_all(self) -> int:
        """Cancel every pending waiter (used on shutdown)"""
        async with self._lock:
            waiters = list(self._waiters.values())
            self._waiters.clear()

        cancelled = 0
        for waiter in waiters:
            if not waiter.future.done():
                waiter.future.cancel()
                cancelled += 1
        if cancelled:
            logger.info("Cancelled %d pending waiter(s)", cancelled)
        return cancelled
