#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Set

from ..lib.constants import ASYNC_RESPONSE_ID_KEY, STATUS_TIMEOUT
from .cloud.base import DeviceCloudClient
from .codec import BUTTON_COUNTER, EndpointSchema
from .correlation import CorrelationTable
from .errors import CallbackTimeoutError, ConnectorError, UpstreamStatusError
from .models import StatusResult

logger = logging.getLogger(__name__)


class RequestState(Enum):
    ISSUING = "issuing"
    AWAITING_CALLBACK = "awaiting_callback"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    UPSTREAM_ERROR = "upstream_error"
    RESPONDED = "responded"


class StatusRequest:
    """Tracks the state of one "read device value" operation"""

    def __init__(self, endpoint_id: str, schema: EndpointSchema) -> None:
        self.endpoint_id = endpoint_id
        self.schema = schema
        self.state = RequestState.ISSUING
        self.async_id: str | None = None

    def set_state(self, new_state: RequestState) -> None:
        if self.state != new_state:
            logger.debug(
                "Status request %s%s: %s -> %s",
                self.endpoint_id,
                self.schema.path,
                self.state.name,
                new_state.name,
            )
            self.state = new_state


class StatusRequestHandler:
    """
    Bridges one HTTP status request to the asynchronous callback stream

      ISSUING -> AWAITING_CALLBACK -> RESOLVED | TIMED_OUT | UPSTREAM_ERROR

    - read() is issued once, no retries
    - RESOLVED and TIMED_OUT are mutually exclusive, the CorrelationTable
      completes every waiter exactly once
    - after a successful read a best-effort subscription is requested so
      future changes arrive as notifications
    """

    def __init__(
        self,
        cloud: DeviceCloudClient,
        table: CorrelationTable,
        *,
        timeout: float = STATUS_TIMEOUT,
    ) -> None:
        self.cloud = cloud
        self.table = table
        self.timeout = timeout
        self._background: Set[asyncio.Task] = set()

    async def read_status(
        self,
        endpoint_id: str,
        schema: EndpointSchema = BUTTON_COUNTER,
    ) -> StatusResult:
        request = StatusRequest(endpoint_id, schema)
        try:
            value = await self._run(request)
            request.set_state(RequestState.RESOLVED)
            # Subscription task starts running only after the response is produced
            self._subscribe_later(endpoint_id, schema.path)
            return StatusResult(endpoint_id=endpoint_id, path=schema.path, value=value)
        except CallbackTimeoutError:
            request.set_state(RequestState.TIMED_OUT)
            raise
        except ConnectorError:
            request.set_state(RequestState.UPSTREAM_ERROR)
            raise
        finally:
            request.set_state(RequestState.RESPONDED)

    async def _run(self, request: StatusRequest) -> Any:
        response = await self.cloud.read(request.endpoint_id, request.schema.path)

        async_id = response.get(ASYNC_RESPONSE_ID_KEY)
        if not async_id:
            raise UpstreamStatusError(
                200, str(response), "Connector response has no %r: %r" % (ASYNC_RESPONSE_ID_KEY, response)
            )

        request.async_id = str(async_id)
        request.set_state(RequestState.AWAITING_CALLBACK)
        waiter = await self.table.register(request.async_id)
        payload = await self.table.wait(waiter, self.timeout)
        return request.schema.decode(payload)

    def _subscribe_later(self, endpoint_id: str, path: str) -> None:
        task = asyncio.create_task(self._subscribe(endpoint_id, path))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _subscribe(self, endpoint_id: str, path: str) -> None:
        try:
            status = await self.cloud.subscribe(endpoint_id, path)
            logger.info("Made subscription for %s%s (status=%r)", endpoint_id, path, status)
        except ConnectorError as e:
            logger.warning("Subscription for %s%s failed: %s", endpoint_id, path, e)
        except Exception:
            logger.exception("Unexpected error subscribing to %s%s", endpoint_id, path)

    async def drain(self) -> None:
        """Wait for pending background subscriptions"""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
