#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from typing import Any

from ..lib.constants import ResourcePath
from .cloud.base import DeviceCloudClient
from .errors import ConnectorError
from .relay import FanOutRelay

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """
    Forwards browser commands to the device cloud

    Writes are optimistic: the new value is published to all subscribers
    right away, before the device confirms anything. Outcome is only logged
    """

    def __init__(self, cloud: DeviceCloudClient, relay: FanOutRelay) -> None:
        self.cloud = cloud
        self.relay = relay

    async def set_value(self, endpoint_id: str, value: Any) -> bool:
        return await self._write_and_echo(endpoint_id, ResourcePath.LED_COLOR, value)

    async def set_pattern(self, endpoint_id: str, pattern: str) -> bool:
        return await self._write_and_echo(endpoint_id, ResourcePath.BLINK_PATTERN, pattern)

    async def trigger_action(self, endpoint_id: str) -> bool:
        try:
            status = await self.cloud.execute(endpoint_id, ResourcePath.BLINK_ACTION)
        except ConnectorError as e:
            logger.warning("Trigger action on %r failed: %s", endpoint_id, e)
            return False
        logger.info("Trigger action on %r response: %r", endpoint_id, status)
        return True

    async def _write_and_echo(self, endpoint_id: str, path: str, value: Any) -> bool:
        self.relay.publish(endpoint_id, value)
        try:
            status = await self.cloud.write(endpoint_id, path, str(value))
        except ConnectorError as e:
            logger.warning("Write %r to %s%s failed: %s", value, endpoint_id, path, e)
            return False
        logger.info("Write %r to %s%s response: %r", value, endpoint_id, path, status)
        return True
