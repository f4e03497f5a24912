#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Socket.IO event handlers for browser clients

Contains connection lifecycle handlers (subscriber tracking for the
fan-out relay) and the command events forwarded to the device cloud
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from ..lib.constants import SocketEvent
from .commands import CommandDispatcher
from .models import SetPatternCommand, SetValueCommand, TriggerActionCommand
from .relay import FanOutRelay

logger = logging.getLogger(__name__)


class SocketIOHandlers:
    """
    Centralized Socket.IO event handlers

    - connect / disconnect keep the FanOutRelay subscriber set up to date
    - set-value, set-pattern, trigger-action go to the CommandDispatcher
    """

    def __init__(self, *, relay: FanOutRelay, dispatcher: CommandDispatcher):
        self.relay = relay
        self.dispatcher = dispatcher

    def register(self, sio: Any) -> None:
        """
        Bind all handlers to a socketio.AsyncServer
        """
        sio.on("connect", self.on_connect)
        sio.on("disconnect", self.on_disconnect)
        sio.on(SocketEvent.SET_VALUE, self.on_set_value)
        sio.on(SocketEvent.SET_PATTERN, self.on_set_pattern)
        sio.on(SocketEvent.TRIGGER_ACTION, self.on_trigger_action)
        logger.debug("Socket.IO handlers registered")

    # -------------------------------------------------------------------------
    # Connection Lifecycle Handlers
    # -------------------------------------------------------------------------

    async def on_connect(self, sid: str, environ: Dict[str, Any], auth: Any = None) -> None:
        logger.info("Browser client connected (sid=%r)", sid)
        self.relay.add_subscriber(sid)

    async def on_disconnect(self, sid: str, *args: Any) -> None:
        """
        NOTE: python-socketio 5.12+ passes a 'reason' argument,
        older versions call this with sid only
        """
        logger.info("Browser client disconnected (sid=%r)", sid)
        self.relay.remove_subscriber(sid)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def on_set_value(self, sid: str, data: Any) -> None:
        try:
            cmd = SetValueCommand(**data)
        except (ValidationError, TypeError) as e:
            logger.warning("Invalid %r from %r: %r (%s)", SocketEvent.SET_VALUE, sid, data, e)
            return
        await self.dispatcher.set_value(cmd.endpoint_id, cmd.value)

    async def on_set_pattern(self, sid: str, data: Any) -> None:
        try:
            cmd = SetPatternCommand(**data)
        except (ValidationError, TypeError) as e:
            logger.warning("Invalid %r from %r: %r (%s)", SocketEvent.SET_PATTERN, sid, data, e)
            return
        await self.dispatcher.set_pattern(cmd.endpoint_id, cmd.pattern)

    async def on_trigger_action(self, sid: str, data: Any) -> None:
        try:
            cmd = TriggerActionCommand(**data)
        except (ValidationError, TypeError) as e:
            logger.warning("Invalid %r from %r: %r (%s)", SocketEvent.TRIGGER_ACTION, sid, data, e)
            return
        await self.dispatcher.trigger_action(cmd.endpoint_id)
