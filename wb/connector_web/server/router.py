#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from ..lib.constants import ASYNC_RESPONSES_KEY, NOTIFICATIONS_KEY
from .codec import decode_base64, schema_for_notification
from .correlation import CorrelationTable
from .errors import DecodeError
from .models import AsyncResponseEntry, AsyncResponseEnvelope, Notification, NotificationEntry
from .relay import FanOutRelay

logger = logging.getLogger(__name__)


class NotificationRouter:
    """
    Demultiplexes callback bodies from the remote platform

    Responsibilities:
      1) async-responses: decode each payload and resolve the waiting read
         in the CorrelationTable
      2) notifications: decode each payload with the endpoint schema and
         publish the value through the FanOutRelay

    Notes:
      - handle() never raises: the platform drops the whole callback channel
        on any non-2xx answer, so the HTTP layer must always reply 200
      - every entry is processed in isolation, a broken one is logged and skipped
      - entries are processed in arrival order
    """

    def __init__(self, table: CorrelationTable, relay: FanOutRelay) -> None:
        self.table = table
        self.relay = relay

    async def handle(self, body: Any) -> None:
        if not isinstance(body, dict):
            logger.warning("Ignoring callback body of type %s", type(body).__name__)
            return

        async_responses = body.get(ASYNC_RESPONSES_KEY)
        notifications = body.get(NOTIFICATIONS_KEY)

        if async_responses:
            logger.info("Received %d async response(s)", _count(async_responses))
            for entry in _as_list(async_responses, ASYNC_RESPONSES_KEY):
                await self._handle_async_response(entry)

        if notifications:
            logger.info("Received %d notification(s)", _count(notifications))
            for entry in _as_list(notifications, NOTIFICATIONS_KEY):
                self._handle_notification(entry)

        if not async_responses and not notifications:
            logger.debug("Empty callback body: %r", body)

    async def _handle_async_response(self, raw: Any) -> None:
        try:
            envelope = decode_async_response(raw)
            if envelope is None:
                return
            if not await self.table.resolve(envelope.async_id, envelope.payload):
                logger.info("No pending read for async response %r", envelope.async_id)
        except (DecodeError, ValidationError, TypeError) as e:
            logger.warning("Skipping async response entry %r: %s", raw, e)
        except Exception:
            logger.exception("Unexpected error on async response entry %r", raw)

    def _handle_notification(self, raw: Any) -> None:
        try:
            notification = decode_notification(raw)
            if notification is None:
                return
            logger.info(
                "New event for %r %r: %r",
                notification.endpoint_id,
                notification.path,
                notification.value,
            )
            self.relay.publish(notification.endpoint_id, notification.value)
        except (DecodeError, ValidationError, TypeError) as e:
            logger.warning("Skipping notification entry %r: %s", raw, e)
        except Exception:
            logger.exception("Unexpected error on notification entry %r", raw)


def decode_async_response(raw: Any) -> AsyncResponseEnvelope | None:
    """Returns None for entries without payload (nothing to deliver)"""
    entry = AsyncResponseEntry(**raw)
    if not entry.payload:
        logger.debug("Async response %r has no payload (status=%r)", entry.id, entry.status)
        return None
    return AsyncResponseEnvelope(async_id=entry.id, payload=decode_base64(entry.payload))


def decode_notification(raw: Any) -> Notification | None:
    """Returns None for entries without payload"""
    entry = NotificationEntry(**raw)
    if not entry.payload:
        logger.debug("Notification %r %r has no payload", entry.ep, entry.path)
        return None
    payload = decode_base64(entry.payload)
    schema = schema_for_notification(entry.path)
    return Notification(
        endpoint_id=entry.ep,
        path=entry.path,
        raw=payload,
        value=schema.decode(payload),
    )


def _as_list(entries: Any, key: str) -> Iterable[Any]:
    if isinstance(entries, list):
        return entries
    logger.warning("Callback key %r must hold a list, got %s", key, type(entries).__name__)
    return []


def _count(entries: Any) -> int:
    return len(entries) if isinstance(entries, list) else 0
