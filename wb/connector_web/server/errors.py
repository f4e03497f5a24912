#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

from typing import Optional


class ConnectorError(Exception):
    """Base class for all bridge errors"""


class TransportError(ConnectorError):
    """Outbound call to the remote platform failed before a response arrived"""


class UpstreamStatusError(ConnectorError):
    """Remote platform answered with a non-2xx status"""

    def __init__(self, status_code: int, body: str = "", message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(
            message or "Unexpected statusCode from connector: %s %s" % (status_code, body)
        )


class CallbackTimeoutError(ConnectorError, TimeoutError):
    """No callback arrived for an async-response-id within its deadline"""

    def __init__(self, async_id: str, timeout: float) -> None:
        self.async_id = async_id
        self.timeout = timeout
        super().__init__(
            "No response within %gs for %r. Connector lost us, "
            "the notification channel may need re-registration" % (timeout, async_id)
        )


class DecodeError(ConnectorError, ValueError):
    """Callback payload is missing or can't be decoded with the endpoint schema"""


class DuplicateIdError(ConnectorError):
    """A waiter was registered twice for the same async-response-id"""

    def __init__(self, async_id: str) -> None:
        self.async_id = async_id
        super().__init__("Waiter for %r replaced by a newer registration" % async_id)
