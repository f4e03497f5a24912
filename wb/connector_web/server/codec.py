#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..lib.constants import ResourcePath
from .errors import DecodeError

logger = logging.getLogger(__name__)


def decode_base64(raw: Any) -> bytes:
    """
    Wire payloads from the remote platform are base64 strings

    Line breaks, blanks and missing "=" padding are tolerated, any other
    character outside the base64 alphabet is an error
    """
    if not isinstance(raw, str):
        raise DecodeError("Payload must be a non-empty base64 string, got %r" % (raw,))
    text = "".join(raw.split())
    if not text:
        raise DecodeError("Payload must be a non-empty base64 string, got %r" % (raw,))
    text += "=" * (-len(text) % 4)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("Invalid base64 payload %r: %s" % (raw, e)) from e


def decode_counter(payload: bytes) -> int:
    """2-byte big-endian counter: (byte0 << 8) + byte1"""
    if len(payload) < 2:
        raise DecodeError("Counter payload needs 2 bytes, got %d" % len(payload))
    return (payload[0] << 8) + payload[1]


def decode_text(payload: bytes) -> str:
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("Payload is not valid UTF-8: %r" % payload) from e


@dataclass(frozen=True)
class EndpointSchema:
    """
    How to read one device resource

    Fields:
      - path: LWM2M resource path (e.g. "/3200/0/5501")
      - decode: raw callback bytes -> display value
      - name: human readable label for logs
    """

    path: str
    decode: Callable[[bytes], Any]
    name: str


BUTTON_COUNTER = EndpointSchema(ResourcePath.BUTTON_COUNTER, decode_counter, "button counter")
LED_COLOR = EndpointSchema(ResourcePath.LED_COLOR, decode_text, "led color")
BLINK_PATTERN = EndpointSchema(ResourcePath.BLINK_PATTERN, decode_text, "blink pattern")

SCHEMAS: Dict[str, EndpointSchema] = {
    s.path: s for s in (BUTTON_COUNTER, LED_COLOR, BLINK_PATTERN)
}


def normalize_path(path: str) -> str:
    return "/" + path.strip("/")


def get_schema(path: str) -> Optional[EndpointSchema]:
    return SCHEMAS.get(normalize_path(path))


def schema_for_notification(path: str) -> EndpointSchema:
    """Notifications for unknown resources are shown as text"""
    schema = get_schema(path)
    if schema is None:
        logger.debug("No schema for %r, decoding as UTF-8 text", path)
        return EndpointSchema(normalize_path(path), decode_text, "text")
    return schema
