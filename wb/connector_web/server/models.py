#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, Field


# Callback entries from the remote platform (PUT /notification)


class AsyncResponseEntry(BaseModel):
    id: str
    status: Optional[int] = None
    payload: Optional[str] = None


class NotificationEntry(BaseModel):
    ep: str
    path: str
    payload: Optional[str] = None


class CallbackRegistration(BaseModel):
    url: str


# Commands from browser clients (Socket.IO)


class SetValueCommand(BaseModel):
    endpoint_id: str = Field(alias="id")
    value: Any


class SetPatternCommand(BaseModel):
    endpoint_id: str = Field(alias="id")
    pattern: str


class TriggerActionCommand(BaseModel):
    endpoint_id: str = Field(alias="id")


@dataclass(frozen=True)
class AsyncResponseEnvelope:
    """Decoded async response, consumed on arrival"""

    async_id: str
    payload: bytes


@dataclass(frozen=True)
class Notification:
    """
    Decoded unsolicited device event

    Fields:
      - endpoint_id: device endpoint name (e.g. "device-1")
      - path: resource path (e.g. "/3200/0/5501")
      - raw: payload bytes after base64 decoding
      - value: display value per endpoint schema
    """

    endpoint_id: str
    path: str
    raw: bytes
    value: Any


@dataclass(frozen=True)
class StatusResult:
    endpoint_id: str
    path: str
    value: Any
