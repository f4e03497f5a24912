#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import TransportError, UpstreamStatusError
from ..models import CallbackRegistration
from .base import DeviceCloudClient

logger = logging.getLogger(__name__)


class ConnectorHttpClient(DeviceCloudClient):
    """
    mbed Device Connector REST API over httpx

    Endpoints used:
      GET  /endpoints/{ep}{path}       read (async)
      PUT  /endpoints/{ep}{path}       write
      POST /endpoints/{ep}{path}       execute
      PUT  /subscriptions/{ep}{path}   subscribe
      PUT  /notification/callback      register callback url
    """

    def __init__(
        self,
        *,
        api_url: str,
        token: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {"Authorization": "Bearer %s" % token}

    async def _request(
        self,
        method: str,
        url_path: str,
        *,
        content: Optional[str] = None,
        json: Any = None,
    ) -> httpx.Response:
        url = self.api_url + url_path
        try:
            r = await self._client.request(
                method, url, headers=self._headers, content=content, json=json
            )
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %r", method, url, e)
            raise TransportError("%s %s failed: %s" % (method, url, e)) from e

        logger.debug("%s %s -> %s %r", method, url, r.status_code, r.text)
        if not r.is_success:
            raise UpstreamStatusError(r.status_code, r.text)
        return r

    async def read(self, endpoint_id: str, path: str) -> Dict[str, Any]:
        r = await self._request("GET", "/endpoints/%s%s" % (endpoint_id, path))
        try:
            data = r.json()
        except ValueError:
            raise UpstreamStatusError(
                r.status_code, r.text, "Connector returned non-JSON read response: %r" % r.text
            ) from None
        if not isinstance(data, dict):
            raise UpstreamStatusError(
                r.status_code, r.text, "Connector returned unexpected read response: %r" % r.text
            )
        return data

    async def subscribe(self, endpoint_id: str, path: str) -> int:
        r = await self._request("PUT", "/subscriptions/%s%s" % (endpoint_id, path))
        return r.status_code

    async def write(self, endpoint_id: str, path: str, body: str) -> int:
        r = await self._request("PUT", "/endpoints/%s%s" % (endpoint_id, path), content=body)
        return r.status_code

    async def execute(self, endpoint_id: str, path: str, body: Optional[str] = None) -> int:
        r = await self._request("POST", "/endpoints/%s%s" % (endpoint_id, path), content=body)
        return r.status_code

    async def register_callback(self, url: str) -> int:
        body = CallbackRegistration(url=url).model_dump()
        r = await self._request("PUT", "/notification/callback", json=body)
        return r.status_code

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except Exception:
            logger.exception("Connector http client close failed")
