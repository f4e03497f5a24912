#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
HTTP + Socket.IO application

Routes:
  GET /                               liveness greeting
  GET /status/{endpoint_id}           button counter status page
  GET /status/{endpoint_id}/{path}    status page for any known resource
  PUT /notification                   callback from the remote platform
"""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Any, AsyncIterator, Optional

import socketio
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from ..lib.load_config import ServerConfig
from .cloud.base import DeviceCloudClient
from .cloud.connector_http import ConnectorHttpClient
from .codec import BUTTON_COUNTER, EndpointSchema, get_schema
from .commands import CommandDispatcher
from .correlation import CorrelationTable
from .errors import (
    CallbackTimeoutError,
    ConnectorError,
    DecodeError,
    DuplicateIdError,
    TransportError,
    UpstreamStatusError,
)
from .relay import FanOutRelay
from .router import NotificationRouter
from .sio_handlers import SocketIOHandlers
from .status import StatusRequestHandler
from .view import load_template, render_status_page

logger = logging.getLogger(__name__)

# Callback body preview length in logs
BODY_PREVIEW_LEN = 200


class AppContext:
    """
    All long-lived components of one server instance

      - table: CorrelationTable shared by status requests and callbacks
      - relay: FanOutRelay over the Socket.IO server
      - router / status / dispatcher: bridge components
      - app: FastAPI application (HTTP routes only)
      - asgi_app: Socket.IO wrapped around app, this is what uvicorn serves
    """

    def __init__(
        self,
        config: ServerConfig,
        *,
        cloud: Optional[DeviceCloudClient] = None,
        sio: Optional[Any] = None,
    ) -> None:
        self.config = config
        self.cloud = cloud or ConnectorHttpClient(
            api_url=config.api_url,
            token=config.token,
            timeout=config.request_timeout,
        )
        self.sio = sio or socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")

        self.table = CorrelationTable()
        self.relay = FanOutRelay(self.sio)
        self.router = NotificationRouter(self.table, self.relay)
        self.status = StatusRequestHandler(self.cloud, self.table, timeout=config.status_timeout)
        self.dispatcher = CommandDispatcher(self.cloud, self.relay)
        self.sio_handlers = SocketIOHandlers(relay=self.relay, dispatcher=self.dispatcher)
        self.sio_handlers.register(self.sio)

        self.template = load_template(config.template_path)
        self.app = build_fastapi_app(self)
        self.asgi_app = socketio.ASGIApp(self.sio, other_asgi_app=self.app)

    async def register_callback(self) -> bool:
        url = self.config.callback_url
        if not url:
            logger.warning("No callback_url configured, notifications won't be delivered")
            return False
        try:
            status = await self.cloud.register_callback(url)
        except ConnectorError as e:
            logger.error("Failed to register notification callback %r: %s", url, e)
            return False
        logger.info("Registered notification callback %r (status=%r)", url, status)
        return True

    async def shutdown(self) -> None:
        await self.table.cancel_all()
        await self.status.drain()
        await self.relay.drain()
        await self.cloud.close()


def status_error(exc: ConnectorError) -> HTTPException:
    """Map bridge errors of a status request to an HTTP error"""
    if isinstance(exc, CallbackTimeoutError):
        return HTTPException(status_code=HTTPStatus.GATEWAY_TIMEOUT, detail=str(exc))
    if isinstance(exc, UpstreamStatusError):
        return HTTPException(
            status_code=HTTPStatus.BAD_GATEWAY,
            detail={
                "message": str(exc),
                "upstream_status": exc.status_code,
                "upstream_body": exc.body,
            },
        )
    if isinstance(exc, (TransportError, DecodeError, DuplicateIdError)):
        return HTTPException(status_code=HTTPStatus.BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=str(exc))


def build_fastapi_app(ctx: AppContext) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await ctx.register_callback()
        try:
            yield
        finally:
            await ctx.shutdown()

    app = FastAPI(
        title="Connector Web Bridge",
        version="1.0.0",
        lifespan=lifespan,
    )

    async def render_status(endpoint_id: str, schema: EndpointSchema) -> HTMLResponse:
        try:
            result = await ctx.status.read_status(endpoint_id, schema)
        except ConnectorError as e:
            logger.error("Status request for %s%s failed: %s", endpoint_id, schema.path, e)
            raise status_error(e) from e
        return HTMLResponse(render_status_page(ctx.template, result.endpoint_id, result.value))

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return "Hello from connector-web!"

    @app.get("/status/{endpoint_id}", response_class=HTMLResponse)
    async def get_status(endpoint_id: str):
        """Number of button clicks of a device"""
        return await render_status(endpoint_id, BUTTON_COUNTER)

    @app.get("/status/{endpoint_id}/{resource_path:path}", response_class=HTMLResponse)
    async def get_resource_status(endpoint_id: str, resource_path: str):
        schema = get_schema(resource_path)
        if schema is None:
            raise HTTPException(
                status_code=HTTPStatus.NOT_FOUND,
                detail="Unknown resource path %r" % resource_path,
            )
        return await render_status(endpoint_id, schema)

    @app.put("/notification", response_class=PlainTextResponse)
    async def notification(request: Request):
        """
        Callback from the remote platform

        Always answers 200 OK: on any other status the platform drops the
        callback channel and stops sending notifications for a while
        """
        raw = await request.body()
        try:
            body = json.loads(raw)
        except (ValueError, RecursionError) as e:
            # RecursionError: nesting deeper than the json decoder can follow
            logger.warning(
                "Callback body is not valid JSON (%s): %r", e, raw[:BODY_PREVIEW_LEN]
            )
            return "OK"

        try:
            await ctx.router.handle(body)
        except Exception:
            logger.exception("Unexpected error handling callback body")
        return "OK"

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """
        Logs the error with a correlation error_id and returns it to the caller
        """
        error_id = str(uuid.uuid4())
        logger.exception(
            "[%r] Unhandled error on %r %r: %r",
            error_id,
            request.method,
            request.url.path,
            exc,
        )
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={
                "detail": "%s: %s (error_id=%s)" % (type(exc).__name__, exc, error_id),
                "message": "Internal server error. See server logs.",
                "path": str(request.url.path),
                "error_id": error_id,
            },
        )

    return app
