#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Connector web bridge server

Usage:
    TOKEN=xxx CALLBACK_URL=http://my-host:6500/notification python3 -m wb.connector_web.server.main
"""

import logging
import sys
from typing import Optional

import uvicorn

from ..lib.load_config import ConfigError, ServerConfig, load_server_config
from .app import AppContext

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.captureWarnings(True)


def serve(config: ServerConfig) -> None:
    ctx = AppContext(config)
    logger.info("Listening on %s:%d", config.host, config.port)
    uvicorn.run(ctx.asgi_app, host=config.host, port=config.port, log_config=None)


def main(config_path: Optional[str] = None) -> int:
    setup_logging()
    try:
        config = load_server_config(config_path)
    except ConfigError as e:
        logger.critical("%s", e)
        return 2

    setup_logging(config.log_level)
    serve(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
