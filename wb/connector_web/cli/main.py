#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import asyncio
import logging
import sys
from enum import IntEnum

from wb.connector_web.lib.constants import (
    ASYNC_RESPONSE_ID_KEY,
    ResourcePath,
    WB_CONNECTOR_WEB_CLI_LOGGER_NAME,
)
from wb.connector_web.lib.load_config import ConfigError, load_server_config
from wb.connector_web.server.cloud.connector_http import ConnectorHttpClient
from wb.connector_web.server.errors import TransportError, UpstreamStatusError
from wb.connector_web.server.main import serve, setup_logging


# Exit codes for CLI commands
class ExitCode(IntEnum):
    # Common linux codes (0-9)
    GEN_SUCCESS = 0  # Generic success for any command
    GEN_ERROR = 1  # Unexpected errors (no internet, server not reachable, etc)
    INIT_ERROR = 2  # Initialization errors (no token, bad config, etc)

    # Register callback command (10-19)
    REGISTER_FAILED = 10
    REGISTER_REJECTED = 11

    # Read command (20-29)
    READ_FAILED = 20
    READ_REJECTED = 21
    READ_NO_ASYNC_ID = 22


REGISTER_CALLBACK_PREF = "Register callback result:"
READ_RESULT_PREF = "Read result:"

logger = logging.getLogger(WB_CONNECTOR_WEB_CLI_LOGGER_NAME)
logger.setLevel(logging.INFO)


def _make_client(cfg) -> ConnectorHttpClient:
    return ConnectorHttpClient(api_url=cfg.api_url, token=cfg.token, timeout=cfg.request_timeout)


async def register_callback(cfg, url=None):
    """Register notification callback url on the connector."""
    url = url or cfg.callback_url
    if not url:
        logger.error("%s failed (no callback url)", REGISTER_CALLBACK_PREF)
        print("%s failed (no callback url)" % REGISTER_CALLBACK_PREF)
        return ExitCode.INIT_ERROR

    client = _make_client(cfg)
    try:
        status_code = await client.register_callback(url)
    except UpstreamStatusError as e:
        logger.error("%s rejected %r", REGISTER_CALLBACK_PREF, e)
        print("%s rejected (server error %s)" % (REGISTER_CALLBACK_PREF, e.status_code))
        return ExitCode.REGISTER_REJECTED
    except TransportError as e:
        logger.error("%s failed %r", REGISTER_CALLBACK_PREF, e)
        print("%s failed (no internet, server not reachable, etc)" % REGISTER_CALLBACK_PREF)
        return ExitCode.REGISTER_FAILED
    finally:
        await client.close()

    logger.info("%s successful (%s, status %s)", REGISTER_CALLBACK_PREF, url, status_code)
    print("%s successful" % REGISTER_CALLBACK_PREF)
    return ExitCode.GEN_SUCCESS


async def read_resource(cfg, endpoint_id, path):
    """Issue one async read and print its async-response-id."""
    client = _make_client(cfg)
    try:
        response = await client.read(endpoint_id, path)
    except UpstreamStatusError as e:
        logger.error("%s rejected %r", READ_RESULT_PREF, e)
        print("%s rejected (server error %s)" % (READ_RESULT_PREF, e.status_code))
        return ExitCode.READ_REJECTED
    except TransportError as e:
        logger.error("%s failed %r", READ_RESULT_PREF, e)
        print("%s failed (no internet, server not reachable, etc)" % READ_RESULT_PREF)
        return ExitCode.READ_FAILED
    finally:
        await client.close()

    async_id = response.get(ASYNC_RESPONSE_ID_KEY)
    if not async_id:
        logger.error("%s no %s in %r", READ_RESULT_PREF, ASYNC_RESPONSE_ID_KEY, response)
        print("%s failed (no %s)" % (READ_RESULT_PREF, ASYNC_RESPONSE_ID_KEY))
        return ExitCode.READ_NO_ASYNC_ID

    print("%s %s" % (READ_RESULT_PREF, async_id))
    return ExitCode.GEN_SUCCESS


def build_parser():
    parser = argparse.ArgumentParser(
        prog='wb-connector-web',
        description='Bridge mbed Device Connector callbacks to web clients',
        usage='wb-connector-web [-h] [--config PATH] <command>',
        add_help=False,
        epilog="""
Example:
  TOKEN=xxx wb-connector-web serve
  TOKEN=xxx wb-connector-web register-callback --url http://my-host:6500/notification
"""
    )

    parser.add_argument(
        '-h', '--help',
        action='help',
        help='Show this help message and exit'
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Path to JSON configuration file'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        title='Available commands',
        metavar='<command>          '
    )

    subparsers.add_parser(
        'serve',
        help='Run HTTP and Socket.IO server'
    )
    register = subparsers.add_parser(
        'register-callback',
        help='Register notification callback url'
    )
    register.add_argument('--url', default=None, help='Callback url (default: from config)')

    read = subparsers.add_parser(
        'read',
        help='Issue async read and print async-response-id'
    )
    read.add_argument('endpoint', help='Endpoint name')
    read.add_argument('--path', default=ResourcePath.BUTTON_COUNTER, help='Resource path')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return ExitCode.INIT_ERROR

    setup_logging()
    try:
        cfg = load_server_config(args.config)
    except ConfigError as e:
        logger.error("%s", e)
        print("Configuration error: %s" % e)
        return ExitCode.INIT_ERROR
    setup_logging(cfg.log_level)

    if args.command == "serve":
        serve(cfg)
        return ExitCode.GEN_SUCCESS
    if args.command == "register-callback":
        return int(asyncio.run(register_callback(cfg, args.url)))
    if args.command == "read":
        return int(asyncio.run(read_resource(cfg, args.endpoint, args.path)))
    parser.print_help()
    return ExitCode.INIT_ERROR


if __name__ == "__main__":
    sys.exit(int(main()))
