import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError

from .constants import (
    CONNECTOR_API_URL,
    DEFAULT_HOST,
    DEFAULT_PORT,
    REQUEST_TIMEOUT,
    SERVER_CONFIG_ENV,
    SERVER_CONFIG_PATH,
    STATUS_TIMEOUT,
)

logger = logging.getLogger(__name__)

# Environment variable -> ServerConfig field
ENV_OVERRIDES = {
    "TOKEN": "token",
    "IP": "host",
    "PORT": "port",
    "CALLBACK_URL": "callback_url",
    "CONNECTOR_API_URL": "api_url",
    "STATUS_TIMEOUT": "status_timeout",
    "LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    """Configuration is missing or invalid, server can't start"""


class ServerConfig(BaseModel):
    token: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    api_url: str = CONNECTOR_API_URL
    callback_url: Optional[str] = None
    status_timeout: float = STATUS_TIMEOUT
    request_timeout: float = REQUEST_TIMEOUT
    log_level: str = "INFO"  # Possible values: "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
    template_path: Optional[str] = None


def read_config_file(path: Path) -> dict:
    """Read optional JSON configuration file, missing file means empty config"""

    logger.debug("Reading server configuration file %r...", str(path))
    if not path.exists():
        logger.debug("Configuration file %r not found, using defaults", str(path))
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError("Invalid JSON in configuration file %r: %s" % (str(path), e)) from e

    if not isinstance(data, dict):
        raise ConfigError("Configuration file %r must contain a JSON object" % str(path))
    return data


def load_server_config(
    path: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ServerConfig:
    """
    Build server configuration

    Sources, lowest precedence first:
      - ServerConfig defaults
      - JSON file (path argument, $CONNECTOR_WEB_CONFIG or SERVER_CONFIG_PATH)
      - environment variables from ENV_OVERRIDES

    Raises ConfigError when the authorization token is missing
    """
    if env is None:
        env = os.environ
    if path is None:
        path = env.get(SERVER_CONFIG_ENV, SERVER_CONFIG_PATH)

    raw = read_config_file(Path(path))
    for env_name, field in ENV_OVERRIDES.items():
        value = env.get(env_name)
        if value:
            raw[field] = value

    if not raw.get("token"):
        raise ConfigError(
            "Need to pass in TOKEN as env. variable or 'token' in %r" % str(path)
        )

    try:
        return ServerConfig(**raw)
    except ValidationError as e:
        raise ConfigError("Invalid server configuration: %s" % e) from e
