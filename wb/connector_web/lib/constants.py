"""
  File with all constants in project
"""


class ResourcePath:
    """LWM2M resource paths exposed by the demo device firmware"""
    BUTTON_COUNTER = "/3200/0/5501"
    LED_COLOR = "/Test5/0/D"
    BLINK_ACTION = "/3201/0/5850"
    BLINK_PATTERN = "/3201/0/5853"


class SocketEvent:
    """Socket.IO events sent by browser clients"""
    SET_VALUE = "set-value"
    TRIGGER_ACTION = "trigger-action"
    SET_PATTERN = "set-pattern"


# Remote platform
CONNECTOR_API_URL = "https://api.connector.mbed.com"
ASYNC_RESPONSE_ID_KEY = "async-response-id"
ASYNC_RESPONSES_KEY = "async-responses"
NOTIFICATIONS_KEY = "notifications"
# Timeouts (seconds)
STATUS_TIMEOUT = 5.0
REQUEST_TIMEOUT = 10.0
# Listen defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 6500
# Configuration file paths
SERVER_CONFIG_PATH = "/etc/wb-connector-web.conf"
SERVER_CONFIG_ENV = "CONNECTOR_WEB_CONFIG"
# For logging to syslog/journald with name "wb-connector-web-cli"
WB_CONNECTOR_WEB_CLI_LOGGER_NAME = "wb-connector-web-cli"
