from .base import DeviceCloudClient
from .connector_http import ConnectorHttpClient

__all__ = ["DeviceCloudClient", "ConnectorHttpClient"]
