# cloud/base.py

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class DeviceCloudClient(ABC):
    """
    Abstract interface for the remote device-cloud API

    All calls are single attempts: implementations raise TransportError when
    the request could not be made and UpstreamStatusError on non-2xx answers
    """

    @abstractmethod
    async def read(self, endpoint_id: str, path: str) -> Dict[str, Any]:
        """
        Request a resource value. The value itself arrives later via callback,
        the response only carries {"async-response-id": ...}
        """
        pass

    @abstractmethod
    async def subscribe(self, endpoint_id: str, path: str) -> int:
        """
        Ask the platform to push future changes of a resource as notifications
        """
        pass

    @abstractmethod
    async def write(self, endpoint_id: str, path: str, body: str) -> int:
        """
        Write a text value to a resource
        """
        pass

    @abstractmethod
    async def execute(self, endpoint_id: str, path: str, body: Optional[str] = None) -> int:
        """
        Execute a resource (LWM2M POST)
        """
        pass

    @abstractmethod
    async def register_callback(self, url: str) -> int:
        """
        Tell the platform where to deliver notifications
        """
        pass

    async def close(self) -> None:
        """
        Release transport resources
        """
        pass
