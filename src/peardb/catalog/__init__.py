"""
PearDB Catalog Subsystem

Typed access to the AppleDB device and firmware catalog, in synchronous
(requests) and asynchronous (aiohttp) flavours.
"""

from .async_client import AsyncCatalogClient
from .client import CatalogClient
from .interfaces import DeviceRecord, FirmwareRecord

__all__ = [
    "AsyncCatalogClient",
    "CatalogClient",
    "DeviceRecord",
    "FirmwareRecord",
]
