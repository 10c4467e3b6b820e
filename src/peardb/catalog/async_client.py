"""
Async Catalog Client for PearDB

This module provides the asynchronous counterpart of CatalogClient using
aiohttp, so catalog fetches suspend only at the network boundary while the
selection workflow keeps running on its event loop.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from peardb.constants import (
    APPLEDB_API_BASE,
    DEFAULT_FIRMWARE_PLATFORM,
    DEFAULT_REQUEST_TIMEOUT,
)
from peardb.exceptions import DecodeError, NetworkError
from peardb.log_utils import logger
from peardb.utils import get_user_agent, is_http_url

from .client import device_list_url, device_url, firmware_catalog_url, parse_json_body
from .interfaces import (
    DeviceRecord,
    FirmwareRecord,
    decode_device_list,
    decode_firmware_list,
)


class AsyncCatalogClient:
    """
    Asynchronous AppleDB catalog client using aiohttp.

    Example:
        async with AsyncCatalogClient() as client:
            device = await client.fetch_device("iPhone14,2")
    """

    def __init__(
        self,
        base_url: str = APPLEDB_API_BASE,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """
        Initialize the async catalog client.

        Parameters:
            base_url (str): Root URL of the catalog API.
            timeout (float): Total timeout for each request in seconds.
        """
        self.base_url = base_url
        self.timeout = ClientTimeout(total=timeout)
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "AsyncCatalogClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        """
        Ensure a session exists, creating one if needed.

        Returns:
            ClientSession: The active aiohttp session.
        """
        if self._session is None or self._session.closed:
            self._session = ClientSession(
                timeout=self.timeout,
                headers=self._get_default_headers(),
            )
        return self._session

    def _get_default_headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "User-Agent": get_user_agent()}

    async def close(self) -> None:
        """Close the client session and release resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, url: str) -> Any:
        """
        Issue a GET request and return the decoded JSON body.

        Raises:
            NetworkError: On unsupported URLs, transport failures or non-success status.
            EmptyResponseError: If the response body is empty.
            DecodeError: If the body is not valid JSON.
        """
        if not is_http_url(url):
            raise NetworkError(f"Unsupported or invalid catalog URL: {url}", url=url)

        session = await self._ensure_session()
        logger.debug(f"Fetching catalog document {url}")
        try:
            async with session.get(url) as response:
                if response.status >= 400:
                    raise NetworkError(
                        f"Catalog request failed with status {response.status}",
                        url=url,
                        status_code=response.status,
                    )
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(
                "Catalog request failed", url=url, details=str(e) or type(e).__name__
            ) from e

        return parse_json_body(body, url)

    async def fetch_device(self, identifier: str) -> DeviceRecord:
        """
        Fetch the device document stored under `identifier`.

        Raises:
            NetworkError, EmptyResponseError, DecodeError
        """
        url = device_url(self.base_url, identifier)
        data = await self._get_json(url)
        try:
            return DeviceRecord.from_dict(data)
        except DecodeError as e:
            e.url = url
            raise

    async def fetch_firmware_catalog(
        self, platform: str = DEFAULT_FIRMWARE_PLATFORM
    ) -> List[FirmwareRecord]:
        """
        Fetch the full, unfiltered firmware catalog for `platform`.

        Raises:
            NetworkError, EmptyResponseError, DecodeError
        """
        url = firmware_catalog_url(self.base_url, platform)
        data = await self._get_json(url)
        try:
            entries = decode_firmware_list(data)
        except DecodeError as e:
            e.url = url
            raise
        logger.debug(f"Fetched {len(entries)} firmware entries for {platform}")
        return entries

    async def fetch_device_list(self) -> List[DeviceRecord]:
        """
        Fetch every device document the catalog knows about.

        Raises:
            NetworkError, EmptyResponseError, DecodeError
        """
        url = device_list_url(self.base_url)
        data = await self._get_json(url)
        try:
            devices = decode_device_list(data)
        except DecodeError as e:
            e.url = url
            raise
        logger.debug(f"Fetched {len(devices)} devices")
        return devices
