"""
Catalog Client

Synchronous read-only access to the AppleDB JSON catalog using requests.
Every failure is mapped onto the catalog error taxonomy (NetworkError,
EmptyResponseError, DecodeError); nothing is retried.
"""

import json
from typing import Any, Dict, List, Optional

import requests

from peardb.constants import (
    APPLEDB_API_BASE,
    DEFAULT_FIRMWARE_PLATFORM,
    DEFAULT_REQUEST_TIMEOUT,
    DEVICE_DOCUMENT_PATH,
    DEVICE_LIST_PATH,
    FIRMWARE_CATALOG_PATH,
)
from peardb.exceptions import DecodeError, EmptyResponseError, NetworkError
from peardb.log_utils import logger
from peardb.utils import get_user_agent, is_http_url

from .interfaces import (
    DeviceRecord,
    FirmwareRecord,
    decode_device_list,
    decode_firmware_list,
)


def build_catalog_url(base_url: str, path: str) -> str:
    """Join the catalog base URL and a relative document path."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def device_url(base_url: str, identifier: str) -> str:
    return build_catalog_url(
        base_url, DEVICE_DOCUMENT_PATH.format(identifier=identifier)
    )


def firmware_catalog_url(base_url: str, platform: str) -> str:
    return build_catalog_url(base_url, FIRMWARE_CATALOG_PATH.format(platform=platform))


def device_list_url(base_url: str) -> str:
    return build_catalog_url(base_url, DEVICE_LIST_PATH)


def parse_json_body(body: bytes, url: str) -> Any:
    """
    Parse a raw response body into JSON.

    Raises:
        EmptyResponseError: If the body is empty or whitespace only.
        DecodeError: If the body is not valid JSON.
    """
    if not body or not body.strip():
        raise EmptyResponseError("Catalog returned an empty response", url=url)
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(
            "Catalog returned invalid JSON", url=url, details=str(e)
        ) from e


class CatalogClient:
    """
    Reads device and firmware documents from the AppleDB catalog.

    Example:
        client = CatalogClient()
        device = client.fetch_device("iPhone14,2")
        firmware = client.fetch_firmware_catalog("ios")
    """

    def __init__(
        self,
        base_url: str = APPLEDB_API_BASE,
        timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the CatalogClient.

        Args:
            base_url: Root URL of the catalog API
            timeout_seconds: Timeout for each request
            session: Optional requests session to issue requests through
        """
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.session = session

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "User-Agent": get_user_agent()}

    def _get_json(self, url: str) -> Any:
        """
        Issue a GET request and return the decoded JSON body.

        Raises:
            NetworkError: On unsupported URLs, transport failures or non-success status.
            EmptyResponseError: If the response body is empty.
            DecodeError: If the body is not valid JSON.
        """
        if not is_http_url(url):
            raise NetworkError(f"Unsupported or invalid catalog URL: {url}", url=url)

        logger.debug(f"Fetching catalog document {url}")
        getter = self.session.get if self.session is not None else requests.get
        try:
            response = getter(
                url, headers=self._headers(), timeout=self.timeout_seconds
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise NetworkError(
                f"Catalog request failed with status {status}",
                url=url,
                status_code=status,
                details=str(e),
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError("Catalog request failed", url=url, details=str(e)) from e

        return parse_json_body(response.content, url)

    def fetch_device(self, identifier: str) -> DeviceRecord:
        """
        Fetch the device document stored under `identifier`.

        Raises:
            NetworkError, EmptyResponseError, DecodeError
        """
        url = device_url(self.base_url, identifier)
        data = self._get_json(url)
        try:
            return DeviceRecord.from_dict(data)
        except DecodeError as e:
            e.url = url
            raise

    def fetch_firmware_catalog(
        self, platform: str = DEFAULT_FIRMWARE_PLATFORM
    ) -> List[FirmwareRecord]:
        """
        Fetch the full, unfiltered firmware catalog for `platform`.

        Raises:
            NetworkError, EmptyResponseError, DecodeError
        """
        url = firmware_catalog_url(self.base_url, platform)
        data = self._get_json(url)
        try:
            entries = decode_firmware_list(data)
        except DecodeError as e:
            e.url = url
            raise
        logger.debug(f"Fetched {len(entries)} firmware entries for {platform}")
        return entries

    def fetch_device_list(self) -> List[DeviceRecord]:
        """
        Fetch every device document the catalog knows about.

        Raises:
            NetworkError, EmptyResponseError, DecodeError
        """
        url = device_list_url(self.base_url)
        data = self._get_json(url)
        try:
            devices = decode_device_list(data)
        except DecodeError as e:
            e.url = url
            raise
        logger.debug(f"Fetched {len(devices)} devices")
        return devices
