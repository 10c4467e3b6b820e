"""
Tests for the synchronous catalog client.
"""

import json
from unittest.mock import Mock, patch

import pytest
import requests

from peardb.catalog.client import (
    CatalogClient,
    device_list_url,
    device_url,
    firmware_catalog_url,
    parse_json_body,
)
from peardb.exceptions import DecodeError, EmptyResponseError, NetworkError


def _response(payload=None, content=None, status_code=200):
    response = Mock()
    response.status_code = status_code
    if content is None:
        content = json.dumps(payload).encode("utf-8")
    response.content = content
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} Error", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


class TestUrls:
    def test_device_url(self):
        assert (
            device_url("https://api.appledb.dev/", "iPhone14,2-2021")
            == "https://api.appledb.dev/device/iPhone14,2-2021.json"
        )

    def test_firmware_catalog_url(self):
        assert (
            firmware_catalog_url("https://api.appledb.dev", "ios")
            == "https://api.appledb.dev/ios/main.json"
        )

    def test_device_list_url(self):
        assert (
            device_list_url("https://api.appledb.dev")
            == "https://api.appledb.dev/device/main.json"
        )


class TestParseJsonBody:
    def test_empty_body(self):
        with pytest.raises(EmptyResponseError):
            parse_json_body(b"", "https://x.test/a.json")

    def test_whitespace_body(self):
        with pytest.raises(EmptyResponseError):
            parse_json_body(b"  \n", "https://x.test/a.json")

    def test_invalid_json(self):
        with pytest.raises(DecodeError) as exc_info:
            parse_json_body(b"<html>", "https://x.test/a.json")
        assert exc_info.value.url == "https://x.test/a.json"


class TestCatalogClient:
    def test_fetch_device(self, iphone_device_data):
        client = CatalogClient()
        with patch(
            "peardb.catalog.client.requests.get",
            return_value=_response(iphone_device_data),
        ) as mock_get:
            device = client.fetch_device("iPhone14,2-2021")

        assert device.name == "iPhone 13 Pro"
        args, kwargs = mock_get.call_args
        assert args[0] == "https://api.appledb.dev/device/iPhone14,2-2021.json"
        assert kwargs["timeout"] == client.timeout_seconds
        assert kwargs["headers"]["User-Agent"].startswith("peardb/")

    def test_fetch_firmware_catalog(self, firmware_catalog_data):
        client = CatalogClient(base_url="https://mirror.example")
        with patch(
            "peardb.catalog.client.requests.get",
            return_value=_response(firmware_catalog_data),
        ) as mock_get:
            entries = client.fetch_firmware_catalog("ios")

        assert len(entries) == len(firmware_catalog_data)
        assert mock_get.call_args[0][0] == "https://mirror.example/ios/main.json"

    def test_fetch_device_list(self, iphone_device_data, multi_board_device_data):
        client = CatalogClient()
        with patch(
            "peardb.catalog.client.requests.get",
            return_value=_response([iphone_device_data, multi_board_device_data]),
        ):
            devices = client.fetch_device_list()

        assert [d.name for d in devices] == ["iPhone 13 Pro", "iPhone 15"]

    def test_uses_injected_session(self, iphone_device_data):
        session = Mock()
        session.get.return_value = _response(iphone_device_data)
        client = CatalogClient(session=session)

        client.fetch_device("iPhone14,2")

        session.get.assert_called_once()

    def test_transport_failure_is_network_error(self):
        client = CatalogClient()
        with patch(
            "peardb.catalog.client.requests.get",
            side_effect=requests.exceptions.ConnectionError("boom"),
        ):
            with pytest.raises(NetworkError) as exc_info:
                client.fetch_device("iPhone14,2")

        assert exc_info.value.url.endswith("/device/iPhone14,2.json")
        assert exc_info.value.status_code is None

    def test_http_error_is_network_error_with_status(self):
        client = CatalogClient()
        with patch(
            "peardb.catalog.client.requests.get",
            return_value=_response({}, status_code=404),
        ):
            with pytest.raises(NetworkError) as exc_info:
                client.fetch_device("Nope1,1")

        assert exc_info.value.status_code == 404

    def test_empty_body_is_empty_response(self):
        client = CatalogClient()
        with patch(
            "peardb.catalog.client.requests.get",
            return_value=_response(content=b""),
        ):
            with pytest.raises(EmptyResponseError):
                client.fetch_firmware_catalog("ios")

    def test_schema_mismatch_is_decode_error(self):
        client = CatalogClient()
        with patch(
            "peardb.catalog.client.requests.get",
            return_value=_response({"name": "no key"}),
        ):
            with pytest.raises(DecodeError) as exc_info:
                client.fetch_device("iPhone14,2")

        assert exc_info.value.url.endswith("/device/iPhone14,2.json")

    def test_unsupported_scheme_is_rejected_without_request(self):
        client = CatalogClient(base_url="file:///tmp")
        with patch("peardb.catalog.client.requests.get") as mock_get:
            with pytest.raises(NetworkError):
                client.fetch_device_list()
        mock_get.assert_not_called()
