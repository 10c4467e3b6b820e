from pathlib import Path

import platformdirs
import pytest
import requests

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


async def _async_block_network(*_args, **_kwargs):
    """
    Prevent async network calls during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG` suggesting to mock `aiohttp.ClientSession`.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test (auto-detected)"
    )
    config.addinivalue_line(
        "markers", "user_interface: tests for menus and command-line output"
    )


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs, XDG variables and peardb's config location at a temporary tree.
    """
    base = tmp_path_factory.mktemp("peardb")
    cache_dir = base / "cache"
    config_dir = base / "config"
    data_dir = base / "data"
    log_dir = base / "log"

    for path in (cache_dir, config_dir, data_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))
    monkeypatch.delenv("PEARDB_LOG_LEVEL", raising=False)

    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_data_dir", lambda *_args, **_kwargs: str(data_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )

    import peardb.config as peardb_config
    from peardb.constants import CONFIG_FILE_NAME

    monkeypatch.setattr(peardb_config, "CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(
        peardb_config, "CONFIG_FILE", str(Path(config_dir) / CONFIG_FILE_NAME)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network

    try:
        import aiohttp  # type: ignore[import-not-found]

        aiohttp.request = _async_block_network
        aiohttp.ClientSession.request = _async_block_network  # type: ignore[assignment]
        aiohttp.ClientSession.get = _async_block_network  # type: ignore[assignment]
    except ImportError:
        pass


# =============================================================================
# Catalog fixtures
# =============================================================================


@pytest.fixture
def iphone_device_data():
    """Raw device document whose catalog key carries a release-year suffix."""
    return {
        "name": "iPhone 13 Pro",
        "identifier": ["iPhone14,2"],
        "key": "iPhone14,2-2021",
        "type": "iPhone",
        "soc": "A15 Bionic",
        "arch": "arm64e",
        "released": ["2021-09-24"],
        "board": ["D63AP"],
    }


@pytest.fixture
def multi_board_device_data():
    return {
        "name": "iPhone 15",
        "identifier": ["iPhone15,4"],
        "key": "iPhone15,4",
        "type": "iPhone",
        "soc": "A16 Bionic",
        "released": ["2023-09-22"],
        "board": ["D37AP", "D37DEV"],
    }


@pytest.fixture
def firmware_catalog_data():
    """Raw firmware catalog; entries target iPhone14,2-2021 unless noted."""
    return [
        {
            "osStr": "iOS",
            "version": "16.0",
            "build": "20A362",
            "beta": False,
            "deviceMap": ["iPhone14,2-2021", "iPhone15,4"],
        },
        {
            "osStr": "iOS",
            "version": "16.1",
            "build": "20B5045d",
            "beta": True,
            "deviceMap": ["iPhone14,2-2021", "iPhone15,4"],
        },
        {
            "osStr": "iOS",
            "version": "16.0.1",
            "build": "20A371",
            "beta": False,
            "internalVersion": True,
            "deviceMap": ["iPhone14,2-2021"],
        },
        {
            "osStr": "iOS",
            "version": "15.0",
            "build": "19A346",
            "beta": False,
            "deviceMap": ["iPhone14,2-2021"],
        },
        {
            "osStr": "iOS",
            "version": "17.0",
            "build": "21A329",
            "beta": False,
            "deviceMap": ["iPhone15,4"],
        },
    ]


@pytest.fixture
def iphone_device(iphone_device_data):
    from peardb.catalog.interfaces import DeviceRecord

    return DeviceRecord.from_dict(iphone_device_data)


@pytest.fixture
def multi_board_device(multi_board_device_data):
    from peardb.catalog.interfaces import DeviceRecord

    return DeviceRecord.from_dict(multi_board_device_data)


@pytest.fixture
def firmware_catalog(firmware_catalog_data):
    from peardb.catalog.interfaces import decode_firmware_list

    return decode_firmware_list(firmware_catalog_data)
