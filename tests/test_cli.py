from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

import peardb.cli as cli
from peardb.exceptions import NetworkError, PeardbError
from peardb.store import HardwareEntry, HardwareStore


@pytest.fixture
def config_file(tmp_path):
    """A configuration file pointing the store at a temporary path."""
    path = tmp_path / "peardb.yaml"
    path.write_text(
        yaml.safe_dump({"STORE_FILE": str(tmp_path / "hardware.json")}),
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def mock_catalog(mocker, iphone_device, firmware_catalog):
    client = MagicMock()
    client.fetch_device.return_value = iphone_device
    client.fetch_firmware_catalog.return_value = list(firmware_catalog)
    mocker.patch("peardb.cli.CatalogClient", return_value=client)
    return client


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


@pytest.mark.user_interface
def test_no_command_prints_help(capsys):
    assert _run([]) == 0
    assert "usage:" in capsys.readouterr().out


@pytest.mark.user_interface
def test_version(mocker):
    mocker.patch("peardb.cli.get_installed_version", return_value="1.2.3")
    mock_info = mocker.patch.object(cli.log_utils.logger, "info")

    assert _run(["version"]) == 0
    mock_info.assert_called_once_with("PearDB v1.2.3")


def test_setup_writes_default_config(tmp_path, capsys):
    path = tmp_path / "conf" / "peardb.yaml"

    assert _run(["--config", str(path), "setup"]) == 0
    assert path.exists()
    assert "Default configuration written" in capsys.readouterr().out

    assert _run(["--config", str(path), "setup"]) == 0
    assert "already exists" in capsys.readouterr().out


def test_invalid_config_exits_with_error(tmp_path):
    path = tmp_path / "peardb.yaml"
    path.write_text("REQUEST_TIMEOUT: -1\n", encoding="utf-8")

    assert _run(["--config", str(path), "list"]) == 1


def test_list_empty(config_file, capsys):
    assert _run(["--config", config_file, "list"]) == 0
    assert "No hardware saved yet" in capsys.readouterr().out


def test_list_entries(tmp_path, config_file, capsys):
    HardwareStore(tmp_path / "hardware.json").save(
        HardwareEntry(
            identifier="iPhone14,2",
            device="iPhone 13 Pro",
            type="iPhone",
            chip="A15 Bionic",
            version="15.0",
            build="19A346",
            os_str="iOS",
            board="D63AP",
        )
    )

    assert _run(["--config", config_file, "list"]) == 0
    out = capsys.readouterr().out
    assert "iPhone 13 Pro [iPhone14,2] board D63AP: iOS 15.0 (19A346)" in out


def test_list_corrupt_store(tmp_path, config_file):
    (tmp_path / "hardware.json").write_text("{not json", encoding="utf-8")
    assert _run(["--config", config_file, "list"]) == 1


def test_device_details(config_file, mock_catalog, capsys):
    assert _run(["--config", config_file, "device", "iPhone14,2"]) == 0

    out = capsys.readouterr().out
    mock_catalog.fetch_device.assert_called_once_with("iPhone14,2")
    assert "Device Name: iPhone 13 Pro" in out
    assert "Boards: D63AP" in out
    assert "Catalog key: iPhone14,2-2021" in out


def test_device_fetch_failure(config_file, mock_catalog):
    mock_catalog.fetch_device.side_effect = NetworkError("offline")
    assert _run(["--config", config_file, "device", "iPhone14,2"]) == 1


def test_firmware_marks_default(config_file, mock_catalog, capsys):
    assert _run(["--config", config_file, "firmware", "iPhone14,2"]) == 0

    lines = capsys.readouterr().out.splitlines()
    mock_catalog.fetch_firmware_catalog.assert_called_once_with("ios")
    assert lines[0] == "Release firmware for iPhone 13 Pro (iPhone14,2-2021):"
    assert lines[1:] == [" * 15.0 - 19A346", "   16.0 - 20A362"]


def test_firmware_beta_channel(config_file, mock_catalog, capsys):
    code = _run(
        ["--config", config_file, "firmware", "iPhone14,2", "--channel", "Beta"]
    )

    assert code == 0
    assert " * 16.1 - 20B5045d" in capsys.readouterr().out


def test_firmware_none_available(config_file, mock_catalog, capsys):
    mock_catalog.fetch_firmware_catalog.return_value = []

    assert _run(["--config", config_file, "firmware", "iPhone14,2"]) == 0
    assert "No Release firmware found" in capsys.readouterr().out


def test_firmware_catalog_failure(config_file, mock_catalog):
    mock_catalog.fetch_firmware_catalog.side_effect = NetworkError("offline")
    assert _run(["--config", config_file, "firmware", "iPhone14,2"]) == 1


def test_add_runs_menu(mocker, config_file):
    entry = MagicMock(
        device="iPhone 13 Pro", os_str="iOS", version="15.0", build="19A346"
    )
    mock_client_cls = mocker.patch("peardb.cli.AsyncCatalogClient")
    mock_client_cls.return_value.__aenter__.return_value = MagicMock()
    mock_menu = mocker.patch(
        "peardb.cli.menu_hardware.run_menu",
        new=AsyncMock(return_value=(entry, "iPhone14,2-2021")),
    )

    assert _run(["--config", config_file, "add", "--all-types"]) == 0

    workflow = mock_menu.await_args.args[0]
    assert workflow.state.show_all_types is True
    assert workflow.platform == "ios"


def test_add_cancelled(mocker, config_file):
    mocker.patch("peardb.cli.AsyncCatalogClient")
    mocker.patch(
        "peardb.cli.menu_hardware.run_menu", new=AsyncMock(return_value=None)
    )

    assert _run(["--config", config_file, "add"]) == 1


def test_handler_errors_are_reported(mocker, config_file):
    mocker.patch("peardb.cli.handle_list", side_effect=PeardbError("boom"))
    assert _run(["--config", config_file, "list"]) == 1


def test_keyboard_interrupt(mocker, config_file):
    mocker.patch("peardb.cli.handle_list", side_effect=KeyboardInterrupt)
    assert _run(["--config", config_file, "list"]) == 130
