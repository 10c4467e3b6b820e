# src/peardb/cli.py

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from peardb import config as peardb_config
from peardb import log_utils, menu_hardware
from peardb.catalog.async_client import AsyncCatalogClient
from peardb.catalog.client import CatalogClient
from peardb.catalog.interfaces import describe_device
from peardb.constants import APP_NAME
from peardb.exceptions import (
    CatalogError,
    ConfigurationError,
    PeardbError,
    PersistenceError,
    ValidationError,
)
from peardb.firmware import (
    Channel,
    default_firmware,
    format_firmware,
    select_firmware,
)
from peardb.identifiers import normalize_identifier
from peardb.store import HardwareStore
from peardb.utils import get_installed_version
from peardb.workflow import HardwareWorkflow
from peardb.writer import PersistenceWriter


def _load_config(config_path: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Load configuration and apply its logging settings.

    Returns:
        dict | None: The configuration, or None if it could not be loaded (already logged).
    """
    try:
        config = peardb_config.load_config(config_path)
    except ConfigurationError as error:
        log_utils.logger.error(f"Failed to load configuration: {error}")
        return None

    if config.get("LOG_LEVEL"):
        log_utils.set_log_level(config["LOG_LEVEL"])
    if config.get("LOG_TO_FILE"):
        log_utils.add_file_logging(
            Path(platformdirs.user_log_dir(APP_NAME)),
            config.get("LOG_LEVEL") or "INFO",
        )
    return config


def _create_store(config: Dict[str, Any]) -> HardwareStore:
    return HardwareStore(config.get("STORE_FILE") or None)


def _create_catalog_client(config: Dict[str, Any]) -> CatalogClient:
    return CatalogClient(
        base_url=config["API_BASE_URL"], timeout_seconds=config["REQUEST_TIMEOUT"]
    )


async def _run_add(config: Dict[str, Any], show_all_types: bool) -> int:
    writer = PersistenceWriter(_create_store(config))
    async with AsyncCatalogClient(
        base_url=config["API_BASE_URL"], timeout=config["REQUEST_TIMEOUT"]
    ) as client:
        workflow = HardwareWorkflow(
            client,
            writer,
            platform=config["FIRMWARE_PLATFORM"],
            default_pick=config["DEFAULT_FIRMWARE_PICK"],
            channel=Channel.parse(config["DEFAULT_CHANNEL"]),
            show_all_types=show_all_types or config["SHOW_ALL_DEVICE_TYPES"],
        )
        result = await menu_hardware.run_menu(workflow)

    if result is None:
        log_utils.logger.info("No hardware saved.")
        return 1
    entry, _ = result
    log_utils.logger.info(
        f"Added {entry.device} running {entry.os_str} {entry.version} ({entry.build})"
    )
    return 0


def handle_add(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    return asyncio.run(_run_add(config, args.all_types))


def handle_list(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Print every saved hardware entry."""
    try:
        entries = _create_store(config).entries()
    except PersistenceError as error:
        log_utils.logger.error(f"Could not read saved hardware: {error}")
        return 1

    if not entries:
        print("No hardware saved yet. Run 'peardb add' to add a device.")
        return 0

    for entry in entries:
        print(
            f"{entry.device} [{entry.identifier}] board {entry.board}: "
            f"{entry.os_str} {entry.version} ({entry.build})"
        )
    return 0


def handle_device(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Print one device's details and its normalized catalog key."""
    client = _create_catalog_client(config)
    try:
        device = client.fetch_device(args.identifier)
    except CatalogError as error:
        log_utils.logger.error(f"Error fetching device {args.identifier}: {error}")
        return 1

    for line in describe_device(device):
        print(line)
    print(f"Boards: {', '.join(device.board_options) or 'Unknown'}")
    print(f"Catalog key: {normalize_identifier(device)}")
    return 0


def handle_firmware(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    """Print the firmware selectable for one device on a channel."""
    try:
        channel = Channel.parse(args.channel or config["DEFAULT_CHANNEL"])
    except ValidationError as error:
        log_utils.logger.error(str(error))
        return 2

    client = _create_catalog_client(config)
    try:
        device = client.fetch_device(args.identifier)
        device_key = normalize_identifier(device)
        catalog = client.fetch_firmware_catalog(config["FIRMWARE_PLATFORM"])
    except CatalogError as error:
        log_utils.logger.error(
            f"Error fetching firmware for {args.identifier}: {error}"
        )
        return 1

    entries = select_firmware(catalog, device_key, channel)
    if not entries:
        print(f"No {channel.value} firmware found for {device.name} ({device_key}).")
        return 0

    default = default_firmware(entries, config["DEFAULT_FIRMWARE_PICK"])
    print(f"{channel.value} firmware for {device.name} ({device_key}):")
    for entry in entries:
        marker = "*" if entry is default else " "
        print(f" {marker} {format_firmware(entry)}")
    return 0


def handle_setup(args: argparse.Namespace) -> int:
    exists, config_path = peardb_config.config_exists(args.config)
    if exists:
        print(f"Configuration already exists at {config_path}")
        return 0
    try:
        written = peardb_config.write_default_config(args.config)
    except ConfigurationError as error:
        log_utils.logger.error(str(error))
        return 1
    print(f"Default configuration written to {written}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PearDB - Apple hardware and firmware tracker"
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Use this configuration file instead of the default location",
    )
    subparsers = parser.add_subparsers(dest="command")

    add_parser = subparsers.add_parser(
        "add", help="Pick a device and firmware and save it"
    )
    add_parser.add_argument(
        "--all-types",
        action="store_true",
        help="Show every device type, not just the common ones",
    )

    subparsers.add_parser("list", help="List saved hardware")

    device_parser = subparsers.add_parser(
        "device", help="Show catalog details for a device"
    )
    device_parser.add_argument("identifier", help="Device identifier (e.g. iPhone14,2)")

    firmware_parser = subparsers.add_parser(
        "firmware", help="List selectable firmware for a device"
    )
    firmware_parser.add_argument(
        "identifier", help="Device identifier (e.g. iPhone14,2)"
    )
    firmware_parser.add_argument(
        "--channel",
        choices=[channel.value for channel in Channel],
        help="Firmware channel (defaults to the configured channel)",
    )

    subparsers.add_parser("setup", help="Write a default configuration file")
    subparsers.add_parser("version", help="Display PearDB version")
    return parser


def main(argv=None):
    """
    Entry point for the PearDB command-line interface.

    Parses arguments, loads configuration, builds the hardware store and
    catalog clients, and dispatches to the subcommand handler.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "version":
        log_utils.logger.info(f"PearDB v{get_installed_version()}")
        sys.exit(0)

    if args.command == "setup":
        sys.exit(handle_setup(args))

    config = _load_config(args.config)
    if config is None:
        sys.exit(1)

    handlers = {
        "add": handle_add,
        "list": handle_list,
        "device": handle_device,
        "firmware": handle_firmware,
    }
    try:
        status = handlers[args.command](args, config)
    except PeardbError as error:
        log_utils.logger.error(str(error))
        status = 1
    except KeyboardInterrupt:
        log_utils.logger.info("Cancelled.")
        status = 130
    sys.exit(status)


if __name__ == "__main__":
    main()
