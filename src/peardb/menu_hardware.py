# src/peardb/menu_hardware.py

import asyncio
from typing import Any, Callable, Optional, Sequence, Tuple, TypeVar

from pick import pick

from peardb.catalog.interfaces import DeviceRecord, FirmwareRecord, describe_device
from peardb.exceptions import PersistenceError
from peardb.firmware import Channel, format_firmware
from peardb.log_utils import logger
from peardb.store import HardwareEntry
from peardb.workflow import (
    BoardSelected,
    ChannelSelected,
    FirmwareSelected,
    HardwareWorkflow,
    TypeSelected,
)

T = TypeVar("T")

QUIT_KEYS = (ord("q"), 27)  # q, Esc


def _pick_one(
    options: Sequence[T], labels: Sequence[str], title: str, default_index: int = 0
) -> Optional[T]:
    """
    Show a single-choice menu and return the chosen option.

    Returns None when there is nothing to choose from or the user quits.
    """
    if not options:
        return None
    _, index = pick(
        list(labels),
        title + "\n(press ENTER to confirm, q to cancel)",
        indicator="*",
        default_index=default_index,
        quit_keys=QUIT_KEYS,
    )
    if index is None or index < 0:
        return None
    return options[index]


def select_type(types: Sequence[str]) -> Optional[str]:
    """Let the user choose a device type."""
    return _pick_one(types, types, "Select a device type:")


def select_device(
    devices: Sequence[DeviceRecord], device_type: str
) -> Optional[DeviceRecord]:
    """Let the user choose a device of `device_type`."""
    return _pick_one(
        devices, [device.name for device in devices], f"Select a {device_type}:"
    )


def select_board(boards: Sequence[str]) -> Optional[str]:
    """Let the user choose one of the device's boards."""
    return _pick_one(boards, boards, "Select a board:")


def select_channel(current: Channel = Channel.RELEASE) -> Optional[Channel]:
    """Let the user choose the firmware channel, starting on `current`."""
    channels = list(Channel)
    return _pick_one(
        channels,
        [channel.value for channel in channels],
        "Firmware mode:",
        default_index=channels.index(current),
    )


def prompt_firmware(
    entries: Sequence[FirmwareRecord], default: Optional[FirmwareRecord] = None
) -> Optional[FirmwareRecord]:
    """Let the user choose a firmware entry; the cursor starts on `default`."""
    default_index = entries.index(default) if default in entries else 0
    return _pick_one(
        entries,
        [format_firmware(entry) for entry in entries],
        "Select firmware:",
        default_index=default_index,
    )


def _confirm(prompt: str) -> bool:
    try:
        resp = input(prompt)
    except EOFError:
        resp = ""
    return (resp or "y").strip().lower() in {"y", "yes"}


async def _prompt(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking menu or input prompt in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


async def _choose_firmware(workflow: HardwareWorkflow) -> bool:
    """Run the channel and firmware menus until a firmware is chosen or the user quits."""
    while True:
        channel = await _prompt(select_channel, workflow.state.channel)
        if channel is None:
            return False
        workflow.dispatch(ChannelSelected(channel))

        entries = workflow.state.selectable_firmware
        if not entries:
            logger.warning(f"No {channel.value} firmware available for this device.")
            continue

        firmware = await _prompt(
            prompt_firmware, entries, workflow.state.selected_firmware
        )
        if firmware is None:
            return False
        workflow.dispatch(FirmwareSelected(firmware))
        return True


async def _save_with_retry(workflow: HardwareWorkflow) -> Optional[HardwareEntry]:
    while True:
        try:
            return workflow.save()
        except PersistenceError as e:
            logger.error(f"Failed to save hardware: {e}")
            if not await _prompt(
                _confirm, "Try saving again? [y/n] (default: yes): "
            ):
                return None


def show_device_details(device: DeviceRecord, board: Optional[str]) -> None:
    for line in describe_device(device):
        logger.info(line)
    if len(device.board_options) <= 1:
        logger.info(f"Board: {board or 'Unknown'}")


async def run_menu(workflow: HardwareWorkflow) -> Optional[Tuple[HardwareEntry, str]]:
    """
    Walk the user from device type to saved hardware entry.

    Returns:
        tuple[HardwareEntry, str] | None: The saved entry and the catalog key
        its firmware was looked up under, or None when the user cancelled or
        a required catalog fetch failed.

    Menus and confirmations block, so they run in the default executor and
    the event loop stays free for catalog fetches.
    """
    if not await workflow.load_devices():
        logger.error("Could not load the device list. Please try again later.")
        return None

    device_type = await _prompt(select_type, workflow.state.device_types)
    if device_type is None:
        return None
    workflow.dispatch(TypeSelected(device_type))

    device = await _prompt(
        select_device, workflow.state.available_devices, device_type
    )
    if device is None:
        return None
    await workflow.choose_device(device)
    device_key = workflow.state.device_key or ""

    if len(workflow.state.board_options) > 1:
        board = await _prompt(select_board, workflow.state.board_options)
        if board is None:
            return None
        workflow.dispatch(BoardSelected(board))

    show_device_details(device, workflow.state.selected_board)

    if not workflow.state.firmware_entries:
        logger.error(f"No firmware found for {device.name}; nothing to save.")
        return None

    if not await _choose_firmware(workflow):
        return None

    entry = await _save_with_retry(workflow)
    if entry is None:
        return None
    return entry, device_key
