"""
Firmware selection for a device.

Filters a platform catalog down to the entries that apply to one device,
splits them by channel, drops internal builds and orders the rest by
numeric version then build.
"""

from enum import Enum
from functools import cmp_to_key
from typing import Iterable, List, Optional, Sequence

from peardb.catalog.interfaces import FirmwareRecord
from peardb.constants import (
    CHANNEL_BETA,
    CHANNEL_RELEASE,
    FIRMWARE_PICK_NEWEST,
    FIRMWARE_PICK_OLDEST,
    UNKNOWN_VALUE,
)
from peardb.exceptions import ValidationError
from peardb.utils import compare_numeric


class Channel(Enum):
    RELEASE = CHANNEL_RELEASE
    BETA = CHANNEL_BETA

    @classmethod
    def parse(cls, text: str) -> "Channel":
        """
        Parse a channel name case-insensitively.

        Raises:
            ValidationError: If `text` names no channel.
        """
        for channel in cls:
            if channel.value.lower() == str(text).strip().lower():
                return channel
        raise ValidationError(
            f"Unknown firmware channel: {text}",
            field="channel",
            value=str(text),
            details=f"choose from {', '.join(c.value for c in cls)}",
        )

    def accepts(self, entry: FirmwareRecord) -> bool:
        return entry.beta is (self is Channel.BETA)


def is_internal(entry: FirmwareRecord) -> bool:
    return entry.internal_version is True


def filter_for_device(
    entries: Iterable[FirmwareRecord], device_key: str
) -> List[FirmwareRecord]:
    """Keep the entries whose deviceMap contains `device_key`, in catalog order."""
    return [entry for entry in entries if device_key in entry.device_map]


def _compare_firmware(left: FirmwareRecord, right: FirmwareRecord) -> int:
    result = compare_numeric(left.version, right.version)
    if result:
        return result
    return compare_numeric(left.build or "", right.build or "")


def sort_firmware(entries: Iterable[FirmwareRecord]) -> List[FirmwareRecord]:
    """Sort ascending by version then build; equal entries keep catalog order."""
    return sorted(entries, key=cmp_to_key(_compare_firmware))


def selectable_firmware(
    entries: Iterable[FirmwareRecord], channel: Channel
) -> List[FirmwareRecord]:
    """Apply the channel and internal-build filters to device entries and sort them."""
    return sort_firmware(
        entry for entry in entries if channel.accepts(entry) and not is_internal(entry)
    )


def select_firmware(
    entries: Iterable[FirmwareRecord], device_key: str, channel: Channel
) -> List[FirmwareRecord]:
    """
    Return the firmware a user may pick for a device on a channel.

    Parameters:
        entries: The full platform catalog.
        device_key: Normalized catalog key of the device.
        channel: Release or Beta.

    Returns:
        list[FirmwareRecord]: Entries for the device on the channel, internal
        builds excluded, lowest version/build first.
    """
    return selectable_firmware(filter_for_device(entries, device_key), channel)


def default_firmware(
    selectable: Sequence[FirmwareRecord], prefer: str = FIRMWARE_PICK_OLDEST
) -> Optional[FirmwareRecord]:
    """
    Pick the default entry from an already sorted selectable list.

    `prefer="oldest"` takes the first entry, `prefer="newest"` the last.
    Returns None for an empty list.
    """
    if not selectable:
        return None
    if prefer == FIRMWARE_PICK_NEWEST:
        return selectable[-1]
    return selectable[0]


def format_firmware(entry: FirmwareRecord) -> str:
    return f"{entry.version} - {entry.build or UNKNOWN_VALUE}"
