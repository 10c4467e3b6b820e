"""
Device list helpers for the type and device pickers.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from peardb.catalog.interfaces import DeviceRecord
from peardb.constants import (
    PREDEFINED_DEVICE_TYPES,
    RELEASE_DATE_FORMAT,
    UNRELEASED_MARKER,
)


def parse_release_date(release_dates: Iterable[str]) -> Optional[date]:
    """Return the first release date that parses as 'yyyy-MM-dd', or None."""
    for date_string in release_dates:
        try:
            return datetime.strptime(date_string, RELEASE_DATE_FORMAT).date()
        except (TypeError, ValueError):
            continue
    return None


def device_types(devices: Iterable[DeviceRecord], show_all: bool = False) -> List[str]:
    """
    Return the sorted distinct device types.

    Unless `show_all` is set only the predefined consumer types are offered.
    """
    all_types = sorted({device.type for device in devices})
    if show_all:
        return all_types
    return [
        device_type
        for device_type in all_types
        if device_type in PREDEFINED_DEVICE_TYPES
    ]


def devices_for_type(
    devices: Sequence[DeviceRecord], device_type: str
) -> List[DeviceRecord]:
    """
    Return released devices of `device_type`, oldest release first.

    Devices without a parseable release date keep their list order after the
    dated ones.
    """
    matching = [
        device
        for device in devices
        if device.type == device_type and UNRELEASED_MARKER not in device.name
    ]

    def release_key(device: DeviceRecord):
        released = parse_release_date(device.released)
        return (released is None, released or date.min)

    return sorted(matching, key=release_key)
