"""
Persistence Writer

Maps a chosen (device, firmware, board) triple onto a HardwareEntry and
commits it to the injected HardwareStore.
"""

from typing import Optional

from peardb.catalog.interfaces import DeviceRecord, FirmwareRecord
from peardb.constants import UNKNOWN_VALUE
from peardb.exceptions import PersistenceError
from peardb.log_utils import logger
from peardb.store import HardwareEntry, HardwareStore


class PersistenceWriter:
    def __init__(self, store: HardwareStore):
        self.store = store

    @staticmethod
    def build_entry(
        device: DeviceRecord,
        firmware: Optional[FirmwareRecord],
        board: Optional[str],
    ) -> HardwareEntry:
        """Map the selection onto a HardwareEntry, using "Unknown" for absent values."""
        return HardwareEntry(
            identifier=device.base_identifier or UNKNOWN_VALUE,
            device=device.name,
            type=device.type,
            chip=device.soc,
            version=firmware.version if firmware else UNKNOWN_VALUE,
            build=(firmware.build if firmware else None) or UNKNOWN_VALUE,
            os_str=firmware.os_str if firmware else UNKNOWN_VALUE,
            board=board or UNKNOWN_VALUE,
        )

    def save(
        self,
        device: DeviceRecord,
        firmware: Optional[FirmwareRecord],
        board: Optional[str],
    ) -> HardwareEntry:
        """
        Create and commit one HardwareEntry.

        The caller is responsible for only calling this once a device (and a
        board, when the device has several) has been chosen.

        Raises:
            PersistenceError: If the store rejects the write.
        """
        entry = self.build_entry(device, firmware, board)
        try:
            self.store.save(entry)
        except PersistenceError as e:
            logger.error(f"Failed to save hardware {entry.device}: {e}")
            raise
        logger.info(f"Saved {entry.device} ({entry.os_str} {entry.version})")
        return entry
