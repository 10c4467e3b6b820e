"""
Catalog Records

Typed, immutable views of the AppleDB device and firmware documents. Each
record is decoded from the raw JSON mapping through ``from_dict``, which
raises DecodeError when the mapping does not match the expected schema.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from peardb.exceptions import DecodeError
from peardb.log_utils import logger


def _require_str(data: Mapping[str, Any], key: str, record: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DecodeError(
            f"Invalid {record} document",
            details=f"field '{key}' must be a string, got {type(value).__name__}",
        )
    return value


def _optional_str(data: Mapping[str, Any], key: str, record: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(
            f"Invalid {record} document",
            details=f"field '{key}' must be a string, got {type(value).__name__}",
        )
    return value


def _optional_bool(data: Mapping[str, Any], key: str, record: str) -> Optional[bool]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise DecodeError(
            f"Invalid {record} document",
            details=f"field '{key}' must be a boolean, got {type(value).__name__}",
        )
    return value


def _str_list(
    data: Mapping[str, Any], key: str, record: str
) -> Optional[Tuple[str, ...]]:
    """Decode a string-or-list-of-strings field; None when absent."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise DecodeError(
        f"Invalid {record} document",
        details=f"field '{key}' must be a string or a list of strings",
    )


def _require_mapping(data: Any, record: str) -> Mapping[str, Any]:
    if not isinstance(data, dict):
        raise DecodeError(
            f"Invalid {record} document",
            details=f"expected an object, got {type(data).__name__}",
        )
    return data


@dataclass(frozen=True)
class DeviceRecord:
    """A device document from the catalog."""

    name: str
    """Human readable name (e.g., 'iPhone 14 Pro')"""

    type: str
    """Type category (e.g., 'iPhone', 'Apple Watch')"""

    soc: str
    """Chip/SoC name"""

    key: str
    """Catalog key; may differ from the base identifier"""

    identifiers: Tuple[str, ...] = ()
    """Hardware identifiers, the first one being the base identifier"""

    arch: Optional[str] = None
    """CPU architecture, when known"""

    released: Tuple[str, ...] = ()
    """Release dates as 'yyyy-MM-dd' strings"""

    boards: Optional[Tuple[str, ...]] = None
    """Supported board identifiers"""

    @property
    def base_identifier(self) -> Optional[str]:
        return self.identifiers[0] if self.identifiers else None

    @property
    def board_options(self) -> Tuple[str, ...]:
        return self.boards or ()

    @classmethod
    def from_dict(cls, data: Any) -> "DeviceRecord":
        """
        Decode a device document.

        Raises:
            DecodeError: If a required field is missing or a field has the wrong type.
        """
        data = _require_mapping(data, "device")
        return cls(
            name=_require_str(data, "name", "device"),
            type=_require_str(data, "type", "device"),
            soc=_require_str(data, "soc", "device"),
            key=_require_str(data, "key", "device"),
            identifiers=_str_list(data, "identifier", "device") or (),
            arch=_optional_str(data, "arch", "device"),
            released=_str_list(data, "released", "device") or (),
            boards=_str_list(data, "board", "device"),
        )


@dataclass(frozen=True)
class FirmwareRecord:
    """A firmware entry from a platform catalog."""

    version: str
    """Dotted version string, compared numerically"""

    os_str: str
    """OS label (e.g., 'iOS')"""

    build: Optional[str] = None
    """Build string (e.g., '20A362')"""

    beta: bool = False
    """Whether the entry belongs to the beta channel"""

    internal_version: Optional[bool] = None
    """Whether the entry is an internal build"""

    device_map: Tuple[str, ...] = ()
    """Catalog keys of the devices this firmware applies to"""

    @classmethod
    def from_dict(cls, data: Any) -> "FirmwareRecord":
        """
        Decode a firmware catalog entry.

        Raises:
            DecodeError: If a required field is missing or a field has the wrong type.
        """
        data = _require_mapping(data, "firmware")
        return cls(
            version=_require_str(data, "version", "firmware"),
            os_str=_require_str(data, "osStr", "firmware"),
            build=_optional_str(data, "build", "firmware"),
            beta=bool(_optional_bool(data, "beta", "firmware")),
            internal_version=_optional_bool(data, "internalVersion", "firmware"),
            device_map=_str_list(data, "deviceMap", "firmware") or (),
        )


def decode_device_list(data: Any) -> List[DeviceRecord]:
    """
    Decode a list payload of device documents.

    Entries that fail to decode are skipped, unless none decodes at all.

    Raises:
        DecodeError: If the payload is not a list, or is non-empty and no entry decodes.
    """
    return _decode_list(data, DeviceRecord.from_dict, "device")


def decode_firmware_list(data: Any) -> List[FirmwareRecord]:
    """
    Decode a platform firmware catalog.

    Raises:
        DecodeError: If the payload is not a list, or is non-empty and no entry decodes.
    """
    return _decode_list(data, FirmwareRecord.from_dict, "firmware")


def _decode_list(data: Any, decode_item, record: str) -> list:
    if not isinstance(data, list):
        raise DecodeError(
            f"Invalid {record} list",
            details=f"expected an array, got {type(data).__name__}",
        )

    decoded = []
    last_error: Optional[DecodeError] = None
    for index, item in enumerate(data):
        try:
            decoded.append(decode_item(item))
        except DecodeError as e:
            last_error = e
            logger.warning(f"Skipping malformed {record} entry {index}: {e}")

    if data and not decoded and last_error is not None:
        raise last_error
    return decoded


def describe_device(device: DeviceRecord) -> Sequence[str]:
    """Return the detail lines shown for a selected device."""
    identifiers = ", ".join(device.identifiers) if device.identifiers else "Unknown"
    return [
        f"Device Name: {device.name}",
        f"SoC: {device.soc}",
        f"Identifier: {identifiers}",
        f"Architecture: {device.arch or 'Unknown'}",
        f"Type: {device.type}",
        f"Released: {', '.join(device.released)}",
    ]
