"""
Catalog key normalization for device records.

Some hardware identifiers are shared by devices released in different years;
the catalog disambiguates those by suffixing the release year, which is the
key the firmware catalog's deviceMap refers to.
"""

from typing import Optional

from peardb.catalog.interfaces import DeviceRecord
from peardb.constants import RELEASE_DATE_SEPARATOR, UNKNOWN_IDENTIFIER
from peardb.exceptions import MissingIdentifierError
from peardb.log_utils import logger


def release_year(release_date: str) -> Optional[str]:
    """Return the leading year component of a 'yyyy-MM-dd' date, or None if blank."""
    year = release_date.split(RELEASE_DATE_SEPARATOR)[0]
    return year or None


def base_identifier(device: DeviceRecord) -> str:
    """
    Return the device's base identifier.

    Raises:
        MissingIdentifierError: If the device has no identifiers.
    """
    identifier = device.base_identifier
    if not identifier:
        raise MissingIdentifierError(
            "Device has no base identifier", field="identifier", value=device.name
        )
    return identifier


def normalize_identifier(device: DeviceRecord) -> str:
    """
    Derive the key used to look the device up in the firmware catalog.

    The base identifier is returned unchanged when it equals the device's
    catalog key. Otherwise the year of the first release date is appended
    (``iPhone14,2`` released ``2022-09-16`` becomes ``iPhone14,2-2022``);
    without a release date the base identifier is returned as is.

    A device without any identifier degrades to UNKNOWN_IDENTIFIER.
    """
    try:
        identifier = base_identifier(device)
    except MissingIdentifierError as e:
        logger.error(f"{e}: {device.name}")
        return UNKNOWN_IDENTIFIER

    logger.debug(f"Base identifier: {identifier}, device key: {device.key}")

    if device.key != identifier and device.released:
        year = release_year(device.released[0])
        if year:
            logger.debug(f"Appending year suffix {year} to identifier {identifier}")
            return f"{identifier}{RELEASE_DATE_SEPARATOR}{year}"

    logger.debug(f"No year suffix needed for {identifier}")
    return identifier
