# src/peardb/config.py

import os
from typing import Any, Dict, Optional

import platformdirs
import yaml

from peardb.constants import (
    APP_NAME,
    APPLEDB_API_BASE,
    CONFIG_FILE_NAME,
    DEFAULT_CHANNEL,
    DEFAULT_FIRMWARE_PICK,
    DEFAULT_FIRMWARE_PLATFORM,
    DEFAULT_REQUEST_TIMEOUT,
    FIRMWARE_PICK_NEWEST,
    FIRMWARE_PICK_OLDEST,
)
from peardb.exceptions import ConfigFileError, ConfigValidationError, ValidationError
from peardb.firmware import Channel
from peardb.log_utils import logger
from peardb.utils import is_http_url

# Get the config directory using platformdirs
CONFIG_DIR = platformdirs.user_config_dir(APP_NAME)

CONFIG_FILE = os.path.join(CONFIG_DIR, CONFIG_FILE_NAME)

DEFAULT_CONFIG: Dict[str, Any] = {
    "API_BASE_URL": APPLEDB_API_BASE,
    "FIRMWARE_PLATFORM": DEFAULT_FIRMWARE_PLATFORM,
    "REQUEST_TIMEOUT": DEFAULT_REQUEST_TIMEOUT,
    "DEFAULT_CHANNEL": DEFAULT_CHANNEL,
    "DEFAULT_FIRMWARE_PICK": DEFAULT_FIRMWARE_PICK,
    "SHOW_ALL_DEVICE_TYPES": False,
    "STORE_FILE": None,
    "LOG_LEVEL": "",
    "LOG_TO_FILE": False,
}


def config_exists(path: Optional[str] = None):
    """
    Return whether a PearDB configuration file exists and its path.

    Returns:
        (bool, str|None): Whether the file was found, and its path when it was.
    """
    config_path = path or CONFIG_FILE
    if os.path.exists(config_path):
        return True, config_path
    return False, None


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check and normalize configuration values in place.

    Raises:
        ConfigValidationError: If any value is out of range or of the wrong type.
    """
    base_url = config.get("API_BASE_URL")
    if not isinstance(base_url, str) or not is_http_url(base_url):
        raise ConfigValidationError(
            "API_BASE_URL must be an http(s) URL", details=repr(base_url)
        )

    platform = config.get("FIRMWARE_PLATFORM")
    if not isinstance(platform, str) or not platform.strip():
        raise ConfigValidationError(
            "FIRMWARE_PLATFORM must be a non-empty string", details=repr(platform)
        )
    config["FIRMWARE_PLATFORM"] = platform.strip()

    timeout = config.get("REQUEST_TIMEOUT")
    if isinstance(timeout, bool):
        raise ConfigValidationError(
            "REQUEST_TIMEOUT must be a number", details=repr(timeout)
        )
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        raise ConfigValidationError(
            "REQUEST_TIMEOUT must be a number", details=repr(timeout)
        ) from None
    if timeout <= 0:
        raise ConfigValidationError(
            "REQUEST_TIMEOUT must be greater than zero", details=repr(timeout)
        )
    config["REQUEST_TIMEOUT"] = timeout

    try:
        config["DEFAULT_CHANNEL"] = Channel.parse(config.get("DEFAULT_CHANNEL")).value
    except ValidationError as e:
        raise ConfigValidationError(
            "DEFAULT_CHANNEL is not a firmware channel", details=str(e)
        ) from e

    pick = str(config.get("DEFAULT_FIRMWARE_PICK", "")).strip().lower()
    if pick not in (FIRMWARE_PICK_OLDEST, FIRMWARE_PICK_NEWEST):
        raise ConfigValidationError(
            "DEFAULT_FIRMWARE_PICK must be 'oldest' or 'newest'", details=repr(pick)
        )
    config["DEFAULT_FIRMWARE_PICK"] = pick

    for flag in ("SHOW_ALL_DEVICE_TYPES", "LOG_TO_FILE"):
        if not isinstance(config.get(flag), bool):
            raise ConfigValidationError(
                f"{flag} must be true or false", details=repr(config.get(flag))
            )

    if config.get("LOG_LEVEL") is None:
        config["LOG_LEVEL"] = ""

    return config


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the PearDB configuration YAML merged over DEFAULT_CONFIG.

    A missing file yields the defaults. Keys not present in the file keep
    their default values; unknown keys are kept as-is.

    Parameters:
        path (str | None): Explicit configuration file; CONFIG_FILE when None.

    Returns:
        dict: The validated configuration.

    Raises:
        ConfigFileError: If the file cannot be read or is not a YAML mapping.
        ConfigValidationError: If a value is invalid.
    """
    config = dict(DEFAULT_CONFIG)
    exists, config_path = config_exists(path)
    if not exists:
        logger.debug("No configuration file found; using defaults")
        return validate_config(config)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(
            f"Could not read configuration file {config_path}", details=str(e)
        ) from e
    except yaml.YAMLError as e:
        raise ConfigFileError(
            f"Invalid YAML in configuration file {config_path}", details=str(e)
        ) from e

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigFileError(
            f"Configuration file {config_path} must contain a mapping",
            details=type(loaded).__name__,
        )

    config.update(loaded)
    logger.debug(f"Loaded configuration from {config_path}")
    return validate_config(config)


def write_default_config(path: Optional[str] = None) -> str:
    """
    Write DEFAULT_CONFIG to `path` (CONFIG_FILE by default).

    Returns:
        str: The path written.

    Raises:
        ConfigFileError: If the file cannot be written.
    """
    config_path = path or CONFIG_FILE
    try:
        os.makedirs(os.path.dirname(config_path) or ".", exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(DEFAULT_CONFIG, f, sort_keys=False)
    except OSError as e:
        raise ConfigFileError(
            f"Could not write configuration file {config_path}", details=str(e)
        ) from e
    logger.info(f"Configuration written to {config_path}")
    return config_path
