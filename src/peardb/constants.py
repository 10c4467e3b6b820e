"""
Constants and configuration values for PearDB.

This module contains the catalog URLs, timeouts, file names and other
constants used throughout the application.
"""

# AppleDB catalog API
APPLEDB_API_BASE = "https://api.appledb.dev"
DEVICE_DOCUMENT_PATH = "device/{identifier}.json"
DEVICE_LIST_PATH = "device/main.json"
FIRMWARE_CATALOG_PATH = "{platform}/main.json"
DEFAULT_FIRMWARE_PLATFORM = "ios"

# Network timeouts (in seconds)
DEFAULT_REQUEST_TIMEOUT = 10

# Identifier normalization
UNKNOWN_IDENTIFIER = "UnknownIdentifier"
RELEASE_DATE_SEPARATOR = "-"
RELEASE_DATE_FORMAT = "%Y-%m-%d"

# Placeholder written for any field the selection does not provide
UNKNOWN_VALUE = "Unknown"

# Firmware channels
CHANNEL_RELEASE = "Release"
CHANNEL_BETA = "Beta"
DEFAULT_CHANNEL = CHANNEL_RELEASE

# Default firmware pick within the sorted selectable list
FIRMWARE_PICK_OLDEST = "oldest"
FIRMWARE_PICK_NEWEST = "newest"
DEFAULT_FIRMWARE_PICK = FIRMWARE_PICK_OLDEST

# Devices whose name carries this marker are hidden from the device picker
UNRELEASED_MARKER = "Unreleased"

# Device types offered when "show more devices" is off
PREDEFINED_DEVICE_TYPES = (
    "iPhone",
    "iPad",
    "iPad Pro",
    "iPad Air",
    "iPad mini",
    "Apple Watch",
    "Apple TV",
    "AirPods",
    "Headset",
    "MacBook",
    "MacBook Air",
    "MacBook Pro",
    "Mac Pro",
    "Mac mini",
    "Mac Studio",
    "HomePod",
)

# File and directory names
APP_NAME = "peardb"
CONFIG_FILE_NAME = "peardb.yaml"
STORE_FILE_NAME = "hardware.json"
LOG_FILE_NAME = "peardb.log"
STORE_FORMAT_VERSION = 1

# Logging configuration
LOGGER_NAME = "peardb"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
LOG_FILE_BACKUP_COUNT = 3

# Environment variable names
LOG_LEVEL_ENV_VAR = "PEARDB_LOG_LEVEL"
