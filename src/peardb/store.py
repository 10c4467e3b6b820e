"""
Hardware Store

A single JSON document holding every saved HardwareEntry. Writes go to a
temporary file in the same directory and are moved into place with
os.replace, so a failed save leaves the previous document untouched.
"""

import json
import os
import tempfile
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import platformdirs

from peardb.constants import APP_NAME, STORE_FILE_NAME, STORE_FORMAT_VERSION
from peardb.exceptions import PersistenceError
from peardb.log_utils import logger

Pathish = Union[str, Path]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True)
class HardwareEntry:
    """One user-confirmed device/firmware/board choice."""

    identifier: str
    device: str
    type: str
    chip: str
    version: str
    build: str
    os_str: str
    board: str
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HardwareEntry":
        return cls(**{name: str(data[name]) for name in cls.__dataclass_fields__})


def default_store_path() -> Path:
    return Path(platformdirs.user_data_dir(APP_NAME)) / STORE_FILE_NAME


class HardwareStore:
    """
    File-backed store of saved hardware entries.

    The store is owned by the application composition root and injected into
    PersistenceWriter; nothing in the package keeps a global instance.
    """

    def __init__(self, path: Optional[Pathish] = None):
        self.path = Path(path) if path else default_store_path()

    def entries(self) -> List[HardwareEntry]:
        """
        Return all saved entries, oldest first.

        Raises:
            PersistenceError: If the store file exists but cannot be read or parsed.
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
            return [HardwareEntry.from_dict(item) for item in document["entries"]]
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(
                "Could not read hardware store", path=str(self.path), details=str(e)
            ) from e
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise PersistenceError(
                "Hardware store is corrupt", path=str(self.path), details=str(e)
            ) from e

    def _validate(self, entry: HardwareEntry) -> None:
        for name in ("identifier", "device"):
            value = getattr(entry, name)
            if not isinstance(value, str) or not value.strip():
                raise PersistenceError(
                    "Hardware entry failed validation",
                    path=str(self.path),
                    details=f"'{name}' must be a non-empty string",
                )

    def save(self, entry: HardwareEntry) -> None:
        """
        Append `entry` and commit the whole document atomically.

        Raises:
            PersistenceError: If the entry is invalid or the document cannot be written.
        """
        self._validate(entry)
        entries = self.entries()
        entries.append(entry)
        document = {
            "version": STORE_FORMAT_VERSION,
            "entries": [item.to_dict() for item in entries],
        }

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix="tmp-", suffix=".json"
            )
        except OSError as e:
            raise PersistenceError(
                "Could not prepare hardware store", path=str(self.path), details=str(e)
            ) from e

        try:
            try:
                temp_f = os.fdopen(temp_fd, "w", encoding="utf-8")
            except OSError:
                # fdopen did not take ownership of the descriptor
                os.close(temp_fd)
                raise
            with temp_f:
                json.dump(document, temp_f, indent=2)
            os.replace(temp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(
                "Could not write hardware store", path=str(self.path), details=str(e)
            ) from e
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

        logger.debug(f"Saved hardware entry {entry.identifier} to {self.path}")
