"""
Key-value storage backends for the dataset store.

The dataset store only needs get/set/delete on string keys and string
values. Backends signal failures with StorageReadError/StorageWriteError so
the store can tell storage problems apart from corrupt content.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union
from urllib.parse import quote

from podstats.errors import StorageReadError, StorageWriteError
from podstats.logger import get_default_logger


logger = get_default_logger()


class KeyValueStorage(ABC):
    """Minimal string key-value storage capability."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key; removing an absent key is a no-op."""


class MemoryStorage(KeyValueStorage):
    """
    In-process storage.

    An optional quota (total UTF-8 bytes of all values) makes writes fail the
    way a full browser storage area would.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self.quota_bytes = quota_bytes
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(
                len(existing.encode("utf-8"))
                for existing_key, existing in self._data.items()
                if existing_key != key
            )
            if used + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageWriteError(
                    f"Storage quota exceeded writing {key!r} "
                    f"({self.quota_bytes} bytes available)"
                )
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class FileStorage(KeyValueStorage):
    """
    Directory-backed storage: one UTF-8 file per key.

    Writes go to a temporary file in the same directory and are renamed into
    place, so a reader never sees a half-written value.
    """

    SUFFIX = ".dat"

    def __init__(self, directory: Union[str, Path]):
        """
        Initialize file storage.

        Args:
            directory: Directory holding the value files (created on first write)
        """
        self.directory = Path(directory)

    def _path_for(self, key: str) -> Path:
        # Keys may contain characters that are not valid in file names
        return self.directory / f"{quote(key, safe='')}{self.SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {key!r} from {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_path: Optional[Path] = None

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp_", suffix=self.SUFFIX)
            temp_path = Path(temp_name)

            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())

            temp_path.replace(path)
            temp_path = None
            logger.debug(f"Wrote {len(value)} characters to {path}")
        except OSError as e:
            raise StorageWriteError(f"Failed to write {key!r} to {path}: {e}") from e
        finally:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(f"Failed to delete {key!r} at {path}: {e}") from e
