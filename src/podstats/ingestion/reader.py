"""
Dataset readers: uploaded CSV files and the bundled default dataset.

Uploaded files are checked (extension, size) before their content is read,
so an oversized file is refused up front rather than aborted mid-parse.
"""

from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path
from typing import Iterable, Optional, Union

from podstats.config import DEFAULT_INGESTION_CONFIG, MAX_FILE_SIZE_BYTES
from podstats.errors import FileTooLargeError, UnreadableFileError, UnsupportedFileTypeError
from podstats.logger import get_default_logger


logger = get_default_logger()


BUNDLED_DATASET_PACKAGE = "podstats.data"
BUNDLED_DATASET_NAME = "default_dataset.csv"


def get_max_file_size_mb(max_bytes: int = MAX_FILE_SIZE_BYTES) -> float:
    """Maximum accepted upload size in MiB, for display."""
    return max_bytes / (1024 * 1024)


def validate_file_size(size_bytes: int, max_bytes: int = MAX_FILE_SIZE_BYTES) -> None:
    """
    Refuse payloads larger than the configured limit.

    Raises:
        FileTooLargeError: If size_bytes exceeds max_bytes
    """
    if size_bytes > max_bytes:
        raise FileTooLargeError(size_bytes, max_bytes)


def validate_file_type(
    file_path: Union[str, Path],
    allowed_extensions: Optional[Iterable[str]] = None,
) -> None:
    """
    Refuse files that are not CSV exports (checked by extension).

    Raises:
        UnsupportedFileTypeError: If the extension is not allowed
    """
    if allowed_extensions is None:
        allowed_extensions = DEFAULT_INGESTION_CONFIG["allowed_extensions"]

    suffix = Path(file_path).suffix.lower()
    allowed = {ext.lower() for ext in allowed_extensions}
    if suffix not in allowed:
        raise UnsupportedFileTypeError(
            f"Please select a CSV file (got {Path(file_path).name!r}; "
            f"allowed: {', '.join(sorted(allowed))})"
        )


def read_dataset_file(
    file_path: Union[str, Path],
    max_bytes: int = MAX_FILE_SIZE_BYTES,
    allowed_extensions: Optional[Iterable[str]] = None,
) -> str:
    """
    Read an uploaded CSV export after checking its type and size.

    Args:
        file_path: Path to the CSV file
        max_bytes: Maximum accepted file size
        allowed_extensions: Accepted file extensions (default: [".csv"])

    Returns:
        File content as text (UTF-8, BOM removed)

    Raises:
        FileNotFoundError: If the file doesn't exist
        UnsupportedFileTypeError: If the extension is not allowed
        FileTooLargeError: If the file exceeds max_bytes
        UnreadableFileError: If the file is not valid UTF-8

    Example:
        >>> text = read_dataset_file("metrics-20250930.csv")
    """
    file_path = Path(file_path)

    if not file_path.is_file():
        raise FileNotFoundError(f"Dataset file not found: {file_path}")

    validate_file_type(file_path, allowed_extensions)
    validate_file_size(file_path.stat().st_size, max_bytes)

    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnreadableFileError(
            f"{file_path.name} is not a UTF-8 text file (invalid byte at position {e.start})"
        ) from e
    logger.info(f"Read {len(text)} characters from {file_path.name}")
    return text


class BundledDatasetSource(ABC):
    """Supplies the raw text of the dataset shipped with the application."""

    label: str = "Default Dataset"

    @abstractmethod
    def read_text(self) -> str:
        """Return the bundled CSV payload."""


class PackageDatasetSource(BundledDatasetSource):
    """Reads the CSV bundled inside the podstats package."""

    def __init__(self, package: str = BUNDLED_DATASET_PACKAGE, name: str = BUNDLED_DATASET_NAME):
        self.package = package
        self.name = name
        self._cached: Optional[str] = None

    def read_text(self) -> str:
        # Read once per process; the bundled file never changes at runtime
        if self._cached is None:
            self._cached = resources.files(self.package).joinpath(self.name).read_text(
                encoding="utf-8-sig"
            )
            logger.debug(f"Loaded bundled dataset {self.package}/{self.name}")
        return self._cached


class TextDatasetSource(BundledDatasetSource):
    """In-memory dataset, mainly for tests."""

    def __init__(self, text: str):
        self.text = text

    def read_text(self) -> str:
        return self.text
