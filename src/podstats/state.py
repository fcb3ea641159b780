"""
Active dataset management: bundled default, persisted uploads, import and reset.

Exactly one EpisodesState is active at a time. Every transition builds a new
state and swaps it in only after all fallible steps (reading, parsing,
persisting) have succeeded, so a failed import leaves the previous dataset
untouched.
"""

import time
from pathlib import Path
from typing import Optional, Union

from podstats.config import Config
from podstats.errors import NoEpisodesError
from podstats.ingestion.pipeline import EpisodeParser
from podstats.ingestion.reader import (
    BundledDatasetSource,
    PackageDatasetSource,
    read_dataset_file,
    validate_file_size,
    validate_file_type,
)
from podstats.logger import get_default_logger
from podstats.models import DEFAULT_SOURCE_LABEL, DatasetMetadata, EpisodesState
from podstats.storage.backends import FileStorage, KeyValueStorage
from podstats.storage.dataset_store import DatasetStore


logger = get_default_logger()


def current_timestamp_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def load_bundled_dataset(
    source: Optional[BundledDatasetSource] = None,
    parser: Optional[EpisodeParser] = None,
) -> EpisodesState:
    """
    Parse the dataset shipped with the application.

    Args:
        source: Bundled dataset source (default: the packaged CSV)
        parser: Parser to use (default: EpisodeParser with built-in config)

    Returns:
        EpisodesState labelled "Default Dataset" without an import timestamp
    """
    source = source or PackageDatasetSource()
    parser = parser or EpisodeParser()
    result = parser.parse(source.read_text())
    return EpisodesState(result=result, source_label=source.label or DEFAULT_SOURCE_LABEL)


class DatasetManager:
    """
    Owns the active EpisodesState and its persistence.
    """

    def __init__(
        self,
        store: DatasetStore,
        bundled_source: Optional[BundledDatasetSource] = None,
        config: Optional[Config] = None,
    ):
        """
        Initialize dataset manager.

        Args:
            store: Persisted dataset store
            bundled_source: Source of the default dataset (default: packaged CSV)
            config: Configuration (default: Config() reading ./config)
        """
        self.config = config or Config()
        self.parser = EpisodeParser(self.config.ingestion)
        self.store = store
        self.bundled_source = bundled_source or PackageDatasetSource()
        self._state: Optional[EpisodesState] = None

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        storage: Optional[KeyValueStorage] = None,
        bundled_source: Optional[BundledDatasetSource] = None,
    ) -> "DatasetManager":
        """
        Build a manager whose store uses the configured keys and directory.

        Args:
            config: Configuration (default: Config())
            storage: Storage backend (default: FileStorage at config.storage_dir)
            bundled_source: Source of the default dataset
        """
        config = config or Config()
        parser = EpisodeParser(config.ingestion)
        store = DatasetStore(
            storage=storage or FileStorage(config.storage_dir),
            parser=parser.parse,
            raw_key=config.storage["raw_key"],
            metadata_key=config.storage["metadata_key"],
        )
        return cls(store=store, bundled_source=bundled_source, config=config)

    @property
    def state(self) -> EpisodesState:
        """The active dataset (initialized on first access)."""
        if self._state is None:
            return self.initialize()
        return self._state

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.config.ingestion["max_file_size_bytes"])

    def load_bundled_dataset(self) -> EpisodesState:
        """Parse the bundled dataset without changing the active state."""
        return load_bundled_dataset(self.bundled_source, self.parser)

    def initialize(self) -> EpisodesState:
        """
        Activate the persisted dataset if one loads, otherwise the bundled one.

        Corrupt persisted data is discarded by the store and the bundled
        dataset is used instead.

        Returns:
            The newly active EpisodesState
        """
        persisted = self.store.load()

        if persisted is not None:
            result = persisted.result or self.parser.parse(persisted.raw_text)
            self._state = EpisodesState(
                result=result,
                source_label=persisted.metadata.source_label,
                last_import_timestamp=persisted.metadata.timestamp,
            )
            logger.info(f"Using persisted dataset {persisted.metadata.source_label!r}")
        else:
            self._state = self.load_bundled_dataset()
            logger.info("Using bundled default dataset")

        return self._state

    def check_file(self, file_path: Union[str, Path]) -> None:
        """
        Check an upload's type and size without reading it.

        Raises:
            UnsupportedFileTypeError: If the file is not a CSV
            FileTooLargeError: If the file exceeds the size limit
        """
        file_path = Path(file_path)
        validate_file_type(file_path, self.config.ingestion["allowed_extensions"])
        validate_file_size(file_path.stat().st_size, self.max_file_size_bytes)

    def import_file(self, file_path: Union[str, Path]) -> EpisodesState:
        """
        Import a CSV export from disk and make it the active dataset.

        The file's type and size are checked before it is read.

        Args:
            file_path: Path to a .csv file

        Returns:
            The newly active EpisodesState

        Raises:
            FileNotFoundError: If the file doesn't exist
            UnsupportedFileTypeError: If the file is not a CSV
            FileTooLargeError: If the file exceeds the size limit
            ParseError: If the file is empty or has no valid episodes
            StorageWriteError: If the dataset cannot be persisted
        """
        file_path = Path(file_path)
        raw_text = read_dataset_file(
            file_path,
            max_bytes=self.max_file_size_bytes,
            allowed_extensions=self.config.ingestion["allowed_extensions"],
        )
        return self.import_text(raw_text, source_label=file_path.name)

    def import_text(
        self,
        raw_text: str,
        source_label: str,
        timestamp: Optional[int] = None,
    ) -> EpisodesState:
        """
        Import a CSV payload and make it the active dataset.

        Args:
            raw_text: CSV payload
            source_label: Display name, normally the uploaded file name
            timestamp: Import time in epoch ms (default: now)

        Returns:
            The newly active EpisodesState

        Raises:
            FileTooLargeError: If the payload exceeds the size limit
            EmptyInputError: If the payload is empty
            NoEpisodesError: If no row produced a valid episode
            StorageWriteError: If the dataset cannot be persisted
        """
        validate_file_size(len(raw_text.encode("utf-8")), self.max_file_size_bytes)

        result = self.parser.parse(raw_text)
        if not result.episodes:
            raise NoEpisodesError(
                f"No valid episodes found in {source_label!r} "
                f"({result.skipped_count} rows skipped)"
            )

        metadata = DatasetMetadata(
            source_label=source_label,
            timestamp=timestamp if timestamp is not None else current_timestamp_ms(),
        )
        self.store.save(raw_text, metadata)

        self._state = EpisodesState(
            result=result,
            source_label=metadata.source_label,
            last_import_timestamp=metadata.timestamp,
        )
        logger.info(
            f"Imported {len(result.episodes)} episodes from {source_label!r} "
            f"({result.skipped_count} skipped)"
        )
        return self._state

    def reset(self) -> EpisodesState:
        """
        Forget the uploaded dataset and revert to the bundled one.

        Raises:
            StorageWriteError: If the persisted entries cannot be removed
        """
        bundled = self.load_bundled_dataset()
        # A failure between the two deletes leaves an orphaned key, which the
        # next load() discards as corruption
        self.store.clear()
        self._state = bundled
        logger.info("Reset to bundled default dataset")
        return self._state
