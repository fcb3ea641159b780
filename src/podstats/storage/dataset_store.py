"""
Persisted dataset store with corruption recovery.

An uploaded dataset is stored as two entries written and cleared together:
the raw CSV text verbatim, and a JSON metadata document
``{"sourceLabel": str, "timestamp": epoch_ms}``. Stored data that can no
longer be read back is discarded so callers fall back to the bundled dataset.
"""

from typing import Callable, Optional

from podstats.config import DEFAULT_STORAGE_CONFIG
from podstats.errors import ParseError, StorageError, StorageWriteError
from podstats.ingestion.pipeline import parse_episodes
from podstats.logger import get_default_logger
from podstats.models import DatasetMetadata, EpisodeParseResult, PersistedDataset
from podstats.storage.backends import KeyValueStorage


logger = get_default_logger()


Parser = Callable[[str], EpisodeParseResult]


class DatasetStore:
    """
    Saves, restores and clears the uploaded dataset.

    Consistency holds for a single writer; concurrent writers (e.g. two
    processes sharing a storage directory) are not coordinated and the last
    write wins.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        parser: Parser = parse_episodes,
        raw_key: str = DEFAULT_STORAGE_CONFIG["raw_key"],
        metadata_key: str = DEFAULT_STORAGE_CONFIG["metadata_key"],
    ):
        """
        Initialize dataset store.

        Args:
            storage: Key-value backend
            parser: Function used to re-validate stored raw text on load
            raw_key: Key of the raw CSV entry
            metadata_key: Key of the metadata entry
        """
        if raw_key == metadata_key:
            raise ValueError("raw_key and metadata_key must differ")

        self.storage = storage
        self.parser = parser
        self.raw_key = raw_key
        self.metadata_key = metadata_key

    def save(self, raw_text: str, metadata: DatasetMetadata) -> None:
        """
        Persist raw text and metadata as one unit.

        If either write fails, both entries are restored to their previous
        values before the error is raised, so no half-written dataset is ever
        observable.

        Args:
            raw_text: CSV payload, stored verbatim
            metadata: Source label and import timestamp

        Raises:
            StorageWriteError: If the backend rejects the write
            StorageReadError: If the previous values cannot be read
        """
        previous_raw = self.storage.get(self.raw_key)
        previous_metadata = self.storage.get(self.metadata_key)

        try:
            self.storage.set(self.raw_key, raw_text)
            self.storage.set(self.metadata_key, metadata.to_json())
        except StorageError as e:
            logger.error(f"Failed to persist dataset {metadata.source_label!r}: {e}")
            self._restore(previous_raw, previous_metadata)
            if isinstance(e, StorageWriteError):
                raise
            raise StorageWriteError(str(e)) from e

        logger.info(
            f"Persisted dataset {metadata.source_label!r} "
            f"({len(raw_text)} characters, timestamp {metadata.timestamp})"
        )

    def _restore(self, raw: Optional[str], metadata: Optional[str]) -> None:
        for key, value in ((self.raw_key, raw), (self.metadata_key, metadata)):
            try:
                if value is None:
                    self.storage.delete(key)
                else:
                    self.storage.set(key, value)
            except StorageError as e:
                logger.error(f"Failed to roll back {key!r} after a failed save: {e}")

    def load(self) -> Optional[PersistedDataset]:
        """
        Restore the persisted dataset.

        Returns:
            PersistedDataset (with its parse result), or None when nothing is
            stored or the stored data was corrupt and has been discarded

        Raises:
            StorageReadError: If the backend cannot be read
        """
        raw_text = self.storage.get(self.raw_key)
        metadata_json = self.storage.get(self.metadata_key)

        if raw_text is None or metadata_json is None:
            if raw_text is not None or metadata_json is not None:
                self._discard("only one of the two dataset entries is present")
            return None

        try:
            metadata = DatasetMetadata.from_json(metadata_json)
        except ValueError as e:
            self._discard(f"metadata is unreadable ({e})")
            return None

        try:
            result = self.parser(raw_text)
        except ParseError as e:
            self._discard(f"raw text no longer parses ({e})")
            return None

        if not result.episodes:
            self._discard("raw text contains no valid episodes")
            return None

        logger.info(f"Restored persisted dataset {metadata.source_label!r} ({len(result.episodes)} episodes)")
        return PersistedDataset(raw_text=raw_text, metadata=metadata, result=result)

    def _discard(self, reason: str) -> None:
        logger.warning(f"Discarding persisted dataset: {reason}")
        try:
            self.clear()
        except StorageError as e:
            logger.error(f"Failed to discard corrupt persisted dataset: {e}")

    def clear(self) -> None:
        """
        Remove both entries. Clearing an empty store is a no-op.

        Raises:
            StorageWriteError: If the backend cannot delete an entry
        """
        self.storage.delete(self.raw_key)
        self.storage.delete(self.metadata_key)
        logger.debug("Cleared persisted dataset")

    def has_dataset(self) -> bool:
        """True if both entries are present (content is not validated)."""
        return (
            self.storage.get(self.raw_key) is not None
            and self.storage.get(self.metadata_key) is not None
        )
