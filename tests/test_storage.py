"""
Unit tests for dataset persistence: storage backends and the dataset store.
"""

import json

import pytest

from podstats.errors import StorageReadError, StorageWriteError
from podstats.models import DatasetMetadata, PersistedDataset
from podstats.storage.backends import FileStorage, MemoryStorage
from podstats.storage.dataset_store import DatasetStore

from conftest import HEADER, UPLOAD_CSV


RAW_KEY = "podstats.dataset.raw"
METADATA_KEY = "podstats.dataset.metadata"


class FailingMetadataStorage(MemoryStorage):
    """Accepts the raw entry but refuses to write metadata."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def set(self, key, value):
        if self.fail and key == METADATA_KEY:
            raise StorageWriteError("disk full")
        super().set(key, value)


@pytest.fixture
def metadata() -> DatasetMetadata:
    return DatasetMetadata(source_label="metrics-20250930.csv", timestamp=1727740800000)


@pytest.fixture
def store(storage) -> DatasetStore:
    return DatasetStore(storage)


# ============================================================================
# Backend Tests
# ============================================================================

class TestMemoryStorage:
    """Test the in-process backend."""

    def test_get_set_delete(self):
        storage = MemoryStorage()

        assert storage.get("k") is None
        storage.set("k", "v")
        assert storage.get("k") == "v"
        storage.delete("k")
        assert storage.get("k") is None

    def test_delete_absent_key_is_noop(self):
        MemoryStorage().delete("missing")

    def test_quota_exceeded(self):
        storage = MemoryStorage(quota_bytes=5)
        storage.set("a", "123")

        with pytest.raises(StorageWriteError):
            storage.set("b", "456")

        assert storage.get("b") is None

    def test_quota_counts_replaced_value_once(self):
        storage = MemoryStorage(quota_bytes=5)
        storage.set("a", "12345")
        storage.set("a", "54321")

        assert storage.get("a") == "54321"


class TestFileStorage:
    """Test the directory-backed backend."""

    def test_round_trip(self, tmp_path):
        storage = FileStorage(tmp_path / "store")

        storage.set(RAW_KEY, UPLOAD_CSV)

        assert storage.get(RAW_KEY) == UPLOAD_CSV

    def test_directory_created_on_first_write(self, tmp_path):
        directory = tmp_path / "nested" / "store"
        storage = FileStorage(directory)

        assert storage.get("k") is None
        assert not directory.exists()

        storage.set("k", "v")
        assert directory.is_dir()

    def test_keys_are_safe_file_names(self, tmp_path):
        storage = FileStorage(tmp_path)

        storage.set("a/b:c", "value")

        files = [p.name for p in tmp_path.iterdir()]
        assert len(files) == 1
        assert "/" not in files[0]
        assert storage.get("a/b:c") == "value"

    def test_no_temporary_files_left(self, tmp_path):
        storage = FileStorage(tmp_path)

        storage.set("k", "one")
        storage.set("k", "two")

        assert [p.name for p in tmp_path.iterdir()] == [f"k{FileStorage.SUFFIX}"]
        assert storage.get("k") == "two"

    def test_delete(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("k", "v")

        storage.delete("k")
        storage.delete("k")

        assert storage.get("k") is None

    def test_undecodable_value_raises_read_error(self, tmp_path):
        (tmp_path / f"{RAW_KEY}{FileStorage.SUFFIX}").write_bytes(b"\xff\xfe\x00bad")
        storage = FileStorage(tmp_path)

        with pytest.raises(StorageReadError):
            storage.get(RAW_KEY)

    def test_unreadable_value_raises_read_error(self, tmp_path):
        # A directory in place of the value file cannot be read as text
        (tmp_path / f"{RAW_KEY}{FileStorage.SUFFIX}").mkdir()
        storage = FileStorage(tmp_path)

        with pytest.raises(StorageReadError):
            storage.get(RAW_KEY)


# ============================================================================
# Metadata Tests
# ============================================================================

class TestDatasetMetadata:
    """Test metadata serialization."""

    def test_to_json_shape(self, metadata):
        assert json.loads(metadata.to_json()) == {
            "sourceLabel": "metrics-20250930.csv",
            "timestamp": 1727740800000,
        }

    def test_from_json(self, metadata):
        assert DatasetMetadata.from_json(metadata.to_json()) == metadata

    @pytest.mark.parametrize("payload", [
        "not json",
        "[]",
        '{"timestamp": 1}',
        '{"sourceLabel": 5, "timestamp": 1}',
        '{"sourceLabel": "a.csv", "timestamp": "now"}',
        '{"sourceLabel": "a.csv", "timestamp": true}',
    ])
    def test_invalid_payloads(self, payload):
        with pytest.raises(ValueError):
            DatasetMetadata.from_json(payload)


# ============================================================================
# Dataset Store Tests
# ============================================================================

class TestDatasetStore:
    """Test save/load/clear and corruption recovery."""

    def test_round_trip(self, store, metadata):
        store.save(UPLOAD_CSV, metadata)

        persisted = store.load()

        assert persisted == PersistedDataset(raw_text=UPLOAD_CSV, metadata=metadata)
        assert [e.slug for e in persisted.result.episodes] == ["477", "476"]

    def test_raw_text_stored_verbatim(self, store, storage, metadata):
        store.save(UPLOAD_CSV + "\n", metadata)

        assert storage.get(RAW_KEY) == UPLOAD_CSV + "\n"

    def test_load_empty_store(self, store):
        assert store.load() is None

    def test_clear_then_load(self, store, metadata):
        store.save(UPLOAD_CSV, metadata)

        store.clear()

        assert store.load() is None
        assert not store.has_dataset()

    def test_clear_is_idempotent(self, store):
        store.clear()
        store.clear()

        assert store.load() is None

    def test_orphan_entry_is_removed(self, store, storage):
        storage.set(RAW_KEY, UPLOAD_CSV)

        assert store.load() is None
        assert storage.get(RAW_KEY) is None

    @pytest.mark.parametrize("metadata_json", [
        "{broken",
        '{"sourceLabel": 5, "timestamp": 1}',
    ])
    def test_corrupt_metadata_is_discarded(self, store, storage, metadata_json):
        storage.set(RAW_KEY, UPLOAD_CSV)
        storage.set(METADATA_KEY, metadata_json)

        assert store.load() is None
        assert storage.get(RAW_KEY) is None
        assert storage.get(METADATA_KEY) is None

    @pytest.mark.parametrize("raw_text", ["   ", HEADER])
    def test_unusable_raw_text_is_discarded(self, store, storage, metadata, raw_text):
        storage.set(RAW_KEY, raw_text)
        storage.set(METADATA_KEY, metadata.to_json())

        assert store.load() is None
        assert storage.get(RAW_KEY) is None
        assert storage.get(METADATA_KEY) is None

    def test_failed_write_keeps_previous_dataset(self, metadata):
        storage = MemoryStorage(quota_bytes=len(UPLOAD_CSV) + 200)
        store = DatasetStore(storage)
        store.save(UPLOAD_CSV, metadata)

        larger = UPLOAD_CSV + "\n" + "\n".join(
            f"{n},Title {n},2025-01-01,1,2,3,4,5,6,7" for n in range(100)
        )
        with pytest.raises(StorageWriteError):
            store.save(larger, DatasetMetadata(source_label="big.csv", timestamp=1))

        persisted = store.load()
        assert persisted.raw_text == UPLOAD_CSV
        assert persisted.metadata == metadata

    def test_failed_metadata_write_restores_raw_entry(self, metadata):
        storage = FailingMetadataStorage()
        store = DatasetStore(storage)
        store.save(UPLOAD_CSV, metadata)

        storage.fail = True
        with pytest.raises(StorageWriteError):
            store.save(HEADER + "\n1,New,2025-01-01,1,2,3,4,5,6,7", DatasetMetadata("new.csv", 2))

        assert storage.get(RAW_KEY) == UPLOAD_CSV
        assert DatasetMetadata.from_json(storage.get(METADATA_KEY)) == metadata

    def test_failed_first_save_leaves_store_empty(self):
        storage = FailingMetadataStorage()
        storage.fail = True
        store = DatasetStore(storage)

        with pytest.raises(StorageWriteError):
            store.save(UPLOAD_CSV, DatasetMetadata("a.csv", 1))

        assert storage.keys() == []

    def test_keys_must_differ(self, storage):
        with pytest.raises(ValueError):
            DatasetStore(storage, raw_key="same", metadata_key="same")

    def test_file_backed_store(self, tmp_path, metadata):
        DatasetStore(FileStorage(tmp_path)).save(UPLOAD_CSV, metadata)

        persisted = DatasetStore(FileStorage(tmp_path)).load()

        assert persisted.metadata == metadata
        assert len(persisted.result.episodes) == 2

    def test_read_failure_propagates_and_keeps_entries(self, tmp_path, metadata):
        DatasetStore(FileStorage(tmp_path)).save(UPLOAD_CSV, metadata)
        raw_path = tmp_path / f"{RAW_KEY}{FileStorage.SUFFIX}"
        raw_path.write_bytes(b"\xff\xfe\x00bad")

        with pytest.raises(StorageReadError):
            DatasetStore(FileStorage(tmp_path)).load()

        assert raw_path.exists()
        assert (tmp_path / f"{METADATA_KEY}{FileStorage.SUFFIX}").exists()
