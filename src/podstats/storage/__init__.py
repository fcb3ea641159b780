"""
Persistence of uploaded datasets.
"""

from podstats.storage.backends import FileStorage, KeyValueStorage, MemoryStorage
from podstats.storage.dataset_store import DatasetStore

__all__ = ["DatasetStore", "FileStorage", "KeyValueStorage", "MemoryStorage"]
