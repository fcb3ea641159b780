"""
Shared fixtures for podstats tests.
"""

from datetime import date
from typing import List

import pytest

from podstats.config import Config
from podstats.ingestion.reader import TextDatasetSource
from podstats.models import Episode
from podstats.state import DatasetManager
from podstats.storage.backends import MemoryStorage


HEADER = "Slug,Title,Published,Day 1,Day 7,Day 14,Day 30,Day 90,Spotify,All Time"

BUNDLED_CSV = "\n".join([
    HEADER,
    '10,"10: Swift Concurrency",2025-03-10,100,200,250,300,350,10,400',
    '9,"9: .NET MAUI Deep Dive",2025-03-03,150,250,300,350,400,12,500',
    '8,"8: Android Tips",2025-02-24,80,120,150,180,200,5,220',
])

UPLOAD_CSV = "\n".join([
    HEADER,
    '477,"477: From Spark, To Blazor, To Mobile",2025-08-25,"1,781","2,950","3,302","3,611",-,160,"3,840"',
    '476,"476: GitHub Copilot vs ChatGPT for Coding",2025-08-18,"1,655","2,810","3,150","3,402",-,152,"3,701"',
])


def make_episode(slug: str, all_time: int = 0, published: date = date(2025, 1, 1), **kwargs) -> Episode:
    """Build an Episode with sensible defaults for tests."""
    return Episode(
        slug=slug,
        title=kwargs.pop("title", f"Episode {slug}"),
        published=published,
        all_time=all_time,
        **kwargs,
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer environment overrides out of tests."""
    monkeypatch.delenv("PODSTATS_STORAGE_DIR", raising=False)
    monkeypatch.delenv("PODSTATS_MAX_FILE_SIZE", raising=False)


@pytest.fixture
def config(tmp_path) -> Config:
    """Configuration with built-in defaults (no YAML files present)."""
    return Config(tmp_path / "config")


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def manager(config, storage) -> DatasetManager:
    """DatasetManager over in-memory storage and a small bundled dataset."""
    return DatasetManager.from_config(
        config=config,
        storage=storage,
        bundled_source=TextDatasetSource(BUNDLED_CSV),
    )


@pytest.fixture
def sample_episodes() -> List[Episode]:
    """Three episodes, newest first, with all-time listens 300/200/100."""
    return [
        make_episode("3", all_time=300, published=date(2025, 3, 1), day1=150, day7=200, day30=250),
        make_episode("2", all_time=200, published=date(2025, 2, 1), day1=100, day7=150, day30=180),
        make_episode("1", all_time=100, published=date(2025, 1, 1), day1=50, day7=80, day30=90),
    ]
