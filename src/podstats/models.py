"""
Record types shared across the ingestion, classification and storage layers.
"""

import json
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional, Tuple


DEFAULT_SOURCE_LABEL = "Default Dataset"

# Positional column order of the CSV export
EPISODE_COLUMNS = (
    "slug",
    "title",
    "published",
    "day1",
    "day7",
    "day14",
    "day30",
    "day90",
    "spotify",
    "all_time",
)


@dataclass(frozen=True)
class Episode:
    """
    One published episode with cumulative listen counts.

    Horizon counts (``day1`` .. ``day90``) are cumulative listens at each
    elapsed-time checkpoint. They are expected, not required, to be
    non-decreasing.
    """

    slug: str
    title: str
    published: date
    day1: int = 0
    day7: int = 0
    day14: int = 0
    day30: int = 0
    day90: int = 0
    spotify: int = 0
    all_time: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "slug": self.slug,
            "title": self.title,
            "published": self.published.isoformat(),
            "day1": self.day1,
            "day7": self.day7,
            "day14": self.day14,
            "day30": self.day30,
            "day90": self.day90,
            "spotify": self.spotify,
            "all_time": self.all_time,
        }


@dataclass(frozen=True)
class RowRejection:
    """Why a data line was excluded from the episode collection."""

    line_number: int
    reason: str
    line: str = ""


@dataclass(frozen=True)
class EpisodeParseResult:
    """
    Output of parsing one CSV payload.

    Attributes:
        episodes: Accepted episodes, newest first
        skipped_count: Number of rejected data lines
        warnings: Human-readable warnings (header mismatch, skipped rows)
        rejections: Per-line rejection details
    """

    episodes: Tuple[Episode, ...] = ()
    skipped_count: int = 0
    warnings: Tuple[str, ...] = ()
    rejections: Tuple[RowRejection, ...] = ()

    @property
    def accepted_count(self) -> int:
        return len(self.episodes)


@dataclass(frozen=True)
class EpisodesState:
    """The dataset currently active in the application."""

    result: EpisodeParseResult
    source_label: str = DEFAULT_SOURCE_LABEL
    last_import_timestamp: Optional[int] = None

    @property
    def episodes(self) -> Tuple[Episode, ...]:
        return self.result.episodes

    @property
    def skipped_count(self) -> int:
        return self.result.skipped_count

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self.result.warnings

    @property
    def is_default(self) -> bool:
        return self.last_import_timestamp is None and self.source_label == DEFAULT_SOURCE_LABEL


@dataclass(frozen=True)
class DatasetMetadata:
    """Metadata persisted alongside an uploaded dataset."""

    source_label: str
    timestamp: int  # epoch milliseconds

    def to_json(self) -> str:
        return json.dumps({"sourceLabel": self.source_label, "timestamp": self.timestamp})

    @classmethod
    def from_json(cls, payload: str) -> "DatasetMetadata":
        """
        Parse the persisted metadata document.

        Raises:
            ValueError: If the payload is not a JSON object with a string
                ``sourceLabel`` and a numeric ``timestamp``
        """
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(f"Metadata is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Metadata must be a JSON object, got {type(data).__name__}")

        source_label = data.get("sourceLabel")
        timestamp = data.get("timestamp")

        if not isinstance(source_label, str):
            raise ValueError("Metadata field 'sourceLabel' must be a string")
        # bool is an int subclass; reject it explicitly
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("Metadata field 'timestamp' must be a number")

        return cls(source_label=source_label, timestamp=int(timestamp))


@dataclass(frozen=True)
class PersistedDataset:
    """A previously uploaded dataset restored from storage."""

    raw_text: str
    metadata: DatasetMetadata
    result: Optional[EpisodeParseResult] = field(default=None, compare=False)
