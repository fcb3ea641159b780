"""
Dataset-level statistics over an episode collection.

Aggregations are done with pandas so presentation layers (and exports) share
one tabular view of the collection.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from podstats.config import DEFAULT_ANALYTICS_CONFIG
from podstats.models import EPISODE_COLUMNS, Episode
from podstats.metrics.performance import (
    DEFAULT_THRESHOLDS,
    PerformanceThresholds,
    performance_tier,
    retention,
)


@dataclass(frozen=True)
class MetricStats:
    """Headline numbers for the dashboard."""

    total_episodes: int
    total_listens: int
    avg_day1: float
    avg_day7: float
    avg_day30: float
    avg_all_time: float
    top_episode: Optional[Episode]
    recent_avg: float
    old_avg: float
    growth_rate: float  # percent change from the oldest window to the most recent one

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_episodes": self.total_episodes,
            "total_listens": self.total_listens,
            "avg_day1": self.avg_day1,
            "avg_day7": self.avg_day7,
            "avg_day30": self.avg_day30,
            "avg_all_time": self.avg_all_time,
            "top_episode": self.top_episode.slug if self.top_episode else None,
            "recent_avg": self.recent_avg,
            "old_avg": self.old_avg,
            "growth_rate": self.growth_rate,
        }


def episodes_to_frame(episodes: Sequence[Episode]) -> pd.DataFrame:
    """
    Tabular view of an episode collection, one row per episode.

    Row order follows the input order; ``published`` is a datetime64 column.
    """
    frame = pd.DataFrame(
        [episode.to_dict() for episode in episodes],
        columns=list(EPISODE_COLUMNS),
    )
    frame["published"] = pd.to_datetime(frame["published"])
    return frame


def average_all_time(episodes: Sequence[Episode]) -> float:
    """
    Mean all-time listens across the collection.

    Raises:
        ValueError: If the collection is empty
    """
    if not episodes:
        raise ValueError("Cannot average an empty episode collection")
    return sum(episode.all_time for episode in episodes) / len(episodes)


def compute_dataset_stats(
    episodes: Sequence[Episode],
    recent_window: int = DEFAULT_ANALYTICS_CONFIG["recent_window"],
) -> MetricStats:
    """
    Compute dashboard statistics.

    The collection is expected newest first: the "recent" window is the first
    ``recent_window`` episodes and the "old" window the last ones.

    Args:
        episodes: Episode collection, newest first
        recent_window: Number of episodes in each comparison window

    Returns:
        MetricStats

    Raises:
        ValueError: If the collection is empty
    """
    if not episodes:
        raise ValueError("Cannot compute statistics for an empty episode collection")

    frame = episodes_to_frame(episodes)

    recent = frame.head(recent_window)
    old = frame.tail(recent_window)
    recent_avg = float(recent["all_time"].mean())
    old_avg = float(old["all_time"].mean())
    growth_rate = ((recent_avg - old_avg) / old_avg) * 100 if old_avg else 0.0

    # idxmax returns the first maximum, so ties go to the newest episode
    top_index = int(frame["all_time"].idxmax())

    return MetricStats(
        total_episodes=len(frame),
        total_listens=int(frame["all_time"].sum()),
        avg_day1=float(frame["day1"].mean()),
        avg_day7=float(frame["day7"].mean()),
        avg_day30=float(frame["day30"].mean()),
        avg_all_time=float(frame["all_time"].mean()),
        top_episode=episodes[top_index],
        recent_avg=recent_avg,
        old_avg=old_avg,
        growth_rate=growth_rate,
    )


def monthly_performance(
    episodes: Sequence[Episode],
    months: int = DEFAULT_ANALYTICS_CONFIG["monthly_window"],
) -> pd.DataFrame:
    """
    Listens grouped by publication month.

    Returns:
        DataFrame with columns month ("YYYY-MM"), listens, count,
        avg_per_episode; oldest month first, limited to the last ``months``
    """
    columns = ["month", "listens", "count", "avg_per_episode"]
    if not episodes:
        return pd.DataFrame(columns=columns)

    frame = episodes_to_frame(episodes)
    frame["month"] = frame["published"].dt.strftime("%Y-%m")

    grouped = (
        frame.groupby("month")
        .agg(listens=("all_time", "sum"), count=("slug", "count"))
        .reset_index()
        .sort_values("month")
    )
    grouped["avg_per_episode"] = (grouped["listens"] / grouped["count"]).round().astype(int)

    return grouped.tail(months).reset_index(drop=True)[columns]


def listen_distribution(
    episodes: Sequence[Episode],
    bins: Optional[List[Dict[str, Any]]] = None,
) -> pd.DataFrame:
    """
    Count episodes per all-time listen bucket.

    Buckets are half-open ``[min, max)``; a ``max`` of None means unbounded.

    Returns:
        DataFrame with columns name and count, in bucket order
    """
    if bins is None:
        bins = DEFAULT_ANALYTICS_CONFIG["distribution_bins"]

    edges = [float(bucket["min"]) for bucket in bins]
    last_max = bins[-1].get("max")
    edges.append(float("inf") if last_max is None else float(last_max))
    names = [bucket["name"] for bucket in bins]

    all_time = pd.Series([episode.all_time for episode in episodes], dtype="float64")
    buckets = pd.cut(all_time, bins=edges, labels=names, right=False)
    counts = buckets.value_counts(sort=False).reindex(names, fill_value=0)

    return pd.DataFrame({"name": names, "count": counts.astype(int).tolist()})


def top_episodes(episodes: Sequence[Episode], n: int = 10) -> List[Episode]:
    """The n episodes with the most all-time listens (stable for ties)."""
    return sorted(episodes, key=lambda episode: episode.all_time, reverse=True)[:n]


def episode_rank(episode: Episode, episodes: Sequence[Episode]) -> int:
    """
    1-based rank of an episode by all-time listens.

    Raises:
        ValueError: If the episode's slug is not in the collection
    """
    ranked = top_episodes(episodes, n=len(episodes))
    for position, candidate in enumerate(ranked, start=1):
        if candidate.slug == episode.slug:
            return position
    raise ValueError(f"Episode {episode.slug!r} is not in the collection")


def nearby_episodes(episode: Episode, episodes: Sequence[Episode], radius: int = 2) -> List[Episode]:
    """
    Episodes published around the given one (up to ``radius`` on each side).

    Returns:
        Neighbouring episodes in collection order, excluding the episode itself
    """
    index = next((i for i, candidate in enumerate(episodes) if candidate.slug == episode.slug), None)
    if index is None:
        return []
    start = max(0, index - radius)
    stop = min(len(episodes), index + radius + 1)
    return [episodes[i] for i in range(start, stop) if i != index]


def episode_report_frame(
    episodes: Sequence[Episode],
    thresholds: PerformanceThresholds = DEFAULT_THRESHOLDS,
) -> pd.DataFrame:
    """
    Episodes with derived retention and performance tier columns, for export.
    """
    frame = episodes_to_frame(episodes)
    if frame.empty:
        return frame.assign(retention_day1=[], retention_day7=[], retention_day30=[], performance=[])

    average = average_all_time(episodes)
    retentions = [retention(episode) for episode in episodes]
    frame["retention_day1"] = [r.day1 for r in retentions]
    frame["retention_day7"] = [r.day7 for r in retentions]
    frame["retention_day30"] = [r.day30 for r in retentions]
    if average > 0:
        frame["performance"] = [
            performance_tier(episode, average, thresholds).value for episode in episodes
        ]
    else:
        frame["performance"] = None
    return frame
