"""
Per-episode retention ratios and performance tiers.

Both functions are pure and classify a single episode; averages and other
aggregates are computed by the caller (see ``podstats.metrics.statistics``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from podstats.models import Episode


class PerformanceTier(str, Enum):
    """Coarse classification of an episode against the dataset average."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    BELOW_AVERAGE = "below-average"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return {
            PerformanceTier.EXCELLENT: "Excellent Performance",
            PerformanceTier.GOOD: "Good Performance",
            PerformanceTier.AVERAGE: "Average Performance",
            PerformanceTier.BELOW_AVERAGE: "Below Average",
        }[self]


@dataclass(frozen=True)
class PerformanceThresholds:
    """
    Lower bounds (inclusive) of the all-time/average ratio for each tier.
    """

    excellent: float = 1.5
    good: float = 1.1
    average: float = 0.9

    def __post_init__(self):
        if not (self.excellent >= self.good >= self.average >= 0):
            raise ValueError(
                "Performance thresholds must satisfy excellent >= good >= average >= 0, "
                f"got {self.excellent}, {self.good}, {self.average}"
            )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PerformanceThresholds":
        """Build thresholds from the analytics config's performance_thresholds mapping."""
        data = data or {}
        defaults = cls()
        return cls(
            excellent=float(data.get("excellent", defaults.excellent)),
            good=float(data.get("good", defaults.good)),
            average=float(data.get("average", defaults.average)),
        )


DEFAULT_THRESHOLDS = PerformanceThresholds()


@dataclass(frozen=True)
class Retention:
    """Share of all-time listens reached by each horizon, in percent."""

    day1: float = 0.0
    day7: float = 0.0
    day30: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {"day1": self.day1, "day7": self.day7, "day30": self.day30}


def _percent_of_all_time(count: int, all_time: int) -> float:
    return (count / all_time) * 100


def retention(episode: Episode) -> Retention:
    """
    Compute day 1/7/30 retention as a percentage of all-time listens.

    Values are not clamped: inconsistent source data (a horizon count above
    the all-time count) yields a value above 100.

    Args:
        episode: Episode to measure

    Returns:
        Retention; all zeros when the episode has no all-time listens

    Example:
        >>> retention(Episode("1", "t", date(2025, 1, 1), day1=50, day7=80, day30=90, all_time=100))
        Retention(day1=50.0, day7=80.0, day30=90.0)
    """
    if episode.all_time == 0:
        return Retention(0.0, 0.0, 0.0)

    return Retention(
        day1=_percent_of_all_time(episode.day1, episode.all_time),
        day7=_percent_of_all_time(episode.day7, episode.all_time),
        day30=_percent_of_all_time(episode.day30, episode.all_time),
    )


def retention_curve(episode: Episode) -> Dict[str, float]:
    """
    Retention at every horizon, including day 14 and day 90.

    Horizons without data (count 0) report 0.

    Returns:
        Ordered mapping of horizon name to percentage
    """
    horizons = {
        "day1": episode.day1,
        "day7": episode.day7,
        "day14": episode.day14,
        "day30": episode.day30,
        "day90": episode.day90,
    }
    if episode.all_time == 0:
        return {name: 0.0 for name in horizons}
    return {
        name: _percent_of_all_time(count, episode.all_time) if count > 0 else 0.0
        for name, count in horizons.items()
    }


def performance_tier(
    episode: Episode,
    average_all_time: float,
    thresholds: PerformanceThresholds = DEFAULT_THRESHOLDS,
) -> PerformanceTier:
    """
    Classify an episode's all-time listens relative to the dataset average.

    Tier lower bounds are inclusive: a ratio of exactly 1.5 is excellent,
    exactly 1.1 good, exactly 0.9 average.

    Args:
        episode: Episode to classify
        average_all_time: Mean all-time listens of the active collection
        thresholds: Tier boundaries (default: 1.5 / 1.1 / 0.9)

    Returns:
        PerformanceTier

    Raises:
        ValueError: If average_all_time is not positive
    """
    if average_all_time <= 0:
        raise ValueError(f"average_all_time must be positive, got {average_all_time}")

    ratio = episode.all_time / average_all_time

    if ratio >= thresholds.excellent:
        return PerformanceTier.EXCELLENT
    if ratio >= thresholds.good:
        return PerformanceTier.GOOD
    if ratio >= thresholds.average:
        return PerformanceTier.AVERAGE
    return PerformanceTier.BELOW_AVERAGE
