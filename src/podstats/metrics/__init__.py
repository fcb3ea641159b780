"""
Derived per-episode and dataset-level metrics.
"""

from podstats.metrics.performance import (
    PerformanceThresholds,
    PerformanceTier,
    Retention,
    performance_tier,
    retention,
    retention_curve,
)

__all__ = [
    "PerformanceThresholds",
    "PerformanceTier",
    "Retention",
    "performance_tier",
    "retention",
    "retention_curve",
]
