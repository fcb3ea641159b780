"""
Shared helpers for CLI commands: formatting and error reporting.
"""

from datetime import date, datetime
from typing import Iterable

from rich.console import Console
from rich.markup import escape

from podstats.metrics.performance import PerformanceTier


console = Console()

TIER_STYLES = {
    PerformanceTier.EXCELLENT: "green",
    PerformanceTier.GOOD: "blue",
    PerformanceTier.AVERAGE: "white",
    PerformanceTier.BELOW_AVERAGE: "yellow",
}


def format_number(value: float) -> str:
    """Thousands-grouped integer, e.g. 3840 -> '3,840'."""
    return f"{round(value):,}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def format_date(value: date) -> str:
    return value.strftime("%b %d, %Y")


def format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M:%S")


def format_tier(tier: PerformanceTier) -> str:
    return f"[{TIER_STYLES[tier]}]{tier.label}[/{TIER_STYLES[tier]}]"


def print_warnings(warnings: Iterable[str]) -> None:
    warnings = list(warnings)
    if not warnings:
        return
    console.print("\n[yellow]Import warnings:[/yellow]")
    for warning in warnings:
        console.print(f"  [yellow]•[/yellow] {escape(warning)}")


def print_error(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
