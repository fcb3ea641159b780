"""
Reporting commands: dashboard summary, episode listings, trends and export.
"""

from pathlib import Path
from typing import List, Optional

import click
from rich.markup import escape
from rich.table import Table

from podstats.cli import build_manager, cli, common_options
from podstats.cli.commands._common import (
    console,
    format_date,
    format_number,
    format_percent,
    format_tier,
    print_error,
    print_warnings,
)
from podstats.errors import ParseError, StorageError
from podstats.logger import configure_logging
from podstats.metrics.performance import PerformanceThresholds, performance_tier, retention, retention_curve
from podstats.metrics.statistics import (
    average_all_time,
    compute_dataset_stats,
    episode_rank,
    episode_report_frame,
    listen_distribution,
    monthly_performance,
    nearby_episodes,
    top_episodes,
)
from podstats.models import Episode, EpisodesState
from podstats.topics.classifier import TopicClassifier
from podstats.topics.dictionary import build_dictionary


SORT_FIELDS = {
    'published': lambda episode: episode.published,
    'title': lambda episode: episode.title.lower(),
    'day1': lambda episode: episode.day1,
    'day7': lambda episode: episode.day7,
    'day30': lambda episode: episode.day30,
    'all_time': lambda episode: episode.all_time,
}


def _load_state(manager) -> EpisodesState:
    try:
        return manager.initialize()
    except (ParseError, StorageError) as e:
        print_error(str(e))
        raise click.Abort()


def _thresholds(manager) -> PerformanceThresholds:
    return PerformanceThresholds.from_dict(manager.config.analytics.get("performance_thresholds"))


def _filter_episodes(episodes: List[Episode], search: Optional[str]) -> List[Episode]:
    if not search:
        return list(episodes)
    needle = search.strip().lower()
    return [
        episode for episode in episodes
        if needle in episode.title.lower() or needle in episode.slug.lower()
    ]


@cli.command()
@common_options
@click.option('--top', type=int, default=5, show_default=True, help='Number of top episodes to list')
@click.pass_context
def summary(ctx, top, storage_dir, config_dir, log_level):
    """
    Show dataset-wide statistics and the best performing episodes.
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    state = _load_state(manager)
    recent_window = int(manager.config.analytics["recent_window"])

    console.print(f"\n[bold blue]Dataset:[/bold blue] {escape(state.source_label)}\n")
    print_warnings(state.warnings)

    if not state.episodes:
        console.print("[yellow]No episodes to summarize[/yellow]")
        return

    stats = compute_dataset_stats(state.episodes, recent_window=recent_window)

    table = Table(title="Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta", justify="right")

    table.add_row("Total Episodes", format_number(stats.total_episodes))
    table.add_row("Total Listens", format_number(stats.total_listens))
    table.add_row("Avg Day 1", format_number(stats.avg_day1))
    table.add_row("Avg Day 7", format_number(stats.avg_day7))
    table.add_row("Avg Day 30", format_number(stats.avg_day30))
    table.add_row("Avg All Time", format_number(stats.avg_all_time))
    table.add_row(f"Recent {recent_window} Avg", format_number(stats.recent_avg))
    table.add_row(f"Oldest {recent_window} Avg", format_number(stats.old_avg))
    growth_style = "green" if stats.growth_rate >= 0 else "red"
    table.add_row("Growth", f"[{growth_style}]{stats.growth_rate:+.1f}%[/{growth_style}]")

    console.print(table)

    if top > 0:
        thresholds = _thresholds(manager)
        average = stats.avg_all_time

        top_table = Table(title=f"Top {top} Episodes")
        top_table.add_column("#", justify="right")
        top_table.add_column("Slug", style="cyan")
        top_table.add_column("Title")
        top_table.add_column("All Time", justify="right", style="magenta")
        top_table.add_column("Performance")

        for position, episode in enumerate(top_episodes(state.episodes, top), start=1):
            tier = format_tier(performance_tier(episode, average, thresholds)) if average > 0 else "-"
            top_table.add_row(
                str(position),
                escape(episode.slug),
                escape(episode.title),
                format_number(episode.all_time),
                tier,
            )

        console.print(top_table)


@cli.command()
@common_options
@click.option(
    '--sort', 'sort_field',
    type=click.Choice(sorted(SORT_FIELDS)),
    default='published',
    show_default=True,
    help='Field to sort by',
)
@click.option('--order', type=click.Choice(['asc', 'desc']), default='desc', show_default=True)
@click.option('--search', type=str, default=None, help='Only episodes whose title or slug contains this text')
@click.option('--limit', type=int, default=None, help='Maximum number of episodes to list')
@click.pass_context
def episodes(ctx, sort_field, order, search, limit, storage_dir, config_dir, log_level):
    """
    List episodes with their listen counts and retention.

    Examples:

        # Ten most listened episodes
        podstats episodes --sort all_time --limit 10

        # Episodes about SwiftUI, oldest first
        podstats episodes --search swiftui --order asc
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    state = _load_state(manager)

    selected = _filter_episodes(state.episodes, search)
    selected.sort(key=SORT_FIELDS[sort_field], reverse=(order == 'desc'))
    if limit is not None:
        selected = selected[:max(limit, 0)]

    if not selected:
        console.print("[yellow]No episodes match[/yellow]")
        return

    table = Table(title=f"Episodes ({escape(state.source_label)})")
    table.add_column("Slug", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Published")
    table.add_column("Day 1", justify="right")
    table.add_column("Day 30", justify="right")
    table.add_column("All Time", justify="right", style="magenta")
    table.add_column("D1 Ret.", justify="right")

    for episode in selected:
        table.add_row(
            escape(episode.slug),
            escape(episode.title),
            format_date(episode.published),
            format_number(episode.day1),
            format_number(episode.day30),
            format_number(episode.all_time),
            format_percent(retention(episode).day1),
        )

    console.print(table)
    console.print(f"\n[dim]{len(selected)} of {len(state.episodes)} episodes[/dim]")


@cli.command()
@common_options
@click.argument('slug')
@click.pass_context
def episode(ctx, slug, storage_dir, config_dir, log_level):
    """
    Show the details of one episode.

    Includes its retention curve, performance tier, rank, topics and the
    episodes published around it.
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    state = _load_state(manager)

    match = next((candidate for candidate in state.episodes if candidate.slug == slug), None)
    if match is None:
        print_error(f"Episode not found: {slug}")
        raise click.Abort()

    average = average_all_time(state.episodes)
    rank = episode_rank(match, state.episodes)

    console.print(f"\n[bold blue]{escape(match.title)}[/bold blue]")
    console.print(f"[dim]Episode {escape(match.slug)} · published {format_date(match.published)}[/dim]\n")

    table = Table(title="Listens")
    table.add_column("Horizon", style="cyan")
    table.add_column("Listens", justify="right", style="magenta")
    table.add_column("Share of All Time", justify="right")

    curve = retention_curve(match)
    for label, field_name in (
        ("Day 1", "day1"),
        ("Day 7", "day7"),
        ("Day 14", "day14"),
        ("Day 30", "day30"),
        ("Day 90", "day90"),
    ):
        table.add_row(label, format_number(getattr(match, field_name)), format_percent(curve[field_name]))
    table.add_row("Spotify", format_number(match.spotify), "")
    table.add_row("All Time", format_number(match.all_time), "")

    console.print(table)

    if average > 0:
        tier = performance_tier(match, average, _thresholds(manager))
        console.print(f"Performance: {format_tier(tier)} ({match.all_time / average:.2f}x average)")
    console.print(f"Rank: #{rank} of {len(state.episodes)}")

    classifier = TopicClassifier(build_dictionary(manager.config.analytics.get("extra_topic_keywords")))
    topics = classifier.classify_title(match.title)
    if topics:
        console.print(f"Topics: {escape(', '.join(topics))}")

    neighbours = nearby_episodes(match, state.episodes)
    if neighbours:
        console.print("\n[bold]Nearby episodes[/bold]")
        for neighbour in neighbours:
            console.print(
                f"  {escape(neighbour.slug)}: {escape(neighbour.title)} "
                f"[dim]({format_number(neighbour.all_time)} listens)[/dim]"
            )


@cli.command()
@common_options
@click.option('--months', type=int, default=None, help='Number of months to show (default: from config)')
@click.pass_context
def trends(ctx, months, storage_dir, config_dir, log_level):
    """
    Show monthly listens and the all-time listen distribution.
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    state = _load_state(manager)
    analytics = manager.config.analytics
    months = months if months is not None else int(analytics["monthly_window"])

    monthly = monthly_performance(state.episodes, months)

    table = Table(title="Monthly Performance")
    table.add_column("Month", style="cyan")
    table.add_column("Episodes", justify="right")
    table.add_column("Listens", justify="right", style="magenta")
    table.add_column("Avg / Episode", justify="right")

    for row in monthly.to_dict("records"):
        table.add_row(
            row["month"],
            str(row["count"]),
            format_number(row["listens"]),
            format_number(row["avg_per_episode"]),
        )

    console.print(table)

    distribution = listen_distribution(state.episodes, analytics.get("distribution_bins"))

    dist_table = Table(title="All-Time Listen Distribution")
    dist_table.add_column("Range", style="cyan")
    dist_table.add_column("Episodes", justify="right", style="magenta")

    for row in distribution.to_dict("records"):
        dist_table.add_row(row["name"], str(row["count"]))

    console.print(dist_table)


@cli.command()
@common_options
@click.option(
    '--format', 'output_format',
    type=click.Choice(['csv', 'json']),
    default='csv',
    show_default=True,
    help='Output format',
)
@click.option(
    '--output', '-o',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Write to this file instead of stdout',
)
@click.pass_context
def export(ctx, output_format, output, storage_dir, config_dir, log_level):
    """
    Export the active dataset with retention and performance columns.
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    state = _load_state(manager)

    frame = episode_report_frame(state.episodes, _thresholds(manager))
    frame["published"] = frame["published"].dt.strftime("%Y-%m-%d")

    if output_format == 'json':
        text = frame.to_json(orient="records", indent=2)
    else:
        text = frame.to_csv(index=False)

    if output is None:
        click.echo(text)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]✓[/green] Exported {len(frame)} episodes to {escape(str(output))}")
