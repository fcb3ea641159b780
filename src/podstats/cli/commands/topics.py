"""
Topic analysis command.
"""

import click
from rich.markup import escape
from rich.table import Table

from podstats.cli import build_manager, cli, common_options
from podstats.cli.commands._common import console, format_number, print_error
from podstats.errors import ParseError, StorageError
from podstats.logger import configure_logging
from podstats.topics.classifier import TopicClassifier, search_topics, summarize_topics
from podstats.topics.dictionary import build_dictionary


@cli.command()
@common_options
@click.option('--search', type=str, default=None, help='Only topics whose name contains this text')
@click.option('--limit', type=int, default=20, show_default=True, help='Maximum number of topics to list')
@click.option('--topic', 'topic_name', type=str, default=None, help='List the episodes of one topic')
@click.pass_context
def topics(ctx, search, limit, topic_name, storage_dir, config_dir, log_level):
    """
    Rank topics mentioned in episode titles by total listens.

    Examples:

        # Twenty biggest topics
        podstats topics

        # Episodes tagged .NET MAUI
        podstats topics --topic ".NET MAUI"
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    try:
        state = manager.initialize()
        entries = build_dictionary(manager.config.analytics.get("extra_topic_keywords"))
    except (ParseError, StorageError, ValueError) as e:
        print_error(str(e))
        raise click.Abort()

    summaries = summarize_topics(TopicClassifier(entries).classify(state.episodes))

    if topic_name is not None:
        selected = next(
            (summary for summary in summaries if summary.topic.lower() == topic_name.strip().lower()),
            None,
        )
        if selected is None:
            print_error(f"Topic not found: {topic_name}")
            raise click.Abort()

        console.print(
            f"\n[bold blue]{escape(selected.topic)}[/bold blue] "
            f"[dim]({selected.count} episodes, {format_number(selected.total_listens)} listens)[/dim]\n"
        )

        table = Table(title="Episodes")
        table.add_column("Slug", style="cyan", no_wrap=True)
        table.add_column("Title")
        table.add_column("All Time", justify="right", style="magenta")

        for episode in selected.episodes:
            table.add_row(escape(episode.slug), escape(episode.title), format_number(episode.all_time))

        console.print(table)
        return

    if search:
        summaries = search_topics(summaries, search)

    if not summaries:
        console.print("[yellow]No topics found[/yellow]")
        return

    table = Table(title=f"Topics ({len(summaries)} found)")
    table.add_column("#", justify="right")
    table.add_column("Topic", style="cyan")
    table.add_column("Episodes", justify="right")
    table.add_column("Total Listens", justify="right", style="magenta")
    table.add_column("Avg Listens", justify="right")

    for position, summary in enumerate(summaries[:max(limit, 0)], start=1):
        table.add_row(
            str(position),
            escape(summary.topic),
            str(summary.count),
            format_number(summary.total_listens),
            format_number(summary.avg_listens),
        )

    console.print(table)
