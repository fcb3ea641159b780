"""
Dataset commands: show, import and reset the active dataset.
"""

import click
from pathlib import Path
from rich.markup import escape
from rich.table import Table

from podstats.cli import build_manager, cli, common_options
from podstats.cli.commands._common import (
    console,
    format_number,
    format_timestamp,
    print_error,
    print_warnings,
)
from podstats.errors import FileTooLargeError, ImportRejectedError, ParseError, StorageError
from podstats.ingestion.reader import get_max_file_size_mb
from podstats.logger import configure_logging
from podstats.models import EpisodesState


def _print_state(state: EpisodesState) -> None:
    table = Table(title="Active Dataset")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Current Dataset", escape(state.source_label))
    table.add_row("Episodes Loaded", format_number(len(state.episodes)))
    table.add_row("Rows Skipped", format_number(state.skipped_count))
    if state.last_import_timestamp is not None:
        table.add_row("Last Import", format_timestamp(state.last_import_timestamp))

    console.print(table)
    print_warnings(state.warnings)


@cli.command()
@common_options
@click.pass_context
def status(ctx, storage_dir, config_dir, log_level):
    """
    Show which dataset is active.

    Falls back to the bundled default dataset when no import has been made or
    the stored import is corrupt.
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    try:
        state = manager.initialize()
    except (ParseError, StorageError) as e:
        print_error(str(e))
        raise click.Abort()

    _print_state(state)


@cli.command(name='import')
@common_options
@click.argument('csv_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def import_dataset(ctx, csv_file, storage_dir, config_dir, log_level):
    """
    Import a CSV export and make it the active dataset.

    CSV_FILE must use the column order Slug, Title, Published, Day 1, Day 7,
    Day 14, Day 30, Day 90, Spotify, All Time. Rows that cannot be read are
    skipped and reported; the previous dataset is kept if the import fails.

    Examples:

        # Import a fireside.fm export
        podstats import metrics-20250930.csv
    """
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    console.print(f"\n[bold blue]Importing[/bold blue] {escape(csv_file.name)}\n")

    try:
        state = manager.import_file(csv_file)
    except ImportRejectedError as e:
        print_error(str(e))
        if isinstance(e, FileTooLargeError):
            console.print(f"[dim]Maximum file size: {get_max_file_size_mb(manager.max_file_size_bytes):g} MB[/dim]")
        raise click.Abort()
    except (ParseError, StorageError) as e:
        print_error(str(e))
        raise click.Abort()

    console.print(f"[green]✓[/green] Imported {format_number(len(state.episodes))} episodes")
    _print_state(state)


@cli.command()
@common_options
@click.pass_context
def reset(ctx, storage_dir, config_dir, log_level):
    """Discard the imported dataset and return to the bundled default."""
    configure_logging(level=log_level)

    manager = build_manager(config_dir, storage_dir)
    try:
        state = manager.reset()
    except (ParseError, StorageError) as e:
        print_error(str(e))
        raise click.Abort()

    console.print("[green]✓[/green] Reset to the default dataset")
    _print_state(state)
