"""
Command-line interface for the podstats package.

Provides commands for importing datasets and reporting episode metrics,
topics and trends.
"""

from pathlib import Path
from typing import Optional

import click

from podstats import __version__
from podstats.config import Config
from podstats.state import DatasetManager
from podstats.storage.backends import FileStorage


# Common options that can be reused across commands
def common_options(func):
    """Decorator to add common CLI options."""
    func = click.option(
        '--storage-dir',
        type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
        default=None,
        help='Directory holding the imported dataset (default: ~/.podstats or $PODSTATS_STORAGE_DIR)',
    )(func)
    func = click.option(
        '--config-dir',
        type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
        default=Path('config'),
        help='Path to configuration directory (default: ./config)',
    )(func)
    func = click.option(
        '--log-level',
        type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
        default='WARNING',
        help='Logging level (default: WARNING)',
    )(func)
    return func


def build_manager(config_dir: Path, storage_dir: Optional[Path]) -> DatasetManager:
    """Create a DatasetManager from the common CLI options."""
    config = Config(config_dir)
    storage = FileStorage(storage_dir) if storage_dir else None
    return DatasetManager.from_config(config=config, storage=storage)


@click.group()
@click.version_option(version=__version__, prog_name='podstats')
@click.pass_context
def cli(ctx):
    """
    Podcast episode metrics CLI.

    Imports episode performance exports (CSV) and reports listens, retention,
    performance tiers and topics derived from episode titles.
    """
    ctx.ensure_object(dict)


@cli.command()
def version():
    """Display version information."""
    click.echo(f"podstats v{__version__}")


def main():
    """Main entry point for the CLI."""
    cli()


# Registers the subcommands on the group defined above
from podstats.cli.commands import dataset, report, topics  # noqa: E402,F401


if __name__ == '__main__':
    main()
