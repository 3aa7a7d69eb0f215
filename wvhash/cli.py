"""
Command-line interface for wvhash.

Commands:
    wvhash build DATASET OUTPUT   build and persist an index file
    wvhash query PATH             compare word pairs interactively
    wvhash info PATH              show hash table diagnostics
    wvhash config init|show       manage the configuration file
"""

from pathlib import Path
from typing import Optional, Union

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .config import BUILD_STRATEGIES, IndexConfig, create_default_config_file
from .errors import WordVectorIndexError, is_lookup_refused, is_malformed_input
from .memory_index import InMemoryIndex
from .persisted.format import looks_like_index_file
from .persisted.reader import PersistedIndexReader
from .persisted.writer import PersistedIndexBuilder
from .reporting import render_build_report, render_comparison, render_stats
from .utils.logging_setup import get_logger, setup_logging

logger = get_logger(__name__)

console = Console()

TERMINATE = "x"

AnyIndex = Union[InMemoryIndex, PersistedIndexReader]


def _fail(ctx: click.Context, error: WordVectorIndexError) -> None:
    console.print(f"[red]✗ {escape(error.message)}[/red]")
    if is_lookup_refused(error):
        console.print("[dim]PATH must be a non-empty word vector dataset or an index file[/dim]")
    elif is_malformed_input(error):
        console.print("[dim]The input file does not follow the expected format; strict_records: false skips bad dataset lines[/dim]")
    ctx.exit(1)


def open_index(path: Union[str, Path], config: IndexConfig,
               table_size: Optional[int] = None) -> AnyIndex:
    """
    Open ``path`` as an index file if it looks like one, otherwise build an
    in-memory index from it as a dataset.
    """
    if looks_like_index_file(path):
        logger.info(f"{path} is an index file")
        reader = PersistedIndexReader(path)
        reader.require_valid()
        return reader
    return InMemoryIndex(path, config, table_size).build()


def normalize_word(word: str, lowercase: bool) -> str:
    word = word.strip()
    return word.lower() if lowercase else word


def run_session(index: AnyIndex, lowercase: bool = True) -> int:
    """
    Prompt for word pairs until the user enters ``x``.

    Returns:
        Number of comparisons made
    """
    comparisons = 0
    try:
        while True:
            first = normalize_word(click.prompt(
                f"Enter a word you want to compare to another (enter '{TERMINATE}' to terminate)"
            ), lowercase)
            if first == TERMINATE:
                break
            second = normalize_word(click.prompt(
                f"Enter a word you want to compare to \"{first}\" (enter '{TERMINATE}' to terminate)"
            ), lowercase)
            if second == TERMINATE:
                break
            render_comparison(index.compare(first, second), console)
            comparisons += 1
    except click.Abort:
        # end of input
        console.print()
    return comparisons


@click.group()
@click.version_option(__version__, prog_name="wvhash")
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx, config_path, verbose):
    """Compare word vectors through a chained hash table."""
    try:
        config = IndexConfig.load_or_default(config_path)
    except (WordVectorIndexError, FileNotFoundError) as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        ctx.exit(1)
    setup_logging(level="DEBUG" if verbose else config.log_level)
    ctx.obj = config


@main.command(name="build")
@click.argument("dataset", type=click.Path(dir_okay=False))
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--table-size", type=click.IntRange(min=1), help="Number of buckets")
@click.option("--strategy", type=click.Choice(BUILD_STRATEGIES), help="Build strategy")
@click.option("--force", is_flag=True, help="Overwrite an existing output file")
@click.pass_obj
def build_command(config, dataset, output, table_size, strategy, force):
    """Build a hash table from DATASET and save it to OUTPUT."""
    ctx = click.get_current_context()
    try:
        builder = PersistedIndexBuilder(dataset, output, config, table_size)
        report = builder.build(strategy=strategy, overwrite=force)
    except WordVectorIndexError as e:
        _fail(ctx, e)
        return
    render_build_report(report, console)


@main.command(name="query")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--pair", nargs=2, type=str, help="Compare one word pair and exit")
@click.option("--table-size", type=click.IntRange(min=1),
              help="Number of buckets when PATH is a dataset")
@click.option("--info", "show_info", is_flag=True, help="Show hash table diagnostics first")
@click.pass_obj
def query_command(config, path, pair, table_size, show_info):
    """Compare word vectors from PATH (a dataset or an index file)."""
    ctx = click.get_current_context()
    try:
        index = open_index(path, config, table_size)
        if show_info:
            render_stats(index.stats(), console)
        if pair:
            first, second = (normalize_word(w, config.lowercase_queries) for w in pair)
            comparison = index.compare(first, second)
            render_comparison(comparison, console)
            if not comparison.ok:
                ctx.exit(2)
            return
        run_session(index, config.lowercase_queries)
    except WordVectorIndexError as e:
        _fail(ctx, e)


@main.command(name="info")
@click.argument("path", type=click.Path(dir_okay=False))
@click.option("--table-size", type=click.IntRange(min=1),
              help="Number of buckets when PATH is a dataset")
@click.pass_obj
def info_command(config, path, table_size):
    """Show hash table diagnostics for PATH."""
    ctx = click.get_current_context()
    try:
        index = open_index(path, config, table_size)
        render_stats(index.stats(), console)
    except WordVectorIndexError as e:
        _fail(ctx, e)


@main.group(name="config")
def config_group():
    """Manage the wvhash configuration file."""
    pass


@config_group.command(name="init")
@click.option("--path", type=click.Path(dir_okay=False), default=".wvhash.yml",
              help="Path for config file")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path, force):
    """Write a configuration file with the default settings."""
    config_path = Path(path)
    if config_path.exists() and not force:
        if not click.confirm(f"Config file {path} already exists. Overwrite?"):
            console.print("[yellow]Aborted[/yellow]")
            return
    create_default_config_file(config_path)
    console.print(f"[green]✓ Created config file at {path}[/green]")


@config_group.command(name="show")
@click.pass_obj
def config_show(config):
    """Display the effective configuration."""
    for key, value in config.to_dict().items():
        console.print(f"[cyan]{key}[/cyan]: {value}")


if __name__ == "__main__":
    main()
