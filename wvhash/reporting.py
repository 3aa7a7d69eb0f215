"""
Console rendering of comparisons and index diagnostics.

Everything here only formats results handed in by the indexes; nothing in
the core prints.
"""

import math
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .core.types import Comparison, IndexStats
from .persisted.writer import BuildReport


def format_metric(value: Optional[float], precision: int = 4) -> str:
    """Format a metric value; ``nan`` means a zero vector was involved."""
    if value is None:
        return "-"
    if math.isnan(value):
        return "undefined (zero vector)"
    return f"{value:.{precision}f}"


def render_comparison(comparison: Comparison, console: Console) -> None:
    """Print the similarity of two words, or which of them is missing."""
    if not comparison.ok:
        for key in comparison.missing:
            console.print(f"[yellow]\"{escape(key)}\" couldn't be found in your data! Comparison impossible.[/yellow]")
        return

    first, second = comparison.keys
    table = Table(title=f"\"{escape(first)}\" vs \"{escape(second)}\"", show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Cosine similarity", format_metric(comparison.cosine_similarity))
    table.add_row("Euclidean distance", format_metric(comparison.euclidean_distance))
    console.print(table)


def render_stats(stats: IndexStats, console: Console, title: str = "Hash table") -> None:
    """Print table diagnostics."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Size of vectors", str(stats.vector_size))
    table.add_row("Number of stored word vectors", str(stats.stored_records))
    if stats.stored_records != stats.record_count:
        table.add_row("Number of records in dataset", str(stats.record_count))
    table.add_row("Number of buckets", str(stats.table_size))
    table.add_row("Load factor", f"{stats.load_factor:.2f}")
    table.add_row("Number of empty buckets", str(stats.empty_buckets))
    table.add_row("Percentage of empty buckets", f"{stats.empty_bucket_percentage:.2f} %")
    table.add_row("Highest number of word vectors in a bucket", str(stats.longest_chain))
    table.add_row("Percentage of vectors in fullest bucket",
                  format_metric(stats.longest_chain_percentage, precision=2))

    console.print(Panel(table, title=title, expand=False))


def render_build_report(report: BuildReport, console: Console) -> None:
    """Print the outcome of an index file build."""
    console.print(
        f"[green]✓ Hash table created and saved ({report.output_path}) "
        f"using the {report.strategy} strategy in {report.elapsed_seconds:.2f}s[/green]"
    )
    render_stats(report.stats, console, title="Index file")
