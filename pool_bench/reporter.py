from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table


def _format_mb(value: Optional[int]) -> str:
    if not value:
        return "N/A"
    return f"{value / (1024 * 1024):.2f}"


def build_results_table(results: List[Dict[str, Any]], pool_size: Optional[int] = None) -> Table:
    """
    Build a rich table of strategy results.

    Rows keep run order so strategies read in the sequence they were executed;
    the relative column compares each duration to the fastest one.
    """
    title = "Pool Insert Benchmark Results"
    if pool_size is not None:
        title = f"{title}\n[dim]Pool size: {pool_size}[/dim]"

    table = Table(title=title, box=box.ROUNDED, caption="In run order")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Rows", justify="right", style="magenta")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Throughput (rows/s)", justify="right", style="bold green")
    table.add_column("vs. fastest", justify="right", style="blue")
    table.add_column("Peak Memory (MB)", justify="right", style="yellow")
    table.add_column("CPU %", justify="right", style="red")

    durations = [r.get("duration_seconds", 0.0) for r in results if r.get("duration_seconds")]
    fastest = min(durations) if durations else 0.0

    for res in results:
        duration = res.get("duration_seconds", 0.0)
        relative = f"{duration / fastest:.2f}x" if fastest and duration else "-"
        cpu = res.get("cpu_percent")
        table.add_row(
            res.get("strategy", "Unknown"),
            f"{res.get('rows', 0):,}",
            f"{duration:.3f}",
            f"{res.get('throughput_rows_per_sec', 0.0):,.2f}",
            relative,
            _format_mb(res.get("peak_rss_bytes")),
            f"{cpu:.1f}" if cpu is not None else "N/A",
        )
    return table


def print_results(
    results: List[Dict[str, Any]],
    pool_size: Optional[int] = None,
    console: Optional[Console] = None,
) -> None:
    """Render benchmark results as a rich table."""
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    console.print(build_results_table(results, pool_size=pool_size))
