"""
Rich-based terminal dashboard for speed test results.

All formatting helpers live in ``client.stats`` -- this module only does
presentation via the ``rich`` library.
"""
from __future__ import annotations

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from client.stats import format_bytes, format_latency, format_speed

console = Console()


# ---------------------------------------------------------------------------
# Histogram helper
# ---------------------------------------------------------------------------

_BARS = "▁▂▃▄▅▆▇█"


def create_histogram(values: List[float]) -> str:
    """Return a single-line Unicode bar-chart."""
    if not values:
        return "No data"

    lo, hi = min(values), max(values)
    span = hi - lo if hi > lo else 1.0
    return "".join(
        _BARS[min(int((v - lo) / span * (len(_BARS) - 1)), len(_BARS) - 1)] for v in values
    )


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------

def print_header(url: str, connections: int) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]edgespeed[/bold cyan]\n"
            f"[dim]{url}  ·  HTTP concurrent x {connections}[/dim]",
            border_style="cyan",
        )
    )
    console.print()


def print_latency_details(result) -> None:  # noqa: ANN001 (LatencyResult)
    """Print latency statistics; a single ping gets a single line."""
    pings = result.pings
    if not pings:
        console.print("[yellow]No latency samples[/yellow]")
        return
    if len(pings) == 1:
        console.print(f"  Ping: [bold yellow]{format_latency(pings[0])}[/bold yellow]")
        return

    stats = result.stats()
    table = Table(title="Latency Details", box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Min", format_latency(stats.min))
    table.add_row("Max", format_latency(stats.max))
    table.add_row("Mean", format_latency(stats.mean))
    table.add_row("Median", format_latency(stats.median))
    table.add_row("Jitter", f"{stats.jitter:.2f} ms")
    table.add_row("Samples", f"{stats.count}/{result.attempts}")
    console.print(table)


def print_speed_result(result, title: str, color: str = "green") -> None:  # noqa: ANN001
    """Print a download or upload result panel."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Speed", f"[bold {color}]{format_speed(result.speed_mbps)}[/bold {color}]")
    table.add_row("Data Transferred", format_bytes(result.bytes_total))
    table.add_row("Duration", f"{result.duration_ms / 1000:.1f} s")
    table.add_row("Requests", str(result.requests))
    if result.failures:
        table.add_row("Failed Requests", f"[red]{result.failures}[/red]")
    table.add_row("Connections", str(len(result.connections)))
    console.print(table)

    speeds = [s.speed_mbps for s in result.samples]
    if speeds:
        console.print(
            Panel(
                f"[{color}]{create_histogram(speeds)}[/{color}]\n"
                f"[dim]Min: {min(speeds):.1f} Mbps  Max: {max(speeds):.1f} Mbps[/dim]",
                title="Speed Over Time",
            )
        )


def print_final_results(
    ping_ms: float,
    download_mbps: float,
    upload_mbps: float,
    url: str,
    jitter_ms: Optional[float] = None,
) -> None:
    jitter = f"  [dim](jitter: {jitter_ms:.2f} ms)[/dim]" if jitter_ms else ""
    console.print()
    console.print(
        Panel.fit(
            f"[bold cyan]Endpoint:[/bold cyan] {url}\n\n"
            f"[bold white]   Ping:[/bold white]  [bold yellow]{format_latency(ping_ms)}[/bold yellow]{jitter}\n"
            f"[bold white]   Download:[/bold white]  [bold green]{format_speed(download_mbps)}[/bold green]\n"
            f"[bold white]   Upload:[/bold white]  [bold blue]{format_speed(upload_mbps)}[/bold blue]",
            title="[bold]Results[/bold]",
            border_style="cyan",
        )
    )
    console.print()


# ---------------------------------------------------------------------------
# Progress display
# ---------------------------------------------------------------------------

class ProgressDisplay:
    """One ``rich`` progress bar spanning the whole run (0..100%)."""

    def __init__(self) -> None:
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TextColumn("[bold cyan]{task.fields[speed]}[/bold cyan]"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_id = None

    def start(self, description: str) -> None:
        self.progress.start()
        self._task_id = self.progress.add_task(description, total=100, speed="")

    def set_phase(self, description: str) -> None:
        if self._task_id is None:
            return
        self.progress.update(self._task_id, description=description, speed="...")

    def update(self, percent: float, speed_mbps: float = 0) -> None:
        if self._task_id is None:
            return
        speed_str = format_speed(speed_mbps) if speed_mbps > 0 else "..."
        self.progress.update(self._task_id, completed=percent, speed=speed_str)

    def stop(self) -> None:
        self.progress.stop()
