"""``throttleprobe run``: probe target URLs and report allowed counts."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from throttleprobe._internal.config import load_config
from throttleprobe._internal.errors import ThrottleProbeError
from throttleprobe.engine.runner import run_probe

if TYPE_CHECKING:
    from throttleprobe.metrics.models import ProbeResult

console = Console(stderr=True)


def _print_summary(result: ProbeResult) -> None:
    """Print the per-worker breakdown and run totals.

    Args:
        result: Completed probe result.
    """
    workers = Table(
        title="Workers",
        show_header=True,
        header_style="bold cyan",
        expand=True,
    )
    workers.add_column("Worker")
    workers.add_column("URL", overflow="fold")
    workers.add_column("Requests", justify="right")
    workers.add_column("HTTP OK", justify="right")
    workers.add_column("HTTP Error", justify="right")
    workers.add_column("Allowed", justify="right")
    workers.add_column("Disallowed", justify="right")
    workers.add_column("p95", justify="right")

    for summary in result.summaries:
        c = summary.counters
        workers.add_row(
            summary.name,
            summary.url,
            str(c.total_requests),
            str(c.http_ok),
            str(c.http_error),
            str(c.allowed_count),
            str(c.disallowed_count),
            f"{summary.latency_p95:.1f}ms",
        )
    console.print(workers)

    totals = Table(
        title="Probe Complete",
        show_header=True,
        header_style="bold green",
        expand=True,
    )
    totals.add_column("Metric", style="bold")
    totals.add_column("Value", justify="right")
    totals.add_row("Duration", f"{result.duration_seconds:.1f}s")
    totals.add_row("Total Requests", str(result.total_requests))
    totals.add_row("Total Allowed", str(result.total_allowed))
    totals.add_row("Total Disallowed", str(result.total_disallowed))
    totals.add_row("p50 Latency", f"{result.latency_p50:.1f}ms")
    totals.add_row("p95 Latency", f"{result.latency_p95:.1f}ms")
    totals.add_row("Max Latency", f"{result.latency_max:.1f}ms")
    if result.failed_workers:
        totals.add_row("Failed Workers", ", ".join(result.failed_workers), style="red")
    console.print(totals)


def run_cmd(
    urls: list[str] | None = typer.Argument(
        None,
        help="Target URLs, assigned round-robin to workers. "
        "Defaults to THROTTLEPROBE_URLS or the built-in demo URLs.",
        show_default=False,
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        "-w",
        help="Number of concurrent workers.",
        min=1,
    ),
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds each worker keeps probing.",
        min=0.0,
    ),
    poll_interval: float | None = typer.Option(
        None,
        "--poll-interval",
        help="Seconds each worker sleeps between requests.",
        min=0.0,
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Per-request timeout in seconds.",
    ),
    no_table: bool = typer.Option(
        False,
        "--no-table",
        help="Skip the summary tables after the run.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging.",
    ),
) -> None:
    """Probe target URLs from concurrent workers and total the allowed responses."""
    try:
        config = load_config()
    except ThrottleProbeError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    overrides: dict[str, object] = {}
    if urls:
        overrides["urls"] = list(urls)
    if workers is not None:
        overrides["workers"] = workers
    if interval is not None:
        overrides["interval"] = interval
    if poll_interval is not None:
        overrides["poll_interval"] = poll_interval
    if timeout is not None:
        if timeout <= 0:
            msg = "--timeout must be positive"
            raise typer.BadParameter(msg)
        overrides["request_timeout"] = timeout
    config = dataclasses.replace(config, **overrides)  # type: ignore[arg-type]

    console.print(
        Panel(
            f"[bold]Targets:[/bold]  {len(config.urls)}\n"
            f"[bold]Workers:[/bold]  {config.workers}\n"
            f"[bold]Interval:[/bold] {config.interval}s\n"
            f"[bold]Poll:[/bold]     {config.poll_interval}s",
            title="ThrottleProbe",
            border_style="cyan",
        )
    )

    log_level = logging.DEBUG if verbose else logging.INFO

    try:
        result = run_probe(config, echo=typer.echo, log_level=log_level)
    except ThrottleProbeError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if not no_table:
        _print_summary(result)
