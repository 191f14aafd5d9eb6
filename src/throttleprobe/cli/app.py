"""Main Typer application, the entry point for the ``throttleprobe`` CLI."""

from __future__ import annotations

import typer

from throttleprobe import __version__
from throttleprobe.cli.run import run_cmd
from throttleprobe.cli.serve import serve_cmd

app = typer.Typer(
    name="throttleprobe",
    help="Probe a rate-limited endpoint from concurrent workers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Probe target URLs and count allowed responses.")(run_cmd)
app.command("serve", help="Serve a local rate-limited demo target.")(serve_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"throttleprobe {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """ThrottleProbe: probe a rate limiter from concurrent workers."""
