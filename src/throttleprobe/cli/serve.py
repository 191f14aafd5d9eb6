"""``throttleprobe serve``: run the local rate-limited demo target."""

from __future__ import annotations

import logging

import typer

from throttleprobe._internal.logging import setup_logging
from throttleprobe.demo.server import serve


def serve_cmd(
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        help="Interface to bind.",
    ),
    port: int = typer.Option(
        8080,
        "--port",
        "-p",
        help="TCP port to bind.",
        min=1,
        max=65535,
    ),
    rate: int = typer.Option(
        5,
        "--rate",
        "-r",
        help="Requests allowed per window per client.",
        min=1,
    ),
    window: float = typer.Option(
        60.0,
        "--window",
        help="Window length in seconds.",
        min=0.001,
    ),
    disallow_status: int = typer.Option(
        200,
        "--disallow-status",
        help="HTTP status for throttled requests (e.g., 429).",
        min=100,
        max=599,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging, including the access log.",
    ),
) -> None:
    """Serve a rate-limited endpoint answering Allowed / Disallowed."""
    setup_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        access_log=verbose,
    )
    serve(
        host=host,
        port=port,
        rate=rate,
        window=window,
        disallow_status=disallow_status,
    )
