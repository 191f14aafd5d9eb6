"""Allow ``python -m throttleprobe``."""

from __future__ import annotations

from throttleprobe.cli.app import app

app()
