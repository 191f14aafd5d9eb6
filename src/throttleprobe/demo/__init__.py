"""Local rate-limited target for exercising the probe end to end.

The target keeps per-client fixed-window counters in memory and answers
every GET with an ``Allowed`` or ``Disallowed`` line.
"""

from __future__ import annotations

from throttleprobe.demo.limiter import Decision, FixedWindowLimiter
from throttleprobe.demo.server import create_app, serve

__all__ = [
    "Decision",
    "FixedWindowLimiter",
    "create_app",
    "serve",
]
