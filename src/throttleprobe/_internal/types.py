"""Shared type aliases for ThrottleProbe."""

from __future__ import annotations

from collections.abc import Callable

# Ordered list of probe target URLs.
UrlList = list[str]

# Callback receiving a worker's formatted summary line.
SummarySink = Callable[[str], None]
