"""Configuration loading for ThrottleProbe."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from throttleprobe._internal.errors import ConfigError

if TYPE_CHECKING:
    from throttleprobe._internal.types import UrlList

DEFAULT_URLS: tuple[str, ...] = (
    "https://www.nighthour.sg/csp-violation-report-endpoint/throttle-demo.php",
    "https://www.nighthour.sg/csp-violation-report-endpoint/throttle-demo.php?ip=192.168.230.76",
)


@dataclass(frozen=True)
class ProbeConfig:
    """Static configuration for one probe run.

    Attributes:
        urls: Target URLs, assigned round-robin to workers.
        workers: Number of concurrent workers.
        interval: Seconds each worker keeps issuing requests.
        poll_interval: Seconds a worker sleeps between requests.
        request_timeout: Total timeout for a single request in seconds.
    """

    urls: UrlList = field(default_factory=lambda: list(DEFAULT_URLS))
    workers: int = 10
    interval: float = 600.0
    poll_interval: float = 1.0
    request_timeout: float = 30.0


def _read_float(name: str, default: str, *, allow_zero: bool) -> float:
    raw = os.environ.get(name, default)
    try:
        value = float(raw)
    except ValueError:
        msg = f"{name} must be a number, got: {raw!r}"
        raise ConfigError(msg) from None

    if value < 0 or (value == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "positive"
        msg = f"{name} must be {bound}, got: {value}"
        raise ConfigError(msg)
    return value


def load_config() -> ProbeConfig:
    """Load configuration from environment variables with defaults.

    Environment variables:
        THROTTLEPROBE_URLS: Comma-separated target URLs.
        THROTTLEPROBE_WORKERS: Worker count (default: 10).
        THROTTLEPROBE_INTERVAL: Run duration in seconds (default: 600).
        THROTTLEPROBE_POLL_INTERVAL: Sleep between requests (default: 1.0).
        THROTTLEPROBE_TIMEOUT: Request timeout in seconds (default: 30.0).

    Returns:
        Populated ProbeConfig instance.

    Raises:
        ConfigError: If an environment variable has an invalid value.
    """
    urls_str = os.environ.get("THROTTLEPROBE_URLS")
    if urls_str is None:
        urls = list(DEFAULT_URLS)
    else:
        urls = [u.strip() for u in urls_str.split(",") if u.strip()]
        if not urls:
            msg = "THROTTLEPROBE_URLS must contain at least one URL"
            raise ConfigError(msg)

    workers_str = os.environ.get("THROTTLEPROBE_WORKERS", "10")
    try:
        workers = int(workers_str)
    except ValueError:
        msg = f"THROTTLEPROBE_WORKERS must be an integer, got: {workers_str!r}"
        raise ConfigError(msg) from None

    if workers < 1:
        msg = f"THROTTLEPROBE_WORKERS must be >= 1, got: {workers}"
        raise ConfigError(msg)

    return ProbeConfig(
        urls=urls,
        workers=workers,
        interval=_read_float("THROTTLEPROBE_INTERVAL", "600", allow_zero=True),
        poll_interval=_read_float("THROTTLEPROBE_POLL_INTERVAL", "1.0", allow_zero=True),
        request_timeout=_read_float("THROTTLEPROBE_TIMEOUT", "30.0", allow_zero=False),
    )
