"""Blocking entry point for a complete probe run."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

from throttleprobe._internal.errors import EngineError
from throttleprobe._internal.logging import get_logger, setup_logging
from throttleprobe.engine.coordinator import Coordinator

if TYPE_CHECKING:
    from collections.abc import Callable

    from throttleprobe._internal.config import ProbeConfig
    from throttleprobe._internal.types import SummarySink
    from throttleprobe.metrics.models import ProbeResult
    from throttleprobe.probe.transport import Transport

logger = get_logger("engine.runner")


def _loop_factory() -> Callable[[], asyncio.AbstractEventLoop] | None:
    """Return uvloop's loop constructor if available.

    Falls back to the default asyncio event loop on Windows or if uvloop
    is not installed.
    """
    if sys.platform == "win32":
        return None

    try:
        import uvloop
    except ImportError:
        logger.debug("uvloop not available, using default asyncio event loop")
        return None

    logger.debug("Using uvloop event loop")
    return uvloop.new_event_loop


def run_probe(
    config: ProbeConfig,
    *,
    echo: SummarySink = print,
    transport: Transport | None = None,
    log_level: int = 20,
) -> ProbeResult:
    """Run one probe from start to finish.

    Prints one summary line per worker as it finishes and then the total
    allowed line, both through ``echo``.

    Args:
        config: Run configuration.
        echo: Sink for the human-readable report lines.
        transport: Optional transport override, mainly for tests.
        log_level: Logging level (default: logging.INFO = 20).

    Returns:
        The aggregated ProbeResult.

    Raises:
        ConfigError: If the configuration is out of range.
        EngineError: If the run is interrupted from the keyboard.
    """
    setup_logging(level=log_level)

    coordinator = Coordinator(
        urls=config.urls,
        worker_count=config.workers,
        interval=config.interval,
        poll_interval=config.poll_interval,
        request_timeout=config.request_timeout,
        transport=transport,
        on_summary=echo,
    )

    try:
        with asyncio.Runner(loop_factory=_loop_factory()) as loop_runner:
            result = loop_runner.run(coordinator.execute_run())
    except KeyboardInterrupt as exc:
        logger.warning("Probe run interrupted")
        raise EngineError("Probe run interrupted") from exc

    echo(result.total_line())
    return result
