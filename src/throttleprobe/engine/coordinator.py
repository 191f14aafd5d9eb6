"""Worker pool coordinator: spawn, join, aggregate."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from throttleprobe._internal.errors import ConfigError
from throttleprobe._internal.logging import get_logger
from throttleprobe.engine.worker import DEFAULT_POLL_INTERVAL, ProbeWorker
from throttleprobe.metrics.histogram import LatencyHistogram
from throttleprobe.metrics.models import ProbeResult
from throttleprobe.probe.transport import HttpTransport

if TYPE_CHECKING:
    from collections.abc import Sequence

    from throttleprobe._internal.types import SummarySink
    from throttleprobe.probe.transport import Transport

logger = get_logger("engine.coordinator")


def assign_urls(worker_count: int, urls: Sequence[str]) -> list[str]:
    """Assign target URLs to workers round-robin.

    Args:
        worker_count: Number of workers.
        urls: Non-empty ordered sequence of target URLs.

    Returns:
        ``urls[i % len(urls)]`` for each worker index ``i``.
    """
    return [urls[i % len(urls)] for i in range(worker_count)]


class Coordinator:
    """Runs a fixed pool of probe workers and totals their allowed counts.

    All workers start at once as asyncio tasks. The coordinator then joins
    them one by one, in order, and reads a worker's counters only after
    that worker's task has completed. A failed join is logged and skipped,
    so the totals may then cover only part of the pool.

    Attributes:
        urls: Target URLs.
        worker_count: Number of concurrent workers.
    """

    def __init__(
        self,
        urls: Sequence[str],
        worker_count: int,
        interval: float,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        request_timeout: float = 30.0,
        transport: Transport | None = None,
        on_summary: SummarySink | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            urls: Target URLs, assigned round-robin to workers.
            worker_count: Number of workers to run concurrently.
            interval: Seconds each worker keeps issuing requests.
            poll_interval: Seconds each worker sleeps between requests.
            request_timeout: Per-request timeout for the default transport.
            transport: Transport shared by all workers. Defaults to an
                ``HttpTransport`` opened for the duration of the run.
            on_summary: Callback receiving each worker's summary line.

        Raises:
            ConfigError: If any argument is out of range.
        """
        if worker_count < 1:
            msg = f"worker_count must be >= 1, got: {worker_count}"
            raise ConfigError(msg)
        if not urls:
            msg = "at least one target URL is required"
            raise ConfigError(msg)
        if interval < 0:
            msg = f"interval must be >= 0, got: {interval}"
            raise ConfigError(msg)
        if poll_interval < 0:
            msg = f"poll_interval must be >= 0, got: {poll_interval}"
            raise ConfigError(msg)

        self.urls = list(urls)
        self.worker_count = worker_count
        self._interval = interval
        self._poll_interval = poll_interval
        self._request_timeout = request_timeout
        self._transport = transport
        self._on_summary = on_summary
        self._workers: list[ProbeWorker] = []

    @property
    def workers(self) -> list[ProbeWorker]:
        """Workers of the current or last run, in index order."""
        return list(self._workers)

    async def execute_run(self) -> ProbeResult:
        """Run every worker to completion and aggregate the results.

        Returns:
            ProbeResult with per-worker summaries and totals.
        """
        if self._transport is not None:
            return await self._run_pool(self._transport)

        async with HttpTransport(
            timeout=self._request_timeout,
            connection_limit=max(self.worker_count, 1),
        ) as transport:
            return await self._run_pool(transport)

    async def _run_pool(self, transport: Transport) -> ProbeResult:
        start = time.monotonic()
        self._workers = [
            ProbeWorker(
                name=f"t{i}",
                url=url,
                transport=transport,
                interval=self._interval,
                poll_interval=self._poll_interval,
                on_summary=self._on_summary,
            )
            for i, url in enumerate(assign_urls(self.worker_count, self.urls))
        ]

        tasks = [
            asyncio.create_task(worker.run(), name=f"probe-worker-{worker.name}")
            for worker in self._workers
        ]
        logger.info(
            "Started %d workers against %d URL(s), interval=%.1fs",
            len(tasks),
            len(self.urls),
            self._interval,
        )

        result = ProbeResult()
        latency = LatencyHistogram()

        for worker, task in zip(self._workers, tasks, strict=True):
            try:
                summary = await task
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if current is not None and current.cancelling():
                    raise
                logger.warning("Worker %s was cancelled before finishing", worker.name)
                result.failed_workers.append(worker.name)
                continue
            except Exception:
                logger.exception("Worker %s failed", worker.name)
                result.failed_workers.append(worker.name)
                continue

            result.summaries.append(summary)
            result.total_allowed += worker.allowed_count
            result.total_disallowed += summary.counters.disallowed_count
            result.total_requests += summary.counters.total_requests
            latency.merge(worker.latency)

        result.duration_seconds = time.monotonic() - start
        result.latency_p50 = latency.percentile(50.0)
        result.latency_p95 = latency.percentile(95.0)
        result.latency_max = latency.maximum()

        if result.failed_workers:
            logger.warning(
                "Totals exclude %d worker(s): %s",
                len(result.failed_workers),
                ", ".join(result.failed_workers),
            )
        logger.info(result.total_line())
        return result
