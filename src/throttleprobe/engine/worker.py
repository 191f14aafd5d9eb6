"""Timed probe loop run by each concurrent worker."""

from __future__ import annotations

import asyncio
import dataclasses
import time
from typing import TYPE_CHECKING

from throttleprobe._internal.errors import EngineError
from throttleprobe._internal.logging import get_logger
from throttleprobe.metrics.histogram import LatencyHistogram
from throttleprobe.metrics.models import ProbeCounters, WorkerSummary
from throttleprobe.probe.classifier import classify_line
from throttleprobe.probe.transport import TRANSPORT_ERRORS

if TYPE_CHECKING:
    from throttleprobe._internal.types import SummarySink
    from throttleprobe.probe.transport import Transport

logger = get_logger("engine.worker")

DEFAULT_POLL_INTERVAL = 1.0

# A body the worker cannot decode is a read failure, not a crash.
_BODY_ERRORS: tuple[type[BaseException], ...] = (*TRANSPORT_ERRORS, UnicodeError, LookupError)


class ProbeWorker:
    """One independent probe stream against a single URL.

    ``run()`` issues a GET, classifies the body, sleeps ``poll_interval``
    and repeats until more than ``interval`` seconds have passed since the
    first request. The deadline is checked only after a request and its
    sleep complete, so a worker may overrun ``interval`` by up to one
    request latency plus one poll interval.

    The worker is the only writer of its counters. Readers must wait for
    ``run()`` to finish; ``allowed_count`` enforces this.

    Attributes:
        name: Worker name, unique within a run.
        url: Target URL.
        interval: Seconds the worker keeps issuing requests.
        poll_interval: Seconds slept after every request.
        counters: Live request tallies.
        latency: Time until the status line arrived or the request
            failed, per request.
    """

    def __init__(
        self,
        name: str,
        url: str,
        transport: Transport,
        *,
        interval: float,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_summary: SummarySink | None = None,
    ) -> None:
        """Initialize the worker.

        Args:
            name: Worker name, unique within a run.
            url: Target URL to probe.
            transport: Transport used for every request.
            interval: Seconds to keep issuing requests.
            poll_interval: Seconds to sleep after each request.
            on_summary: Callback receiving the summary line on exit.
                Defaults to logging it at INFO.
        """
        self.name = name
        self.url = url
        self.interval = interval
        self.poll_interval = poll_interval
        self.counters = ProbeCounters()
        self.latency = LatencyHistogram()

        self._transport = transport
        self._on_summary = on_summary
        self._started_at: float | None = None
        self._start_monotonic = 0.0
        self._ended_at = 0.0
        self._elapsed = 0.0
        self._finished = False

    @property
    def finished(self) -> bool:
        """True once ``run()`` has left its loop."""
        return self._finished

    @property
    def allowed_count(self) -> int:
        """Allowed count of a finished worker.

        Raises:
            EngineError: If the worker has not finished running.
        """
        if not self._finished:
            msg = f"Worker {self.name} is still running; join it before reading counts"
            raise EngineError(msg)
        return self.counters.allowed_count

    async def run(self) -> WorkerSummary:
        """Run the probe loop until the interval has elapsed.

        A worker runs once; its counters cover exactly one loop.

        Returns:
            The worker's final summary.

        Raises:
            EngineError: If the worker has already been started.
        """
        if self._started_at is not None:
            msg = f"Worker {self.name} has already run"
            raise EngineError(msg)
        self._started_at = time.time()
        self._start_monotonic = time.monotonic()

        logger.debug(
            "Worker %s started: url=%s, interval=%.1fs, poll=%.2fs",
            self.name,
            self.url,
            self.interval,
            self.poll_interval,
        )

        while True:
            await self.probe_once()
            await asyncio.sleep(self.poll_interval)
            if time.monotonic() - self._start_monotonic > self.interval:
                break

        self._ended_at = time.time()
        self._elapsed = time.monotonic() - self._start_monotonic
        self._finished = True

        summary = self.summary()
        line = summary.format_line()
        if self._on_summary is not None:
            self._on_summary(line)
        else:
            logger.info(line)
        return summary

    async def probe_once(self) -> None:
        """Issue one GET and fold the response into the counters.

        Transport failures are logged and swallowed so the loop keeps its
        cadence. A failure before the status arrives counts as an HTTP
        error; a failure while reading the body keeps the lines counted
        so far.
        """
        self.counters.total_requests += 1
        start = time.monotonic()

        try:
            response = await self._transport.get(self.url)
        except TRANSPORT_ERRORS as exc:
            self.counters.http_error += 1
            logger.warning("Worker %s: request to %s failed: %r", self.name, self.url, exc)
            return
        finally:
            self.latency.record((time.monotonic() - start) * 1000)

        try:
            if response.status == 200:
                self.counters.http_ok += 1
            else:
                self.counters.http_error += 1

            async for line in response.iter_lines():
                verdict = classify_line(line)
                if verdict.allowed:
                    self.counters.allowed_count += 1
                if verdict.disallowed:
                    self.counters.disallowed_count += 1
        except _BODY_ERRORS as exc:
            logger.warning("Worker %s: reading body from %s failed: %r", self.name, self.url, exc)
        finally:
            await response.close()

    def summary(self) -> WorkerSummary:
        """Snapshot the worker's counters and timing.

        Raises:
            EngineError: If the worker has not finished running.
        """
        if not self._finished or self._started_at is None:
            msg = f"Worker {self.name} has no summary before it finishes"
            raise EngineError(msg)
        return WorkerSummary(
            name=self.name,
            url=self.url,
            counters=dataclasses.replace(self.counters),
            started_at=self._started_at,
            ended_at=self._ended_at,
            elapsed_seconds=self._elapsed,
            latency_p50=self.latency.percentile(50.0),
            latency_p95=self.latency.percentile(95.0),
            latency_max=self.latency.maximum(),
        )
