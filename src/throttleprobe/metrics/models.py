"""Counter and result dataclasses for ThrottleProbe."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "ProbeCounters",
    "ProbeResult",
    "WorkerSummary",
]


@dataclass
class ProbeCounters:
    """Per-worker request tallies.

    Every attempted request ends up in exactly one of ``http_ok`` and
    ``http_error``. The marker counts are independent of the status code.

    Attributes:
        total_requests: Requests attempted.
        http_ok: Requests answered with status 200.
        http_error: Requests with any other status, or that failed before
            a status was received.
        allowed_count: Body lines containing ``Allowed``.
        disallowed_count: Body lines containing ``Disallowed``.
    """

    total_requests: int = 0
    http_ok: int = 0
    http_error: int = 0
    allowed_count: int = 0
    disallowed_count: int = 0


@dataclass(frozen=True)
class WorkerSummary:
    """Final state of one finished worker.

    Attributes:
        name: Worker name (``t0``, ``t1``, ...).
        url: Target URL the worker probed.
        counters: Snapshot of the worker's counters at exit.
        started_at: Wall-clock start time, epoch seconds.
        ended_at: Wall-clock end time, epoch seconds.
        elapsed_seconds: Monotonic run duration in seconds.
        latency_p50: Median request latency in milliseconds.
        latency_p95: 95th percentile request latency in milliseconds.
        latency_max: Slowest request in milliseconds.
    """

    name: str
    url: str
    counters: ProbeCounters
    started_at: float
    ended_at: float
    elapsed_seconds: float
    latency_p50: float = 0.0
    latency_p95: float = 0.0
    latency_max: float = 0.0

    def format_line(self) -> str:
        """Render the human-readable one-line report.

        Field order is stable; timestamps and elapsed time are in
        milliseconds.
        """
        c = self.counters
        start_ms = int(self.started_at * 1000)
        end_ms = int(self.ended_at * 1000)
        elapsed_ms = int(self.elapsed_seconds * 1000)
        return (
            f"Thread: {self.name} , total: {c.total_requests} , httpok: {c.http_ok}"
            f" , httperror: {c.http_error} , allowed: {c.allowed_count}"
            f" , disallowed: {c.disallowed_count} , starttime: {start_ms}"
            f" , endtime: {end_ms} , elapsed time: {elapsed_ms}"
        )


@dataclass
class ProbeResult:
    """Aggregate outcome of one probe run.

    Attributes:
        summaries: Summaries of the workers that joined cleanly, in
            worker order.
        total_allowed: Sum of allowed counts over joined workers.
        total_disallowed: Sum of disallowed counts over joined workers.
        total_requests: Sum of attempted requests over joined workers.
        failed_workers: Names of workers whose join failed. Their counts
            are missing from the totals.
        duration_seconds: Wall-clock duration of the whole run.
        latency_p50: Median latency across all joined workers (ms).
        latency_p95: 95th percentile latency across all joined workers (ms).
        latency_max: Slowest request across all joined workers (ms).
    """

    summaries: list[WorkerSummary] = field(default_factory=list)
    total_allowed: int = 0
    total_disallowed: int = 0
    total_requests: int = 0
    failed_workers: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    latency_p50: float = 0.0
    latency_p95: float = 0.0
    latency_max: float = 0.0

    @property
    def complete(self) -> bool:
        """True when every worker contributed to the totals."""
        return not self.failed_workers

    def total_line(self) -> str:
        return f"Total allowed for all threads is {self.total_allowed}"
