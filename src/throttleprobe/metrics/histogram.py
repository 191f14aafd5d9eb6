"""HDR histogram for probe request latencies.

Thin wrapper around ``hdrh.histogram.HdrHistogram`` that works in
milliseconds. Values are stored as integer microseconds because the HDR
histogram only accepts integers.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# Range: 1 microsecond to 5 minutes, well beyond any transport timeout
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 300_000_000
_SIGNIFICANT_DIGITS = 3


class LatencyHistogram:
    """Latency recorder with percentile queries in milliseconds.

    Each worker owns one; the coordinator merges them after every worker
    has finished.
    """

    def __init__(self) -> None:
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            _LOWEST_TRACKABLE_US, _HIGHEST_TRACKABLE_US, _SIGNIFICANT_DIGITS
        )

    @property
    def count(self) -> int:
        """Number of recorded latencies."""
        return int(self._histogram.total_count)

    def record(self, latency_ms: float) -> None:
        """Record one latency, clamped to the trackable range."""
        value_us = int(latency_ms * 1000)
        value_us = max(_LOWEST_TRACKABLE_US, min(value_us, _HIGHEST_TRACKABLE_US))
        self._histogram.record_value(value_us)

    def percentile(self, percentile: float) -> float:
        """Latency at ``percentile`` (0-100) in ms, 0.0 when empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    def maximum(self) -> float:
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_max_value()) / 1000.0

    def merge(self, other: LatencyHistogram) -> None:
        """Add all values recorded by ``other`` into this histogram."""
        self._histogram.add(other._histogram)
