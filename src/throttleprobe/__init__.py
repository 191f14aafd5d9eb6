"""ThrottleProbe: probe a rate-limited HTTP endpoint from concurrent workers."""

from __future__ import annotations

from throttleprobe._internal.config import ProbeConfig, load_config
from throttleprobe.engine.coordinator import Coordinator, assign_urls
from throttleprobe.engine.runner import run_probe
from throttleprobe.engine.worker import ProbeWorker
from throttleprobe.metrics.models import ProbeCounters, ProbeResult, WorkerSummary
from throttleprobe.probe.classifier import classify_line
from throttleprobe.probe.transport import HttpTransport

__version__ = "0.1.0"

__all__ = [
    "Coordinator",
    "HttpTransport",
    "ProbeConfig",
    "ProbeCounters",
    "ProbeResult",
    "ProbeWorker",
    "WorkerSummary",
    "assign_urls",
    "classify_line",
    "load_config",
    "run_probe",
]
