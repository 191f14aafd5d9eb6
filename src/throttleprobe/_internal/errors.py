"""Custom exception hierarchy for ThrottleProbe."""

from __future__ import annotations


class ThrottleProbeError(Exception):
    """Base exception for all ThrottleProbe errors.

    All custom exceptions in ThrottleProbe inherit from this class, making
    it easy to catch any probe-specific error with a single except clause.
    """


class ConfigError(ThrottleProbeError):
    """Raised when configuration is invalid or missing.

    Examples:
        - An environment variable has a non-numeric value.
        - The worker count is below one or the URL list is empty.
    """


class EngineError(ThrottleProbeError):
    """Raised when the probe engine cannot complete a run.

    Examples:
        - A worker's counters are read before the worker has finished.
        - The run is interrupted from the keyboard.
    """


class TransportError(ThrottleProbeError):
    """Raised when the HTTP transport is used incorrectly.

    Examples:
        - A request is issued outside the transport's async context manager.
    """
