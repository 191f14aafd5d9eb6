"""Fixed-window per-client rate limiter used by the demo target."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from throttleprobe._internal.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger("demo.limiter")


@dataclass(frozen=True)
class Decision:
    """Outcome of one limiter check.

    Attributes:
        key: Client key the check was made for.
        allowed: Whether the request fits in the current window.
        count: Requests already seen in the window before this one.
    """

    key: str
    allowed: bool
    count: int


@dataclass
class _Window:
    started: float
    count: int = 0


class FixedWindowLimiter:
    """Allows ``rate`` requests per key in each ``window`` seconds.

    A key's window opens on its first request and is replaced by a fresh
    one on the first request after it lapses. A window that appears to
    start in the future (wall clock moved backwards) is also replaced.

    Lapsed windows of other keys are dropped at most once per ``window``,
    so memory tracks the keys active in the last two windows rather than
    every key ever seen.

    Not thread-safe. The demo server calls it from a single event loop
    without awaiting in between, which keeps each check atomic.

    Attributes:
        rate: Requests allowed per window.
        window: Window length in seconds.
    """

    def __init__(
        self,
        rate: int = 5,
        window: float = 60.0,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            rate: Requests allowed per window. Must be positive.
            window: Window length in seconds. Must be positive.
            clock: Wall-clock source in seconds.

        Raises:
            ValueError: If rate or window is not positive.
        """
        if rate <= 0:
            msg = f"rate must be positive, got {rate}"
            raise ValueError(msg)
        if window <= 0:
            msg = f"window must be positive, got {window}"
            raise ValueError(msg)

        self.rate = rate
        self.window = window
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        """Number of keys currently holding a window."""
        return len(self._windows)

    def check(self, key: str) -> Decision:
        """Count a request for ``key`` and decide whether it is allowed."""
        now = self._clock()
        if not 0 <= now - self._last_sweep <= self.window:
            self._evict_lapsed(now)
        state = self._windows.get(key)
        if state is None or not self._within_window(state, now):
            state = _Window(started=now)
            self._windows[key] = state

        seen = state.count
        state.count += 1
        return Decision(key=key, allowed=0 <= seen < self.rate, count=seen)

    def reset(self) -> None:
        """Forget every key."""
        self._windows.clear()

    def _evict_lapsed(self, now: float) -> None:
        lapsed = [
            key
            for key, state in self._windows.items()
            if not 0 <= now - state.started <= self.window
        ]
        for key in lapsed:
            del self._windows[key]
        self._last_sweep = now
        if lapsed:
            logger.debug("Evicted %d lapsed client windows", len(lapsed))

    def _within_window(self, state: _Window, now: float) -> bool:
        elapsed = now - state.started
        if elapsed < 0:
            logger.error("Window for client started %.3fs in the future, resetting", -elapsed)
            return False
        return elapsed <= self.window
