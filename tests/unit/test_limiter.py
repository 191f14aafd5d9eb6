"""Tests for the demo fixed-window limiter."""

from __future__ import annotations

import pytest

from throttleprobe.demo.limiter import FixedWindowLimiter


class _Clock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestFixedWindowInit:
    def test_rejects_zero_rate(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            FixedWindowLimiter(rate=0)

    def test_rejects_negative_window(self) -> None:
        with pytest.raises(ValueError, match="positive"):
            FixedWindowLimiter(window=-5.0)


class TestFixedWindowCheck:
    def test_allows_up_to_rate(self) -> None:
        limiter = FixedWindowLimiter(rate=3, window=60.0, clock=_Clock())
        decisions = [limiter.check("a") for _ in range(5)]
        assert [d.allowed for d in decisions] == [True, True, True, False, False]
        assert [d.count for d in decisions] == [0, 1, 2, 3, 4]

    def test_keys_are_independent(self) -> None:
        limiter = FixedWindowLimiter(rate=1, window=60.0, clock=_Clock())
        assert limiter.check("a").allowed
        assert not limiter.check("a").allowed
        assert limiter.check("b").allowed

    def test_window_resets_after_it_lapses(self) -> None:
        clock = _Clock()
        limiter = FixedWindowLimiter(rate=1, window=60.0, clock=clock)
        assert limiter.check("a").allowed
        clock.now += 60.0
        assert not limiter.check("a").allowed  # still inside (boundary inclusive)
        clock.now += 0.5
        decision = limiter.check("a")
        assert decision.allowed
        assert decision.count == 0

    def test_clock_moving_backwards_resets(self) -> None:
        clock = _Clock()
        limiter = FixedWindowLimiter(rate=1, window=60.0, clock=clock)
        limiter.check("a")
        assert not limiter.check("a").allowed
        clock.now -= 10.0
        assert limiter.check("a").allowed

    def test_reset_forgets_keys(self) -> None:
        limiter = FixedWindowLimiter(rate=1, window=60.0, clock=_Clock())
        limiter.check("a")
        limiter.reset()
        assert limiter.check("a").allowed

    def test_lapsed_keys_are_evicted(self) -> None:
        clock = _Clock()
        limiter = FixedWindowLimiter(rate=1, window=60.0, clock=clock)
        for i in range(50):
            limiter.check(f"10.0.0.{i}")
        assert limiter.tracked_keys == 50

        clock.now += 61.0
        limiter.check("fresh")

        assert limiter.tracked_keys == 1

    def test_active_keys_survive_eviction(self) -> None:
        clock = _Clock()
        limiter = FixedWindowLimiter(rate=1, window=60.0, clock=clock)
        limiter.check("old")
        clock.now += 30.0
        limiter.check("recent")
        clock.now += 31.0

        assert limiter.check("other").allowed

        assert limiter.tracked_keys == 2
        assert not limiter.check("recent").allowed
