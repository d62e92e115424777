"""Tests for the sliding window rate limiter."""

from __future__ import annotations

import pytest

from budget_notifier.infrastructure.rate_limit import SlidingWindowRateLimiter


class FakeTime:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_allows_up_to_max_calls_per_window() -> None:
    fake = FakeTime()
    limiter = SlidingWindowRateLimiter(3, 60.0, clock=fake.clock, sleep=fake.sleep)

    assert all(limiter.acquire(block=False) for _ in range(3))
    assert limiter.acquire(block=False) is False
    assert limiter.get_wait_time() == pytest.approx(60.0)


def test_blocking_acquire_waits_for_the_oldest_call_to_expire() -> None:
    fake = FakeTime()
    limiter = SlidingWindowRateLimiter(2, 60.0, clock=fake.clock, sleep=fake.sleep)

    limiter.acquire()
    fake.now = 10.0
    limiter.acquire()
    fake.now = 20.0
    limiter.acquire()

    assert fake.sleeps == [pytest.approx(40.0)]
    assert fake.now == pytest.approx(60.0)


def test_window_slides() -> None:
    fake = FakeTime()
    limiter = SlidingWindowRateLimiter(1, 10.0, clock=fake.clock, sleep=fake.sleep)

    limiter.acquire()
    fake.now = 10.0

    assert limiter.get_wait_time() == 0.0
    assert limiter.acquire(block=False) is True


def test_requires_positive_limit() -> None:
    with pytest.raises(ValueError):
        SlidingWindowRateLimiter(0)
