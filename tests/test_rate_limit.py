"""Unit tests for the fixed-window rate limiter."""

from __future__ import annotations

import pytest

from domain.protocol import RateLimitStore
from domain.rate_limit import FixedWindowRateLimiter, InMemoryRateLimitStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_in_memory_store_satisfies_protocol() -> None:
    assert isinstance(InMemoryRateLimitStore(), RateLimitStore)


def test_limit_is_enforced_within_window() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(limit=3, window_seconds=60.0, clock=clock)

    decisions = [limiter.hit("10.0.0.1") for _ in range(4)]
    assert [decision.allowed for decision in decisions] == [True, True, True, False]
    assert [decision.remaining for decision in decisions] == [2, 1, 0, 0]
    assert decisions[0].reset_at == pytest.approx(1060.0)
    assert decisions[3].reset_at == pytest.approx(1060.0)


def test_window_resets_after_expiry() -> None:
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(limit=1, window_seconds=60.0, clock=clock)
    assert limiter.hit("ip").allowed
    assert not limiter.hit("ip").allowed

    clock.now += 60.0
    # The window end itself still belongs to the old window.
    assert not limiter.hit("ip").allowed

    clock.now += 0.5
    decision = limiter.hit("ip")
    assert decision.allowed
    assert decision.reset_at == pytest.approx(1120.5)


def test_keys_are_counted_independently() -> None:
    store = InMemoryRateLimitStore()
    limiter = FixedWindowRateLimiter(store, limit=1, clock=FakeClock())
    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed
    assert not limiter.hit("a").allowed
    assert store.get("a") == (2, pytest.approx(1060.0))


def test_default_limit_is_thirty_per_minute() -> None:
    limiter = FixedWindowRateLimiter(clock=FakeClock())
    decisions = [limiter.hit("ip") for _ in range(31)]
    assert decisions[29].allowed
    assert decisions[29].remaining == 0
    assert not decisions[30].allowed


def test_invalid_limiter_settings_are_rejected() -> None:
    with pytest.raises(ValueError, match="limit must be > 0"):
        FixedWindowRateLimiter(limit=0)
    with pytest.raises(ValueError, match="window_seconds must be > 0"):
        FixedWindowRateLimiter(window_seconds=0)
