"""Fixed-window request limiter over a pluggable counter store."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from domain.protocol import RateLimitStore

DEFAULT_LIMIT = 30
DEFAULT_WINDOW_SECONDS = 60.0


class InMemoryRateLimitStore:
    """Process-local counters. Not shared across instances."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[int, float]] = {}

    def get(self, key: str) -> tuple[int, float] | None:
        return self._entries.get(key)

    def increment(self, key: str, *, window_end: float) -> tuple[int, float]:
        count, reset_at = self._entries.get(key, (0, window_end))
        entry = (count + 1, reset_at)
        self._entries[key] = entry
        return entry

    def reset(self, key: str) -> None:
        self._entries.pop(key, None)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: float


class FixedWindowRateLimiter:
    """Allow ``limit`` hits per key within each ``window_seconds`` window.

    A window opens on the first hit after the previous one expired.
    """

    def __init__(
        self,
        store: RateLimitStore | None = None,
        *,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be > 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        self.store = store if store is not None else InMemoryRateLimitStore()
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        entry = self.store.get(key)
        if entry is None or now > entry[1]:
            self.store.reset(key)
        count, reset_at = self.store.increment(key, window_end=now + self.window_seconds)
        return RateLimitDecision(
            allowed=count <= self.limit,
            remaining=max(0, self.limit - count),
            reset_at=reset_at,
        )


__all__ = [
    "DEFAULT_LIMIT",
    "DEFAULT_WINDOW_SECONDS",
    "FixedWindowRateLimiter",
    "InMemoryRateLimitStore",
    "RateLimitDecision",
]
