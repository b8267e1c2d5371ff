"""Bounded-concurrency fan-out for per-item backend lookups."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from typing import TypeVar

import httpx

from backend.client import BackendError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10

# Failures that only cost the one item. Anything else is a bug and propagates.
FETCH_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, BackendError, json.JSONDecodeError)

T = TypeVar("T")
R = TypeVar("R")


async def _fetch_or_none(item: T, fetch: Callable[[T], Awaitable[R]]) -> R | None:
    try:
        return await fetch(item)
    except FETCH_ERRORS as exc:
        logger.warning("Skipping %r after fetch failure: %s", item, exc)
        return None


async def iter_batches(
    items: Iterable[T],
    fetch: Callable[[T], Awaitable[R]],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> AsyncIterator[list[tuple[T, R | None]]]:
    """Yield ``(item, result)`` pairs one batch at a time.

    Fetches inside a batch run concurrently; the next batch starts only after
    the previous one finished. Callers may stop iterating early.
    """
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")
    pending = list(items)
    for start in range(0, len(pending), batch_size):
        batch = pending[start : start + batch_size]
        results = await asyncio.gather(*(_fetch_or_none(item, fetch) for item in batch))
        yield list(zip(batch, results))


async def gather_in_batches(
    items: Iterable[T],
    fetch: Callable[[T], Awaitable[R]],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[R | None]:
    """Fetch every item in batches; results line up with ``items``."""
    results: list[R | None] = []
    async for batch in iter_batches(items, fetch, batch_size):
        results.extend(result for _, result in batch)
    return results


__all__ = ["DEFAULT_BATCH_SIZE", "FETCH_ERRORS", "gather_in_batches", "iter_batches"]
