"""Polling of API resources while their build is pending."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Awaitable, Callable
from numbers import Real
from typing import Protocol, TypeVar

from .constants import POLL_TIME_MAX, POLL_TIME_START
from .models import QueryOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Clock(Protocol):
    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def check_wait(wait: object) -> float:
    """Validate a wait budget in seconds."""
    if isinstance(wait, bool) or not isinstance(wait, Real) or math.isnan(wait):
        raise TypeError("wait must be a number")
    if wait < 0:
        raise ValueError("wait must be non-negative")
    return float(wait)


async def query_with_wait(
    query: Callable[[], Awaitable[T]],
    is_pending: Callable[[T], bool],
    options: QueryOptions | None = None,
    clock: Clock | None = None,
) -> T:
    """Run ``query``, re-running it while ``is_pending`` holds.

    Retries use truncated exponential backoff starting at POLL_TIME_START
    seconds, never sleep longer than POLL_TIME_MAX, and stop once
    ``options.wait`` seconds have passed. A result that is still pending when
    the budget runs out is returned as is. Errors from ``query`` or
    ``is_pending`` are never retried.
    """
    max_wait = check_wait(options.wait if options else 0)
    clock = clock or SystemClock()

    start = clock.monotonic()
    # Halved so the first retry waits POLL_TIME_START after doubling.
    next_wait = POLL_TIME_START / 2
    while True:
        result = await query()
        if not max_wait or not is_pending(result):
            return result

        elapsed = clock.monotonic() - start
        if elapsed >= max_wait:
            logger.debug("Still pending after %.1fs, giving up", elapsed)
            return result

        next_wait = min(next_wait * 2, POLL_TIME_MAX, max_wait - elapsed)
        logger.debug("Pending, retrying in %.1fs", next_wait)
        await clock.sleep(next_wait)
