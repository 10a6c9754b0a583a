"""Shared concurrency primitives for the crawl pipeline.

Every outbound fetch of a crawl (category pages and feed pages alike)
runs under one ``asyncio.Semaphore`` created per crawl, so the total
number of in-flight requests never exceeds the configured width.

1. **throttled_gather** -- ``asyncio.gather`` with each awaitable wrapped
   in a semaphore acquire/release.  Used for the category-page fan-out.

2. **bounded** -- run a single awaitable under the semaphore.  Used by the
   feed paginator, which schedules its own tasks one page at a time.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def bounded(semaphore: asyncio.Semaphore, aw: Awaitable[_T]) -> _T:
    """Await *aw* while holding a slot of *semaphore*."""
    async with semaphore:
        return await aw


async def throttled_gather(
    coros: list[Awaitable[_T]],
    semaphore: asyncio.Semaphore,
    return_exceptions: bool = False,
) -> list[_T | BaseException]:
    """Run awaitables concurrently, at most ``semaphore`` width at a time.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    semaphore:
        Limiter shared with the other fetches of the same crawl.
    return_exceptions:
        If ``True``, exceptions are returned in the results list rather
        than being raised.  The crawl uses ``False``: one failed category
        page fails the whole crawl.

    Returns
    -------
    list
        Results in the same order as the input coroutines.
    """
    tasks = [bounded(semaphore, c) for c in coros]
    return await asyncio.gather(*tasks, return_exceptions=return_exceptions)
