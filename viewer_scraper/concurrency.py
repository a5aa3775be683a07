"""Order-preserving bounded concurrency for async operations."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Sequence, TypeVar

logger = logging.getLogger("viewer_scraper")

T = TypeVar("T")
R = TypeVar("R")


async def run_bounded(items: Sequence[T], limit: int,
                      op: Callable[[T], Awaitable[R]]) -> List[R]:
    """Run ``op`` over every item with at most ``limit`` calls in flight.

    Results come back in input order whatever the completion order. The first
    failure is re-raised once the remaining operations have been cancelled and
    awaited; work that already completed is not undone.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    if not items:
        return []

    semaphore = asyncio.Semaphore(limit)

    async def _guarded(item: T) -> R:
        async with semaphore:
            return await op(item)

    tasks = [asyncio.ensure_future(_guarded(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.debug(f"Cancelling {len(pending)} unfinished operations after a failure")
            await asyncio.gather(*pending, return_exceptions=True)
        # Mark sibling failures as retrieved; only the first one is reported.
        for task in tasks:
            if task.done() and not task.cancelled():
                task.exception()
        raise
