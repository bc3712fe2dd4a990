"""
Fixed-size batch fan-out for upstream requests.

Items are processed in batches: every item of a batch runs concurrently
and the batch is awaited as a unit before the next one starts. A fixed
pause separates consecutive batches; there is no pause after the last.

Responsibility: Bounded concurrency and pacing for crawler and enricher
"""

import asyncio
from typing import Awaitable, Callable, List, Sequence, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def gather_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int = 5,
    delay_seconds: float = 1.0,
) -> List[R]:
    """
    Run ``worker`` over ``items`` in sequential, concurrent batches.

    Results are returned in input order. Exceptions raised by ``worker``
    propagate; callers that need per-item isolation handle errors inside
    the worker.

    Example:
        trees = await gather_in_batches(sections, fetch_tree, batch_size=5)
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results: List[R] = []
    total = len(items)

    for start in range(0, total, batch_size):
        batch = items[start:start + batch_size]
        logger.debug(
            "Processing batch %s-%s of %s", start + 1, start + len(batch), total
        )
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))

        if start + batch_size < total and delay_seconds > 0:
            await asyncio.sleep(delay_seconds)

    return results
