"""Bounded retry with exponential backoff for idempotent reads.

Only reads may go through here. Writes (order creation, identity creation)
have no deduplication key, so retrying them could duplicate data.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from grinfood.core.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_read(
    operation: Callable[[], Awaitable[T]],
    attempts: int = 3,
    base_delay: float = 0.1,
    description: str = "read",
) -> T:
    """Run ``operation``, retrying on CollaboratorFailure.

    Waits ``base_delay * 2**n`` seconds before retry n+1. Any other exception
    propagates immediately. The last failure is re-raised once attempts are
    exhausted.
    """
    for attempt in range(1, attempts):
        try:
            return await operation()
        except CollaboratorFailure as e:
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(f"{description} failed (attempt {attempt}/{attempts}), retrying in {delay:.2f}s: {e}")
            await asyncio.sleep(delay)

    try:
        return await operation()
    except CollaboratorFailure as e:
        logger.error(f"{description} failed after {attempts} attempts: {e}")
        raise
