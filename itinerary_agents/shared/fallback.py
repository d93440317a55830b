"""
Fallback and pacing helpers for recoverable stages.

``with_fallback`` is the single place where a recoverable stage swallows
an error: the failure is logged and a deterministic substitute is
returned instead.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_fallback(
    primary: Callable[[], Awaitable[T]],
    fallback: Callable[[], T],
    label: str,
) -> Tuple[T, bool]:
    """
    Run ``primary``; on any error log it and return ``fallback()`` instead.

    Args:
        primary: Zero-argument coroutine factory producing the preferred result
        fallback: Deterministic, synchronous substitute
        label: Name used in the warning log line

    Returns:
        Tuple of (result, used_fallback)
    """
    try:
        return await primary(), False
    except Exception as e:
        logger.warning(f"[fallback={label}] Primary failed, using fallback: {e}")
        return fallback(), True


async def pause(seconds: float) -> None:
    """Sleep between rate-limited calls; zero disables pacing."""
    if seconds > 0:
        await asyncio.sleep(seconds)
