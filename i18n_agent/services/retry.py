"""Bounded retries with backoff for upstream model calls."""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from anthropic import RateLimitError

from i18n_agent.services.rate_limiter import RateLimiter
from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


def is_rate_limit_error(error: BaseException) -> bool:
    """Whether an error signals that the upstream provider is rate limiting us."""
    if isinstance(error, RateLimitError):
        return True
    if getattr(error, "status_code", None) == 429:
        return True
    message = str(error).lower()
    return "rate limit" in message or "rate_limit" in message or "429" in message


async def call_with_retries(
    call: Callable[[], Awaitable[T]],
    rate_limiter: RateLimiter,
    max_retries: int = 3,
    base_delay: float = 1.0,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Run an upstream call with at most ``max_retries`` attempts.

    A limiter slot is claimed before the first attempt. Rate-limit failures back
    off exponentially, doubling from ``base_delay``, and claim a fresh slot before
    retrying; any other failure waits a flat ``base_delay``. When every attempt
    fails the last error is raised.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    await rate_limiter.await_slot()

    for attempt in range(1, max_retries):
        started = time.perf_counter()
        try:
            return await call()
        except Exception as e:
            elapsed = time.perf_counter() - started

            if is_rate_limit_error(e):
                delay = base_delay * (2 ** (attempt - 1))
                logger.warning(f"Rate limited on attempt {attempt}/{max_retries}, backing off {delay:.2f}s")
                await sleep(delay)
                await rate_limiter.await_slot()
            else:
                logger.warning(
                    f"Upstream call failed on attempt {attempt}/{max_retries} after {elapsed:.2f}s: {e}; "
                    f"retrying in {base_delay:.2f}s"
                )
                await sleep(base_delay)

    started = time.perf_counter()
    try:
        return await call()
    except Exception as e:
        elapsed = time.perf_counter() - started
        logger.error(f"Upstream call failed on final attempt {max_retries}/{max_retries} after {elapsed:.2f}s: {e}")
        raise
