"""Process-wide throttle for upstream model calls."""

import asyncio
import math
import time

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from i18n_agent.utils.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """Calls-per-minute budget for the upstream model, with a minimum spacing between calls.

    The 60 second window is a fixed window kept by the limits library: it starts
    with the first call and its counter resets once the window has elapsed. On
    top of it every granted slot is at least ``ceil(60000 / calls_per_minute)``
    milliseconds after the previous one. Slot acquisition is serialized, so one
    instance can be shared by every concurrent request.
    """

    def __init__(self, calls_per_minute: int, identifier: str = "model"):
        """Initialize the rate limiter.

        Args:
            calls_per_minute: Steady-state budget of upstream calls per minute
            identifier: Bucket name inside the limiter storage
        """
        if calls_per_minute <= 0:
            raise ValueError("calls_per_minute must be positive")

        self.calls_per_minute = calls_per_minute
        self.min_interval = math.ceil(60_000 / calls_per_minute) / 1000
        self.identifier = identifier

        self.storage = MemoryStorage()
        self.limiter = FixedWindowRateLimiter(self.storage)
        self.request_limit = parse(f"{calls_per_minute}/minute")

        self._last_call: float | None = None
        self._lock = asyncio.Lock()

    @property
    def last_call(self) -> float | None:
        """Monotonic timestamp of the most recently granted slot."""
        return self._last_call

    async def await_slot(self) -> None:
        """Block until another upstream call may be issued, then claim the slot."""
        async with self._lock:
            if self._last_call is not None:
                while (wait_time := self._last_call + self.min_interval - time.monotonic()) > 0:
                    logger.debug(f"Spacing upstream calls, waiting {wait_time:.3f}s")
                    await asyncio.sleep(wait_time)

            while not self.limiter.hit(self.request_limit, self.identifier):
                reset_time, _remaining = self.limiter.get_window_stats(self.request_limit, self.identifier)
                wait_time = max(reset_time - time.time(), 0.05)
                logger.warning(f"Model call budget of {self.calls_per_minute}/minute used up, waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)

            # Claimed even if the call that follows fails
            self._last_call = time.monotonic()

    def reset(self) -> None:
        """Forget all recorded calls."""
        self.limiter.clear(self.request_limit, self.identifier)
        self._last_call = None


_rate_limiter: RateLimiter | None = None


def get_rate_limiter(calls_per_minute: int | None = None) -> RateLimiter:
    """Get or create the process-wide rate limiter shared by all agent runs."""
    global _rate_limiter
    if _rate_limiter is None:
        if calls_per_minute is None:
            from i18n_agent.config import get_config

            calls_per_minute = get_config().calls_per_minute
        _rate_limiter = RateLimiter(calls_per_minute)
    return _rate_limiter
