"""Tests for the retry wrapper around upstream calls."""

from unittest.mock import AsyncMock

import httpx
import pytest
from anthropic import RateLimitError

from i18n_agent.services.rate_limiter import RateLimiter
from i18n_agent.services.retry import call_with_retries, is_rate_limit_error
from tests.fakes import SleepRecorder


class StatusError(Exception):
    """Error carrying an HTTP status code, like provider SDK errors do."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class FlakyCall:
    """Callable failing with the queued errors before returning a value."""

    def __init__(self, errors: list[Exception], value: str = "ok"):
        self.errors = list(errors)
        self.value = value
        self.attempts = 0

    async def __call__(self) -> str:
        self.attempts += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


@pytest.fixture
def limiter() -> AsyncMock:
    return AsyncMock(spec=RateLimiter)


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


class TestCallWithRetries:
    """Tests for bounded retries with backoff."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self, limiter, sleep):
        """Test that a successful call runs once and claims one slot."""
        call = FlakyCall([])

        result = await call_with_retries(call, limiter, max_retries=3, base_delay=1.0, sleep=sleep)

        assert result == "ok"
        assert call.attempts == 1
        assert limiter.await_slot.await_count == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self, limiter, sleep):
        """Test that max_retries - 1 failures followed by a success returns the success."""
        call = FlakyCall([RuntimeError("timeout"), RuntimeError("timeout")])

        result = await call_with_retries(call, limiter, max_retries=3, base_delay=1.0, sleep=sleep)

        assert result == "ok"
        assert call.attempts == 3
        assert sleep.delays == [1.0, 1.0]
        assert limiter.await_slot.await_count == 1

    @pytest.mark.asyncio
    async def test_raises_last_error_after_max_attempts(self, limiter, sleep):
        """Test that exactly max_retries attempts are made and the last error propagates."""
        call = FlakyCall([RuntimeError("first"), RuntimeError("second"), RuntimeError("third"), RuntimeError("x")])

        with pytest.raises(RuntimeError, match="third"):
            await call_with_retries(call, limiter, max_retries=3, base_delay=0.5, sleep=sleep)

        assert call.attempts == 3
        # No wait after the final attempt
        assert sleep.delays == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_rate_limit_errors_back_off_exponentially(self, limiter, sleep):
        """Test that rate-limit failures wait base * 2**attempt and claim a new slot."""
        call = FlakyCall([StatusError("slow down", 429), StatusError("slow down", 429), StatusError("slow down", 429)])

        result = await call_with_retries(call, limiter, max_retries=4, base_delay=1.0, sleep=sleep)

        assert result == "ok"
        assert sleep.delays == [1.0, 2.0, 4.0]
        assert limiter.await_slot.await_count == 4

    @pytest.mark.asyncio
    async def test_mixed_failures_use_matching_delays(self, limiter, sleep):
        """Test that only rate-limit failures back off exponentially."""
        call = FlakyCall([RuntimeError("connection reset"), Exception("Rate limit exceeded")])

        await call_with_retries(call, limiter, max_retries=3, base_delay=0.5, sleep=sleep)

        assert sleep.delays == [0.5, 1.0]
        assert limiter.await_slot.await_count == 2

    @pytest.mark.asyncio
    async def test_single_attempt_does_not_sleep(self, limiter, sleep):
        """Test that max_retries=1 fails straight away."""
        call = FlakyCall([RuntimeError("boom")])

        with pytest.raises(RuntimeError, match="boom"):
            await call_with_retries(call, limiter, max_retries=1, base_delay=1.0, sleep=sleep)

        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_rejects_zero_retries(self, limiter, sleep):
        """Test that a retry budget below one is rejected before calling."""
        call = FlakyCall([])

        with pytest.raises(ValueError):
            await call_with_retries(call, limiter, max_retries=0, sleep=sleep)

        assert call.attempts == 0


class TestIsRateLimitError:
    """Tests for rate-limit error classification."""

    def test_anthropic_rate_limit_error(self):
        """Test that the SDK's RateLimitError is recognized."""
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        error = RateLimitError("Too many requests", response=httpx.Response(429, request=request), body=None)

        assert is_rate_limit_error(error)

    @pytest.mark.parametrize(
        "error",
        [
            StatusError("anything", 429),
            Exception("Rate limit exceeded for this organization"),
            Exception("error type: rate_limit_error"),
            Exception("HTTP 429 Too Many Requests"),
        ],
    )
    def test_recognized_errors(self, error):
        """Test status codes and messages that indicate rate limiting."""
        assert is_rate_limit_error(error)

    @pytest.mark.parametrize(
        "error",
        [
            StatusError("server error", 500),
            RuntimeError("connection reset by peer"),
            ValueError("bad input"),
        ],
    )
    def test_other_errors(self, error):
        """Test that unrelated failures are not treated as rate limiting."""
        assert not is_rate_limit_error(error)
