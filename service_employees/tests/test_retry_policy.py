"""
Unit tests for the shared retry policy.
"""

import pytest
from unittest.mock import AsyncMock, patch

from shared.errors import ClientError, RateLimitedError, ServerError, TransportFaultError
from shared.metrics import MetricsCollector
from shared.retry import RetryConfig, RetryExhaustedError, RetryPolicy


class TestRetryPolicy:
    """Test cases for RetryPolicy."""

    @pytest.fixture
    def sleep(self):
        return AsyncMock()

    @pytest.fixture
    def policy(self, sleep):
        return RetryPolicy(RetryConfig(max_retries=3, base_delay=5.0, jitter=0.5), name="test", sleep=sleep)

    @pytest.mark.asyncio
    async def test_success_first_attempt(self, policy, sleep):
        func = AsyncMock(return_value="ok")

        assert await policy.call(func, operation="op") == "ok"
        func.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_recovers_after_two_rate_limits(self, policy, sleep):
        func = AsyncMock(side_effect=[RateLimitedError(), RateLimitedError(), "ok"])

        assert await policy.call(func, operation="op") == "ok"
        assert func.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_exhaustion_after_configured_attempts(self, policy, sleep):
        last = RateLimitedError("still limited")
        func = AsyncMock(side_effect=[RateLimitedError(), RateLimitedError(), RateLimitedError(), last])

        with pytest.raises(RetryExhaustedError) as exc_info:
            await policy.call(func, operation="fetch_all")

        error = exc_info.value
        assert isinstance(error, RateLimitedError)
        assert "exhausted" in error.message
        assert error.__cause__ is last
        assert error.last_exception is last
        assert error.attempts == 4
        assert func.await_count == 4
        assert sleep.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        ClientError("Client error occurred: 400"),
        ServerError("Server error occurred: 500"),
        TransportFaultError("refused"),
    ])
    async def test_non_retryable_errors_propagate_immediately(self, policy, sleep, error):
        func = AsyncMock(side_effect=error)

        with pytest.raises(type(error)) as exc_info:
            await policy.call(func, operation="op")

        assert exc_info.value is error
        func.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_retries_exhausts_on_first_failure(self, sleep):
        policy = RetryPolicy(RetryConfig(max_retries=0), sleep=sleep)
        func = AsyncMock(side_effect=RateLimitedError())

        with pytest.raises(RetryExhaustedError):
            await policy.call(func, operation="op")

        func.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_retries_are_counted_in_metrics(self, sleep):
        metrics = MetricsCollector("employees")
        policy = RetryPolicy(RetryConfig(max_retries=3), metrics=metrics, sleep=sleep)
        func = AsyncMock(side_effect=[RateLimitedError(), "ok"])

        await policy.call(func, operation="fetch_all")

        assert metrics.get_sample_value("upstream_retries_total", operation="fetch_all") == 1.0

    @pytest.mark.asyncio
    async def test_sleeps_use_computed_delays(self, sleep):
        policy = RetryPolicy(RetryConfig(max_retries=3, base_delay=5.0, jitter=0.0), sleep=sleep)
        func = AsyncMock(side_effect=[RateLimitedError(), RateLimitedError(), RateLimitedError(), "ok"])

        await policy.call(func, operation="op")

        assert [c.args[0] for c in sleep.await_args_list] == [5.0, 10.0, 20.0]


class TestComputeDelay:
    """Test cases for backoff delay calculation."""

    def test_exponential_without_jitter(self):
        policy = RetryPolicy(RetryConfig(base_delay=5.0, jitter=0.0))
        assert [policy.compute_delay(n) for n in (1, 2, 3)] == [5.0, 10.0, 20.0]

    def test_upper_jitter_bound(self):
        policy = RetryPolicy(RetryConfig(base_delay=5.0, jitter=0.5, max_delay=60.0))
        with patch("shared.retry.random.uniform", side_effect=lambda low, high: high):
            assert [policy.compute_delay(n) for n in (1, 2, 3)] == [7.5, 15.0, 30.0]

    def test_lower_jitter_bound_never_below_base(self):
        policy = RetryPolicy(RetryConfig(base_delay=5.0, jitter=0.5, max_delay=60.0))
        with patch("shared.retry.random.uniform", side_effect=lambda low, high: low):
            assert [policy.compute_delay(n) for n in (1, 2, 3)] == [5.0, 5.0, 10.0]

    def test_max_delay_caps_growth(self):
        policy = RetryPolicy(RetryConfig(base_delay=5.0, jitter=0.5, max_delay=8.0))
        with patch("shared.retry.random.uniform", side_effect=lambda low, high: high):
            assert policy.compute_delay(3) == 8.0

    def test_jittered_delays_stay_in_range(self):
        policy = RetryPolicy(RetryConfig(base_delay=5.0, jitter=0.5, max_delay=60.0))
        for _ in range(200):
            delay = policy.compute_delay(2)
            assert 5.0 <= delay <= 15.0

