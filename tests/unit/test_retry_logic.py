"""
Tests for the bounded retry loop and its abort branch.
"""

import asyncio

import pytest

from assetpipe.recovery.retry_logic import RetryConfig, RetryManager, RetryStrategy


class PermanentError(Exception):
    pass


def failing_then(result, failures, error=None):
    """Async callable that raises ``failures`` times before returning."""
    calls = {"count": 0}

    async def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise error or ConnectionError("transient")
        return result

    return operation, calls


class TestRetryAsync:
    """Retry loop behaviour."""

    @pytest.fixture
    def manager(self):
        return RetryManager(RetryConfig(base_delay=0, max_delay=0))

    @pytest.mark.asyncio
    async def test_succeeds_first_time(self, manager):
        operation, calls = failing_then("ok", 0)
        assert await manager.retry_async(operation) == "ok"
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self, manager):
        operation, calls = failing_then("ok", 2)
        config = RetryConfig(max_retries=3, base_delay=0)

        assert await manager.retry_async(operation, config=config) == "ok"
        assert calls["count"] == 3

    @pytest.mark.asyncio
    async def test_succeeds_when_failures_equal_retries(self, manager):
        operation, calls = failing_then("ok", 3)
        config = RetryConfig(max_retries=3, base_delay=0)

        assert await manager.retry_async(operation, config=config) == "ok"
        assert calls["count"] == 4

    @pytest.mark.asyncio
    async def test_fails_after_retries_exhausted(self, manager):
        operation, calls = failing_then("ok", 4)
        config = RetryConfig(max_retries=3, base_delay=0)

        with pytest.raises(ConnectionError):
            await manager.retry_async(operation, config=config)
        assert calls["count"] == 4

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self, manager):
        operation, calls = failing_then("ok", 1)
        config = RetryConfig(max_retries=0, base_delay=0)

        with pytest.raises(ConnectionError):
            await manager.retry_async(operation, config=config)
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_abort_exception_is_not_retried(self, manager):
        operation, calls = failing_then("ok", 5, error=PermanentError("gone"))
        config = RetryConfig(max_retries=3, base_delay=0, abort_on_exceptions=(PermanentError,))

        with pytest.raises(PermanentError):
            await manager.retry_async(operation, config=config)
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_non_retryable_exception_is_raised(self, manager):
        operation, calls = failing_then("ok", 5, error=KeyError("bug"))
        config = RetryConfig(max_retries=3, base_delay=0, retry_on_exceptions=(ConnectionError,))

        with pytest.raises(KeyError):
            await manager.retry_async(operation, config=config)
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_cancellation_is_not_retried(self, manager):
        calls = {"count": 0}

        async def operation():
            calls["count"] += 1
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await manager.retry_async(operation, config=RetryConfig(max_retries=3, base_delay=0))
        assert calls["count"] == 1

    @pytest.mark.asyncio
    async def test_passes_arguments(self, manager):
        async def add(a, b=0):
            return a + b

        assert await manager.retry_async(add, 2, b=3) == 5


class TestDelayCalculation:
    """Backoff strategies."""

    def test_exponential(self):
        manager = RetryManager()
        config = RetryConfig(base_delay=1.0, max_delay=100.0)
        assert manager._calculate_delay(1, config) == 1.0
        assert manager._calculate_delay(2, config) == 2.0
        assert manager._calculate_delay(3, config) == 4.0

    def test_capped_by_max_delay(self):
        manager = RetryManager()
        config = RetryConfig(base_delay=1.0, max_delay=3.0)
        assert manager._calculate_delay(5, config) == 3.0

    def test_fixed_and_linear(self):
        manager = RetryManager()
        fixed = RetryConfig(strategy=RetryStrategy.FIXED_DELAY, base_delay=0.5, max_delay=10)
        linear = RetryConfig(strategy=RetryStrategy.LINEAR_BACKOFF, base_delay=0.5, max_delay=10)
        assert manager._calculate_delay(3, fixed) == 0.5
        assert manager._calculate_delay(3, linear) == 1.5

    def test_jittered_within_bounds(self):
        manager = RetryManager()
        config = RetryConfig(strategy=RetryStrategy.JITTERED_EXPONENTIAL, base_delay=1.0, max_delay=10)
        for _ in range(20):
            assert 0.0 <= manager._calculate_delay(3, config) <= 4.0
