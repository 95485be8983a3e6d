"""Tests for rate limiting and concurrency utilities."""
import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gst_invoice.config import Settings
from gst_invoice.core.rate_limit import (
    RateLimitedExecutor,
    RetryError,
    create_gemini_executor,
    retry_with_backoff,
)


@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    return MagicMock(spec=logging.Logger)


class TestRetryWithBackoff:
    """Test retry_with_backoff functionality."""

    @pytest.mark.asyncio
    async def test_retry_success_first_attempt(self, mock_logger):
        """Test successful operation on first attempt."""
        operation = AsyncMock(return_value="success")

        result = await retry_with_backoff(operation, max_retries=3, logger=mock_logger)

        assert result == "success"
        operation.assert_called_once()
        mock_logger.warning.assert_not_called()

    @pytest.mark.asyncio
    async def test_retry_success_after_failures(self, mock_logger):
        """Test successful operation after some failures."""
        operation = AsyncMock(side_effect=[Exception("fail1"), Exception("fail2"), "success"])

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await retry_with_backoff(
                operation,
                max_retries=3,
                base_delay=1.0,
                jitter_range=0.0,
                logger=mock_logger
            )

        assert result == "success"
        assert operation.call_count == 3
        assert mock_logger.warning.call_count == 2
        assert [call.args[0] for call in mock_sleep.call_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_retry_exhausted(self, mock_logger):
        """Test behavior when all retries are exhausted."""
        operation = AsyncMock(side_effect=Exception("persistent failure"))

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(RetryError) as exc_info:
                await retry_with_backoff(
                    operation,
                    max_retries=2,
                    operation_name="test_operation",
                    logger=mock_logger
                )

        assert exc_info.value.operation_name == "test_operation"
        assert exc_info.value.attempts == 2
        assert str(exc_info.value.last_exception) == "persistent failure"
        assert operation.call_count == 2
        mock_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_single_attempt_does_not_retry(self, mock_logger):
        """max_retries=1 makes exactly one call and no retry log."""
        operation = AsyncMock(side_effect=Exception("quota exceeded"))

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(RetryError) as exc_info:
                await retry_with_backoff(operation, max_retries=1, logger=mock_logger)

        assert exc_info.value.attempts == 1
        operation.assert_called_once()
        mock_sleep.assert_not_called()
        mock_logger.warning.assert_not_called()
        mock_logger.error.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_retryable_exception(self, mock_logger):
        """Test non-retryable exceptions stop immediately."""
        operation = AsyncMock(side_effect=ValueError("bad request"))

        with pytest.raises(RetryError) as exc_info:
            await retry_with_backoff(
                operation,
                max_retries=3,
                retry_exceptions=(ConnectionError,),
                logger=mock_logger
            )

        assert exc_info.value.attempts == 1
        assert isinstance(exc_info.value.last_exception, ValueError)
        operation.assert_called_once()

    @pytest.mark.asyncio
    async def test_delay_is_capped(self, mock_logger):
        """Test exponential delays are capped at max_delay."""
        operation = AsyncMock(side_effect=[Exception("1"), Exception("2"), Exception("3"), "ok"])

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await retry_with_backoff(
                operation,
                max_retries=4,
                base_delay=3.0,
                max_delay=5.0,
                jitter_range=0.0,
                logger=mock_logger
            )

        assert [call.args[0] for call in mock_sleep.call_args_list] == [3.0, 5.0, 5.0]


class TestRateLimitedExecutor:
    """Test RateLimitedExecutor functionality."""

    @pytest.mark.asyncio
    async def test_executor_init(self):
        executor = RateLimitedExecutor(capacity=3, max_retries=2)

        assert executor.max_retries == 2
        assert executor.stats == {
            "available_capacity": 3,
            "borrowed_capacity": 0,
            "total_capacity": 3,
        }

    @pytest.mark.asyncio
    async def test_executor_execute(self):
        executor = RateLimitedExecutor(capacity=2)
        operation = AsyncMock(return_value="done")

        assert await executor.execute(operation, operation_name="extract a.pdf") == "done"
        operation.assert_called_once()

    @pytest.mark.asyncio
    async def test_executor_limits_concurrency(self):
        """No more than capacity operations run at once."""
        executor = RateLimitedExecutor(capacity=2)
        active = 0
        peak = 0

        async def operation():
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.02)
            active -= 1
            return "ok"

        results = await asyncio.gather(*[executor.execute(operation) for _ in range(5)])

        assert results == ["ok"] * 5
        assert peak == 2
        assert executor.stats["borrowed_capacity"] == 0

    @pytest.mark.asyncio
    async def test_executor_failure_raises_retry_error(self):
        executor = RateLimitedExecutor(capacity=1, max_retries=1)
        operation = AsyncMock(side_effect=ConnectionError("network down"))

        with pytest.raises(RetryError):
            await executor.execute(operation, operation_name="extract b.csv")

        assert executor.stats["borrowed_capacity"] == 0


@pytest.mark.asyncio
async def test_create_gemini_executor():
    settings = Settings(
        _env_file=None,
        gemini_api_key="test-key",
        quota_limit=4,
        retry_max_attempts=2,
        retry_base_delay=0.5,
        retry_max_delay=3.0,
        retry_jitter_range=0.0,
    )

    executor = create_gemini_executor(settings)

    assert executor.stats["total_capacity"] == 4
    assert executor.max_retries == 2
    assert executor.base_delay == 0.5
    assert executor.max_delay == 3.0
    assert executor.jitter_range == 0.0
