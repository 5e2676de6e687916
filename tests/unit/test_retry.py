"""Unit tests for the retry wrapper."""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from camp_ecosystem.utils.errors import RpcTimeoutError, SolanaRpcError
from camp_ecosystem.utils.retry import is_empty_result, is_timeout_error, retry_budget, with_retries


class TestClassifiers:
    """Test suite for error and result classification."""

    @pytest.mark.parametrize("error", [
        asyncio.TimeoutError(),
        httpx.ReadTimeout("read timed out"),
        RpcTimeoutError("getBalance timed out"),
        Exception("connect ETIMEDOUT 1.2.3.4:443"),
        Exception("Request timed out"),
    ])
    def test_timeouts_are_retryable(self, error):
        assert is_timeout_error(error)

    @pytest.mark.parametrize("error", [
        ValueError("bad input"),
        SolanaRpcError("Solana RPC error: Invalid param"),
    ])
    def test_other_errors_are_not_retryable(self, error):
        assert not is_timeout_error(error)

    def test_empty_results(self):
        assert is_empty_result(None)
        assert is_empty_result([])
        assert is_empty_result({})
        assert not is_empty_result(0)
        assert not is_empty_result({"slot": 1})


class TestWithRetries:
    """Test suite for with_retries."""

    @pytest.mark.asyncio
    async def test_success_returns_immediately(self):
        operation = AsyncMock(return_value=5)

        assert await with_retries(operation, max_attempts=3, base_delay=0) == 5
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_timeout_then_success_waits_linear_backoff(self):
        operation = AsyncMock(side_effect=[RpcTimeoutError("timed out"), RpcTimeoutError("timed out"), "ok"])

        with patch("camp_ecosystem.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await with_retries(operation, max_attempts=3, base_delay=0.3)

        assert result == "ok"
        assert operation.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == pytest.approx([0.3, 0.6])

    @pytest.mark.asyncio
    async def test_non_timeout_error_propagates_without_retry(self):
        operation = AsyncMock(side_effect=SolanaRpcError("Solana RPC error: Invalid param"))

        with pytest.raises(SolanaRpcError):
            await with_retries(operation, max_attempts=3, base_delay=0)
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_last_timeout_propagates_after_final_attempt(self):
        operation = AsyncMock(side_effect=asyncio.TimeoutError())

        with pytest.raises(asyncio.TimeoutError):
            await with_retries(operation, max_attempts=2, base_delay=0)
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_result_retried_then_returned_on_final_attempt(self):
        operation = AsyncMock(return_value=None)

        with patch("camp_ecosystem.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await with_retries(operation, max_attempts=3, base_delay=1.0, retry_on_empty=True)

        assert result is None
        assert operation.await_count == 3
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_result_until_indexed(self):
        operation = AsyncMock(side_effect=[None, {"slot": 7}])

        result = await with_retries(operation, max_attempts=3, base_delay=0, retry_on_empty=True)

        assert result == {"slot": 7}
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_empty_result_returned_without_retry_flag(self):
        operation = AsyncMock(return_value=[])

        assert await with_retries(operation, max_attempts=3, base_delay=0) == []
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_invalid_attempt_count(self):
        with pytest.raises(ValueError):
            await with_retries(AsyncMock(), max_attempts=0)


class TestRetryBudget:
    """Test suite for retry_budget."""

    def test_covers_every_attempt_and_backoff(self):
        # 3 attempts of 5s plus 0.3s and 0.6s of backoff
        assert retry_budget(3, 5.0, 0.3) == pytest.approx(15.9)

    def test_single_attempt_has_no_backoff(self):
        assert retry_budget(1, 5.0, 0.3) == 5.0

    @pytest.mark.asyncio
    async def test_budget_matches_worst_case(self):
        operation = AsyncMock(side_effect=RpcTimeoutError("timed out"))

        with patch("camp_ecosystem.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            with pytest.raises(RpcTimeoutError):
                await with_retries(operation, max_attempts=3, base_delay=0.3)

        slept = sum(call.args[0] for call in sleep.await_args_list)
        assert retry_budget(3, 0.0, 0.3) == pytest.approx(slept)
