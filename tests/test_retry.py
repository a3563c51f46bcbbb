"""Unit tests for retry logic and error classification."""
from unittest.mock import AsyncMock

import pytest

from fitplan_api.errors import RateLimited, RemoteUnavailable, ValidationError
from fitplan_api.retry import DEFAULT_MAX_ATTEMPTS, is_retryable_error, retry_async_call


class TestIsRetryableError:
    """Test error classification for retry decisions."""

    @pytest.mark.parametrize("status_code", [None, 500, 502, 503, 504])
    def test_network_and_server_errors_are_retryable(self, status_code):
        assert is_retryable_error(RemoteUnavailable("down", status_code=status_code)) is True

    @pytest.mark.parametrize("status_code", [400, 401, 404, 422])
    def test_client_errors_are_not_retryable(self, status_code):
        assert is_retryable_error(RemoteUnavailable("bad", status_code=status_code)) is False

    def test_rate_limit_is_not_retryable(self):
        assert is_retryable_error(RateLimited()) is False

    @pytest.mark.parametrize("exception", [ValueError("x"), ValidationError("x"), RuntimeError("x")])
    def test_other_errors_are_not_retryable(self, exception):
        assert is_retryable_error(exception) is False


class TestRetryAsyncCall:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        func = AsyncMock(return_value="ok")
        assert await retry_async_call(func, "a", key="b", min_wait_seconds=0, max_wait_seconds=0) == "ok"
        func.assert_awaited_once_with("a", key="b")

    @pytest.mark.asyncio
    async def test_retries_transient_failures(self):
        func = AsyncMock(side_effect=[RemoteUnavailable("down"), RemoteUnavailable("down"), "ok"])
        result = await retry_async_call(func, min_wait_seconds=0, max_wait_seconds=0)
        assert result == "ok"
        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_reraises_after_max_attempts(self):
        func = AsyncMock(side_effect=RemoteUnavailable("down"))
        with pytest.raises(RemoteUnavailable):
            await retry_async_call(func, min_wait_seconds=0, max_wait_seconds=0)
        assert func.await_count == DEFAULT_MAX_ATTEMPTS

    @pytest.mark.asyncio
    async def test_non_retryable_raised_immediately(self):
        func = AsyncMock(side_effect=RateLimited())
        with pytest.raises(RateLimited):
            await retry_async_call(func, min_wait_seconds=0, max_wait_seconds=0)
        assert func.await_count == 1
