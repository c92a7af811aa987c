"""Tests for caller-side recovery policies."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from smartmark.errors import (
    APIError,
    BookmarkError,
    NetworkError,
    OperationTimeoutError,
    ValidationError,
)
from smartmark.recovery import (
    RecoveryStrategy,
    execute_with_recovery,
    is_transient_error,
    with_deadline,
)


class TestIsTransientError:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (NetworkError("refused"), True),
            (OperationTimeoutError("slow"), True),
            (APIError("rate limited", status_code=429), True),
            (APIError("server", status_code=503), True),
            (APIError("bad request", status_code=400), False),
            (ValidationError("bad"), False),
            (BookmarkError("missing"), False),
            (RuntimeError("bug"), False),
        ],
    )
    def test_classification(self, error, expected):
        assert is_transient_error(error) is expected


class TestExecuteWithRecovery:
    """Retry, fallback, ignore and fail strategies."""

    @pytest.mark.asyncio
    async def test_success(self):
        assert await execute_with_recovery(AsyncMock(return_value="ok")) == "ok"

    @pytest.mark.asyncio
    async def test_fail_raises(self):
        fn = AsyncMock(side_effect=NetworkError("refused"))
        with pytest.raises(NetworkError):
            await execute_with_recovery(fn, strategy=RecoveryStrategy.FAIL)
        assert fn.await_count == 1

    @pytest.mark.asyncio
    async def test_fallback_value(self):
        on_error = Mock()
        fn = AsyncMock(side_effect=APIError("boom", status_code=500))
        result = await execute_with_recovery(
            fn,
            strategy=RecoveryStrategy.FALLBACK,
            fallback_value=["Uncategorized"],
            on_error=on_error,
        )
        assert result == ["Uncategorized"]
        on_error.assert_called_once()
        assert isinstance(on_error.call_args.args[0], APIError)

    @pytest.mark.asyncio
    async def test_ignore_returns_none(self):
        fn = AsyncMock(side_effect=BookmarkError("gone"))
        assert await execute_with_recovery(fn, strategy=RecoveryStrategy.IGNORE) is None

    @pytest.mark.asyncio
    async def test_retry_until_success(self):
        fn = AsyncMock(side_effect=[NetworkError("refused"), APIError("busy", status_code=503), "ok"])
        result = await execute_with_recovery(
            fn, strategy=RecoveryStrategy.RETRY, max_retries=3, retry_delay=0
        )
        assert result == "ok"
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_retry_exhausted(self):
        fn = AsyncMock(side_effect=NetworkError("refused"))
        with pytest.raises(NetworkError):
            await execute_with_recovery(
                fn, strategy=RecoveryStrategy.RETRY, max_retries=2, retry_delay=0
            )
        assert fn.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_not_retried(self):
        fn = AsyncMock(side_effect=APIError("bad key", status_code=401))
        with pytest.raises(APIError):
            await execute_with_recovery(
                fn, strategy=RecoveryStrategy.RETRY, max_retries=3, retry_delay=0
            )
        assert fn.await_count == 1


class TestWithDeadline:
    @pytest.mark.asyncio
    async def test_completes_in_time(self):
        assert await with_deadline(asyncio.sleep(0, result="done"), timeout=1) == "done"

    @pytest.mark.asyncio
    async def test_times_out(self):
        with pytest.raises(OperationTimeoutError) as exc_info:
            await with_deadline(asyncio.sleep(5), timeout=0.01, operation="classify")
        assert exc_info.value.operation == "classify"
        assert exc_info.value.timeout == 0.01
