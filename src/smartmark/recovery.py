"""Caller-side recovery policies for SmartMark operations.

The classification core never retries. These helpers let a caller layer a
policy (retry / fallback / ignore / fail) over any awaitable operation, with
bounded exponential backoff between retry attempts via tenacity.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .errors import APIError, NetworkError, OperationTimeoutError, get_error_severity

logger = logging.getLogger("smartmark.recovery")

__all__ = [
    "RecoveryStrategy",
    "execute_with_recovery",
    "is_transient_error",
    "with_deadline",
]

T = TypeVar("T")


class RecoveryStrategy(str, Enum):
    """How a caller handles a failed operation."""

    RETRY = "retry"
    FALLBACK = "fallback"
    IGNORE = "ignore"
    FAIL = "fail"


def is_transient_error(error: BaseException) -> bool:
    """True for failures worth retrying: transport, timeout, 429 and 5xx."""
    if isinstance(error, (NetworkError, OperationTimeoutError)):
        return True
    if isinstance(error, APIError):
        return error.is_transient
    return False


def _log_retry(context: str) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        exception = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "operation_retry",
            extra={
                "context": context,
                "attempt": retry_state.attempt_number,
                "wait_seconds": retry_state.next_action.sleep
                if retry_state.next_action
                else None,
                "exception_type": type(exception).__name__,
            },
        )

    return log


async def with_deadline(
    awaitable: Awaitable[T], timeout: float, operation: str = "operation"
) -> T:
    """Race an awaitable against a timer.

    Raises:
        OperationTimeoutError: If the awaitable does not finish in time
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(
            "operation_timeout", extra={"operation": operation, "timeout": timeout}
        )
        raise OperationTimeoutError(
            f"{operation} timed out after {timeout}s",
            operation=operation,
            timeout=timeout,
        ) from e


async def execute_with_recovery(
    fn: Callable[[], Awaitable[T]],
    *,
    context: str = "operation",
    strategy: RecoveryStrategy = RecoveryStrategy.FAIL,
    max_retries: int = 3,
    retry_delay: float = 1.0,
    max_delay: float = 30.0,
    fallback_value: Any = None,
    on_error: Optional[Callable[[BaseException], None]] = None,
) -> Any:
    """Run fn() under a recovery strategy.

    Args:
        fn: Zero-argument coroutine function
        context: Operation name for logs
        strategy: What to do when fn fails
        max_retries: Retries after the first attempt (RETRY only)
        retry_delay: Initial backoff in seconds (RETRY only)
        max_delay: Backoff ceiling in seconds (RETRY only)
        fallback_value: Returned on failure under FALLBACK
        on_error: Called with the final error before it is handled

    Returns:
        fn()'s result, fallback_value (FALLBACK) or None (IGNORE)

    Raises:
        The final error under FAIL, or under RETRY once retries are exhausted
        or the error is not transient

    Example:
        >>> await execute_with_recovery(
        ...     lambda: orchestrator.classify(metadata),
        ...     context="classify",
        ...     strategy=RecoveryStrategy.RETRY,
        ... )
    """
    try:
        if strategy is RecoveryStrategy.RETRY:
            retry_config = AsyncRetrying(
                stop=stop_after_attempt(max_retries + 1),  # Initial + retries
                wait=wait_exponential(
                    multiplier=retry_delay, min=retry_delay, max=max_delay
                ),
                retry=retry_if_exception(is_transient_error),
                before_sleep=_log_retry(context),
                reraise=True,
            )
            async for attempt in retry_config:
                with attempt:
                    return await fn()
        else:
            return await fn()
    except Exception as e:
        error = e

    logger.warning(
        "operation_failed",
        extra={
            "context": context,
            "strategy": strategy.value,
            "error_type": type(error).__name__,
            "error": str(error),
            "severity": get_error_severity(error).value,
        },
    )
    if on_error is not None:
        on_error(error)

    if strategy is RecoveryStrategy.FALLBACK:
        return fallback_value
    if strategy is RecoveryStrategy.IGNORE:
        return None
    raise error
