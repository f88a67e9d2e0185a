"""Transient-error classification and bounded exponential-backoff retry."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from personabrief.errors import OperationFailedError
from personabrief.events import EventType, PipelineObserver, Severity, emit_event

T = TypeVar("T")

# Markers of conditions that plausibly clear up on their own
TRANSIENT_MARKERS = (
    "timeout",
    "network",
    "connection",
    "econnrefused",
    "enotfound",
    "etimedout",
    "socket hang up",
    "temporarily unavailable",
)

# Markers of failures that stay broken for the lifetime of the process.
# These win over TRANSIENT_MARKERS.
NON_RETRYABLE_MARKERS = (
    "rate limit",
    "quota",
    "authentication",
    "api key",
    "invalid",
    "not found",
    "private",
    "inaccessible",
    "validation",
)

DEFAULT_MAX_RETRIES = 2

# 1s, 2s, 4s, ... between attempts
BACKOFF_WAIT = wait_exponential(multiplier=1, exp_base=2)

SleepFunc = Callable[[float], Awaitable[None]]


def is_transient_error(error: BaseException) -> bool:
    """Return True if the error looks temporary and is worth retrying."""
    message = str(error).lower()

    if any(marker in message for marker in NON_RETRYABLE_MARKERS):
        return False

    return any(marker in message for marker in TRANSIENT_MARKERS)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    *,
    sleep: SleepFunc = asyncio.sleep,
    observer: Optional[PipelineObserver] = None,
) -> T:
    """
    Run an async operation, retrying transient failures with exponential backoff.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt
        operation_name: Name used in events and error messages
        max_retries: Retries after the first attempt (2 means up to 3 calls)
        sleep: Awaitable delay, replaceable in tests
        observer: Receives retry_scheduled / operation_failed events

    Returns:
        The operation's result from the first successful attempt

    Raises:
        OperationFailedError: chained from the last error, on a permanent
            error or once the retry budget is spent
    """
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")

    total_attempts = max_retries + 1

    def announce_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception()
        delay = retry_state.next_action.sleep
        emit_event(
            observer,
            EventType.RETRY_SCHEDULED,
            f"{operation_name} failed (attempt {retry_state.attempt_number}/{total_attempts}): "
            f"{error}. Retrying in {delay * 1000:.0f}ms...",
            severity=Severity.WARN,
            operation=operation_name,
            attempt=retry_state.attempt_number,
            max_attempts=total_attempts,
            delay_ms=int(delay * 1000),
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(total_attempts),
        wait=BACKOFF_WAIT,
        retry=retry_if_exception(is_transient_error),
        sleep=sleep,
        before_sleep=announce_retry,
        reraise=True,
    )

    attempts = 0
    try:
        async for attempt in retrying:
            with attempt:
                attempts = attempt.retry_state.attempt_number
                return await operation()
    except Exception as error:
        retryable = is_transient_error(error)
        emit_event(
            observer,
            EventType.OPERATION_FAILED,
            f"{operation_name} failed after {attempts} attempt(s): {error}",
            severity=Severity.ERROR,
            operation=operation_name,
            attempts=attempts,
            retryable=retryable,
        )
        raise OperationFailedError(operation_name, attempts, error) from error
