"""Retry with exponential backoff around whole reconciliation runs."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.config import RetrySettings, retry_settings
from app.errors import RetryExhaustedError, is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        f"Attempt {retry_state.attempt_number} of {retry_state.fn!r} failed: {exc}; retrying"
    )


async def run_with_retry(
    operation: str,
    func: Callable[..., Awaitable[T]],
    *args,
    retry: RetrySettings | None = None,
    **kwargs,
) -> T:
    """Run ``func`` and retry retryable failures with exponential backoff.

    Non-retryable errors propagate immediately. Once the attempt budget is
    spent a RetryExhaustedError is raised, chained to the last failure.
    """
    retry = retry or retry_settings
    if not retry.enabled:
        return await func(*args, **kwargs)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(retry.max_attempts),
        wait=wait_exponential(
            multiplier=retry.initial_interval,
            exp_base=retry.multiplier,
            max=retry.max_interval,
        ),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_retry,
    )

    try:
        return await retrying(func, *args, **kwargs)
    except RetryError as e:
        last = e.last_attempt.exception()
        logger.error(f"Operation '{operation}' failed after {retry.max_attempts} attempts: {last}")
        raise RetryExhaustedError(operation, retry.max_attempts, str(last)) from last
