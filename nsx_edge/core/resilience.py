"""
Resilience Infrastructure.

Bounded retry for idempotent NSX API reads and the structured retry
callback shared by every retry policy.

Only GET requests are retried. PUT/PATCH/POST/DELETE go out exactly once,
since the NSX Policy API offers no idempotency key for them.

Usage:
    from nsx_edge.core.resilience import get_retrying

    async for attempt in get_retrying(settings.get_retries):
        with attempt:
            response = await client.request("GET", url)
"""

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from nsx_edge.core.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})


class RetryableStatusError(Exception):
    """Internal marker for a GET answered with a transient status code."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        super().__init__(f"HTTP {response.status_code}")


def is_retryable(exc: BaseException) -> bool:
    """Transport failures and gateway/availability statuses are transient."""
    return isinstance(exc, (httpx.TransportError, RetryableStatusError))


def log_retry(retry_state: Any) -> None:
    """Tenacity before_sleep callback that emits structured retry events.

    Pass this as `before_sleep=log_retry` in any retry policy.

    Args:
        retry_state: tenacity.RetryCallState instance
    """
    duration_ms = None
    if retry_state.outcome_timestamp and retry_state.start_time:
        duration_ms = round(
            (retry_state.outcome_timestamp - retry_state.start_time) * 1000
        )

    error = None
    if retry_state.outcome and retry_state.outcome.failed:
        error = str(retry_state.outcome.exception())

    fn_name = getattr(retry_state.fn, "__name__", None) or "nsx_get"

    logger.warning(
        f"Retrying {fn_name} (attempt {retry_state.attempt_number})",
        resilience_event="retry_attempt",
        dependency=fn_name,
        attempt=retry_state.attempt_number,
        duration_ms=duration_ms,
        error=error,
    )


def get_retrying(
    retries: int,
    wait_multiplier: float = 1.0,
    max_wait: float = 10.0,
) -> AsyncRetrying:
    """Create the retry policy for GET requests.

    Args:
        retries: Extra attempts after the first one. 0 disables retrying.
        wait_multiplier: Seconds for the first backoff, doubled per attempt.
        max_wait: Upper bound in seconds for the backoff.

    Returns:
        AsyncRetrying that re-raises the last error once attempts run out
    """
    return AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_exponential(multiplier=wait_multiplier, max=max_wait),
        retry=retry_if_exception(is_retryable),
        before_sleep=log_retry,
        reraise=True,
    )
