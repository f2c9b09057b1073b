"""Retry helpers for SharePoint calls.

Provides reusable retry strategies that handle throttling and transient
timeouts. SharePoint throttles with 429 Too Many Requests and, under
service-wide load, 503 Server Too Busy; both may carry Retry-After.
"""

import httpx
from tenacity import retry_if_exception, wait_exponential

THROTTLING_STATUS_CODES = (429, 503)


def should_retry_on_rate_limit(exception: BaseException) -> bool:
    """Check if exception is a retryable throttling response (429 or 503).

    Args:
        exception: Exception to check

    Returns:
        True if this is a throttled response that should be retried
    """
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in THROTTLING_STATUS_CODES
    return False


def should_retry_on_timeout(exception: BaseException) -> bool:
    """Check if exception is a timeout that should be retried."""
    return isinstance(exception, (httpx.ConnectTimeout, httpx.ReadTimeout))


def should_retry_on_rate_limit_or_timeout(exception: BaseException) -> bool:
    """Combined retry condition for rate limits and timeouts.

    Example:
        @retry(
            stop=stop_after_attempt(3),
            retry=retry_if_rate_limit_or_timeout,
            wait=wait_rate_limit_with_backoff,
            reraise=True,
        )
        async def _send(self, method, url, ...):
            ...
    """
    return should_retry_on_rate_limit(exception) or should_retry_on_timeout(exception)


def wait_rate_limit_with_backoff(retry_state) -> float:
    """Wait strategy that respects Retry-After when throttled, exponential backoff otherwise.

    SharePoint sends Retry-After on throttled responses. The wait is at least
    one second and capped at 120 seconds; without the header, backoff is
    exponential.

    Args:
        retry_state: tenacity retry state

    Returns:
        Number of seconds to wait before retry
    """
    exception = retry_state.outcome.exception()

    if should_retry_on_rate_limit(exception):
        retry_after = exception.response.headers.get("Retry-After")
        if retry_after:
            try:
                wait_seconds = max(float(retry_after), 1.0)
                return min(wait_seconds, 120.0)
            except (ValueError, TypeError):
                pass

        return wait_exponential(multiplier=1, min=2, max=30)(retry_state)

    return wait_exponential(multiplier=1, min=2, max=10)(retry_state)


retry_if_rate_limit_or_timeout = retry_if_exception(should_retry_on_rate_limit_or_timeout)
