import logging
from collections.abc import Callable
from typing import Any

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

logger = logging.getLogger(__name__)

RetryDecorator = Callable[[Callable[..., Any]], Callable[..., Any]]


def default_http_retry(label: str, attempts: int = 3) -> RetryDecorator:
    """Return a tenacity retry decorator for provider HTTP calls.

    Works on both plain and ``async`` functions. *label* names the provider in
    the warning logged before each retry.
    """

    def _log_retry(retry_state: RetryCallState) -> None:
        logger.warning("Retrying %s (attempt %d): %s", label, retry_state.attempt_number, retry_state.outcome)

    return retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential_jitter(initial=1, max=10),
        retry=retry_if_exception_type((httpx.TransportError, httpx.HTTPStatusError)),
        before_sleep=_log_retry,
        reraise=True,
    )
