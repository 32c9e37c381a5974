# storefront/utils/retry.py
import logging

import redis
import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _transient_http_error(exc: BaseException) -> bool:
    # 4xx from the gateway (bad number, bad credentials) will not get better on retry
    if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code == 429 or exc.response.status_code >= 500
    return False


def http_retry(attempts: int = 3):
    """Outbound messaging calls: connection problems, timeouts, 429 and 5xx."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception(_transient_http_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def redis_retry(attempts: int = 3):
    """Broadcast publishes, short waits since the request is still in flight."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type((redis.ConnectionError, redis.TimeoutError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
