"""
RetryPolicy module: bounded exponential backoff with jitter for transient HTTP statuses
"""

import time
import random
import logging
from typing import Callable, Iterable, Optional

from .http_client import FetchResult


MAX_RETRIES_EXCEEDED = "Max retries exceeded"


class RetryPolicy:
    """Retries 429/502 responses; every other status is returned on the first attempt"""

    # HTTP status codes that should trigger retries
    RETRYABLE_STATUS_CODES = frozenset({429, 502})

    def __init__(self, max_retries: int = 3, base_wait: float = 1.0,
                 retryable_status_codes: Iterable[int] = RETRYABLE_STATUS_CODES,
                 sleep: Optional[Callable[[float], None]] = None,
                 jitter: Optional[Callable[[float, float], float]] = None):
        self.max_retries = max_retries
        self.base_wait = base_wait
        self.retryable_status_codes = frozenset(retryable_status_codes)
        self.sleep = sleep or time.sleep
        self.jitter = jitter or random.uniform
        self.logger = logging.getLogger(__name__)

    def backoff_delay(self, retry_count: int) -> float:
        """Seconds to wait before retry number retry_count + 1"""
        return self.base_wait * (2 ** retry_count) + self.jitter(0, 1)

    def execute_with_retry(self, attempt_fn: Callable[[], FetchResult]) -> FetchResult:
        """
        Run attempt_fn until it succeeds, fails permanently, or retries run out

        Args:
            attempt_fn: Performs one complete attempt; called again for every retry,
                so anything attempt-specific (signatures) must be built inside it

        Returns:
            The 200 result, the first non-retryable result, or a synthetic
            500 result once max_retries retries have all come back retryable
        """
        retry_count = 0

        while True:
            result = attempt_fn()
            result.attempts = retry_count + 1

            if result.status_code == 200:
                return result

            if result.status_code not in self.retryable_status_codes:
                return result

            if retry_count >= self.max_retries:
                self.logger.error(
                    f"Giving up after {retry_count + 1} attempts; last status {result.status_code}"
                )
                return FetchResult(
                    status_code=500,
                    body=MAX_RETRIES_EXCEEDED,
                    headers=result.headers,
                    attempts=retry_count + 1
                )

            delay = self.backoff_delay(retry_count)
            self.logger.warning(
                f"Transient status {result.status_code}, retry {retry_count + 1}/{self.max_retries} in {delay:.2f}s"
            )
            self.sleep(delay)
            retry_count += 1
