"""
HTTPClient module: the transport underneath signed roster requests
"""

import time
import logging
import requests
from requests.structures import CaseInsensitiveDict
from typing import Any, Dict, Mapping, Optional
from datetime import datetime
from dataclasses import dataclass, field


@dataclass
class FetchResult:
    """Outcome of a single GET (or of a retried sequence of them)"""
    status_code: int
    body: Any
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    attempts: int = 1
    request_timestamp: datetime = field(default_factory=datetime.now)

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class HTTPClient:
    """GET-only HTTP client that reports every failure as a FetchResult"""

    def __init__(self, timeout_seconds: float = 30.0,
                 requests_per_second: Optional[float] = None):
        self.timeout_seconds = timeout_seconds
        self.requests_per_second = requests_per_second
        self.session: Optional[requests.Session] = None
        self.last_request_time: Optional[float] = None
        self.logger = logging.getLogger(__name__)

    def get(self, url: str, headers: Mapping[str, str],
            params: Optional[Dict[str, Any]] = None) -> FetchResult:
        """
        Issue one GET request

        Args:
            url: Base URL without query string
            headers: Request headers, Authorization included
            params: Query parameters

        Returns:
            FetchResult; transport errors become status 500 with the error text as body
        """
        self.apply_rate_limit()

        if self.session is None:
            self.session = requests.Session()

        request_timestamp = datetime.now()
        try:
            response = self.session.get(
                url,
                params=params,
                headers=dict(headers),
                timeout=self.timeout_seconds
            )
        except requests.exceptions.RequestException as e:
            self.logger.error(f"Request to {url} failed: {e}")
            return FetchResult(
                status_code=500,
                body=str(e),
                request_timestamp=request_timestamp
            )
        finally:
            self.last_request_time = time.time()

        try:
            body = response.json()
        except ValueError:
            # Handle non-JSON responses
            body = response.text

        return FetchResult(
            status_code=response.status_code,
            body=body,
            headers=CaseInsensitiveDict(response.headers),
            request_timestamp=request_timestamp
        )

    def apply_rate_limit(self) -> None:
        """
        Sleep just long enough to stay under requests_per_second, if configured
        """
        if self.requests_per_second is None or self.last_request_time is None:
            return

        time_since_last = time.time() - self.last_request_time
        min_delay = 1.0 / self.requests_per_second

        if time_since_last < min_delay:
            time.sleep(min_delay - time_since_last)

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
