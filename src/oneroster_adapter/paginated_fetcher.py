"""
PaginatedFetcher module: pulls one roster collection page by page until it is complete
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from .http_client import HTTPClient, FetchResult
from .oauth_signer import OAuth1Signer
from .pagination_strategy import PaginationStrategy
from .retry_policy import RetryPolicy


class PaginatedFetcher:
    """
    Fetches every record of an endpoint with signed, retried offset/limit requests

    Pages are requested strictly in order since each offset depends on what has
    already been accumulated. A failed page ends the endpoint: whatever was
    collected up to that point is returned and nothing is raised.
    """

    def __init__(self, base_url: str, signer: OAuth1Signer, http_client: HTTPClient,
                 retry_policy: RetryPolicy, pagination: PaginationStrategy):
        self.base_url = base_url.rstrip('/')
        self.signer = signer
        self.http_client = http_client
        self.retry_policy = retry_policy
        self.pagination = pagination
        self.logger = logging.getLogger(__name__)
        self.last_fetch_summary: Optional[Dict[str, Any]] = None

    def fetch_page(self, endpoint: str, offset: int) -> FetchResult:
        """
        Fetch a single page, re-signing the request on every retry attempt

        Args:
            endpoint: Resource path such as '/orgs'
            offset: Index of the first record of the page

        Returns:
            Final FetchResult after retry resolution
        """
        resource_url = f"{self.base_url}{endpoint}"
        signed_url = f"{resource_url}?{urlencode(self.pagination.get_page_params(offset))}"

        def attempt() -> FetchResult:
            authorization, params = self.signer.sign('GET', signed_url)
            headers = {
                'Authorization': authorization,
                'Accept': 'application/json'
            }
            return self.http_client.get(resource_url, headers, params)

        return self.retry_policy.execute_with_retry(attempt)

    def fetch_all(self, endpoint: str) -> List[Any]:
        """
        Fetch the complete collection for an endpoint

        Args:
            endpoint: Resource path such as '/orgs'

        Returns:
            Records in server order; partial if a page failed
        """
        records: List[Any] = []
        total_results: Optional[int] = None
        offset = 0
        summary = {
            'endpoint': endpoint,
            'status': 'processing',
            'complete': False,
            'status_code': None,
            'pages_processed': 0,
            'records_retrieved': 0,
            'total_results': None,
            'error': None,
            'start_time': datetime.now(timezone.utc),
            'end_time': None
        }
        self.last_fetch_summary = summary

        while True:
            response = self.fetch_page(endpoint, offset)
            summary['status_code'] = response.status_code

            if response.status_code != 200:
                self.logger.error(
                    f"Fetching {endpoint} at offset {offset} failed with status "
                    f"{response.status_code}: {response.body}"
                )
                summary['status'] = 'failed' if not records else 'partial'
                summary['error'] = str(response.body)
                break

            page_records = self.pagination.extract_records(endpoint, response)

            if total_results is None:
                total_results = self.pagination.extract_total_results(response)
                if total_results is None:
                    total_results = len(page_records)
                    self.logger.info(
                        f"No usable total count for {endpoint}; treating first page of "
                        f"{total_results} records as complete"
                    )
                summary['total_results'] = total_results
            elif not page_records:
                self.logger.warning(
                    f"Empty page for {endpoint} at offset {offset} with "
                    f"{len(records)}/{total_results} records; stopping"
                )
                summary['status'] = 'partial'
                break

            records.extend(page_records)
            summary['pages_processed'] += 1
            summary['records_retrieved'] = len(records)
            self.logger.info(
                f"Fetched {len(page_records)} records from {endpoint} at offset {offset} "
                f"({len(records)}/{total_results})"
            )

            if len(records) >= total_results:
                summary['status'] = 'completed'
                summary['complete'] = True
                break

            offset += self.pagination.items_per_page

        summary['end_time'] = datetime.now(timezone.utc)
        return records
