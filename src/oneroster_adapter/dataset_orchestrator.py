"""
DatasetOrchestrator module for high-level coordination of a full roster pull
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .config_loader import DEFAULT_ENDPOINTS, ExtractConfig
from .http_client import HTTPClient
from .manifest_generator import ManifestGenerator
from .oauth_signer import OAuth1Signer
from .pagination_strategy import OffsetLimitPagination
from .paginated_fetcher import PaginatedFetcher
from .retry_policy import RetryPolicy


class DatasetOrchestrator:
    """
    High-level coordinator for a roster snapshot

    Pulls each endpoint in declared order, one after the other, and collects
    the results into a single mapping of endpoint -> records. A failed
    endpoint keeps whatever it collected and the run moves on.
    """

    def __init__(
        self,
        fetcher: PaginatedFetcher,
        endpoints: Sequence[str] = DEFAULT_ENDPOINTS,
        manifest_generator: Optional[ManifestGenerator] = None,
        data_source: str = 'oneroster'
    ):
        """
        Initialise DatasetOrchestrator with dependency injection

        Args:
            fetcher: Paginated fetcher used for every endpoint
            endpoints: Endpoint paths, pulled in this order
            manifest_generator: Run summary component
            data_source: Name recorded in the manifest
        """
        self.fetcher = fetcher
        self.endpoints = list(endpoints)
        self.manifest_generator = manifest_generator or ManifestGenerator()
        self.data_source = data_source

        self.logger = logging.getLogger(__name__)
        self.processing_results: Dict[str, Any] = {}
        self.manifest: Optional[Dict[str, Any]] = None

    @classmethod
    def from_config(cls, config: ExtractConfig) -> 'DatasetOrchestrator':
        """Wire signer, transport, retry policy and pagination from configuration"""
        credentials = config.credentials
        fetcher = PaginatedFetcher(
            base_url=credentials.base_url,
            signer=OAuth1Signer(credentials),
            http_client=HTTPClient(
                timeout_seconds=config.timeout_seconds,
                requests_per_second=config.requests_per_second
            ),
            retry_policy=RetryPolicy(
                max_retries=config.max_retries,
                base_wait=config.base_wait_seconds,
                retryable_status_codes=config.retryable_status_codes
            ),
            pagination=OffsetLimitPagination({
                'items_per_page': config.page_size,
                'limit_param': config.limit_param,
                'offset_param': config.offset_param,
                'total_count_header': config.total_count_header
            })
        )
        return cls(fetcher, endpoints=config.endpoints, data_source=config.name)

    def generate_run_id(self) -> str:
        """
        Generate unique identifier for this run, combining source and timestamp
        """
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        unique_suffix = str(uuid.uuid4())[:8]
        return f"{self.data_source}_{timestamp}_{unique_suffix}"

    def pull_all(self) -> Dict[str, List[Any]]:
        """
        Pull every configured endpoint sequentially

        Returns:
            Mapping of endpoint path to its records, in endpoint order
        """
        run_id = self.generate_run_id()
        self.processing_results = {
            'run_id': run_id,
            'data_source': self.data_source,
            'start_time': datetime.now(timezone.utc),
            'end_time': None,
            'endpoints': []
        }
        self.logger.info(f"Starting run {run_id} for {len(self.endpoints)} endpoints")

        dataset: Dict[str, List[Any]] = {}
        try:
            for endpoint in self.endpoints:
                self.logger.info(f"Pulling {endpoint}")
                dataset[endpoint] = self.fetcher.fetch_all(endpoint)

                if self.fetcher.last_fetch_summary is not None:
                    self.processing_results['endpoints'].append(self.fetcher.last_fetch_summary)
        finally:
            self.fetcher.http_client.close_connection()

        self.processing_results['end_time'] = datetime.now(timezone.utc)
        self.manifest = self.manifest_generator.generate_manifest_data(self.processing_results)

        summary = self.manifest['processing_summary']
        self.logger.info(
            f"Run {run_id} finished: {summary['total_records_retrieved']} records, "
            f"{summary['completed_endpoints']}/{summary['total_endpoints']} endpoints complete"
        )
        if summary['incomplete_endpoints']:
            self.logger.warning(
                f"Incomplete endpoints: {', '.join(summary['incomplete_endpoints'])}"
            )

        return dataset
