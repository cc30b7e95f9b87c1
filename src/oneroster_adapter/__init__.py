"""
OneRoster extraction client
Signs requests with OAuth1 HMAC-SHA256, pages through roster collections and
assembles a full snapshot of the configured endpoints
"""

from .config_loader import ConfigLoader, ConfigurationError, EnvironmentError, Credentials, ExtractConfig
from .oauth_signer import OAuth1Signer
from .http_client import HTTPClient, FetchResult
from .retry_policy import RetryPolicy
from .pagination_strategy import OffsetLimitPagination
from .paginated_fetcher import PaginatedFetcher
from .dataset_orchestrator import DatasetOrchestrator
from .manifest_generator import ManifestGenerator

__all__ = [
    'ConfigLoader',
    'ConfigurationError',
    'EnvironmentError',
    'Credentials',
    'ExtractConfig',
    'OAuth1Signer',
    'HTTPClient',
    'FetchResult',
    'RetryPolicy',
    'OffsetLimitPagination',
    'PaginatedFetcher',
    'DatasetOrchestrator',
    'ManifestGenerator'
]
