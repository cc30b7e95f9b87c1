"""
PaginationStrategy module for offset/limit paging of roster collections
"""

from typing import Any, Dict, List, Optional, Protocol

from .http_client import FetchResult


class PaginationStrategy(Protocol):
    """Protocol for pagination strategies"""

    items_per_page: int

    def get_page_params(self, offset: int) -> Dict[str, Any]:
        """Return query parameters for the page starting at offset"""
        ...

    def extract_total_results(self, response: FetchResult) -> Optional[int]:
        """Extract total result count from response, or None if unavailable"""
        ...

    def extract_records(self, endpoint: str, response: FetchResult) -> List[Any]:
        """Extract the page's records from response"""
        ...


class OffsetLimitPagination:
    """Offset-based pagination with the total count carried in a response header"""

    def __init__(self, config: Dict[str, Any]):
        self.items_per_page = config['items_per_page']
        self.offset_param = config.get('offset_param', 'offset')
        self.limit_param = config.get('limit_param', 'limit')
        self.total_count_header = config.get('total_count_header', 'X-Total-Count')

    def get_page_params(self, offset: int) -> Dict[str, Any]:
        """Limit and offset for the page starting at offset"""
        return {
            self.limit_param: self.items_per_page,
            self.offset_param: offset
        }

    def extract_total_results(self, response: FetchResult) -> Optional[int]:
        """Read the total-count header (case-insensitive); None if absent or not an integer"""
        headers = response.headers
        value = headers.get(self.total_count_header) if headers is not None else None
        if value is None:
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            return None

    @staticmethod
    def resource_key(endpoint: str) -> str:
        """'/academicSessions' -> 'academicSessions'"""
        return endpoint.lstrip('/')

    def extract_records(self, endpoint: str, response: FetchResult) -> List[Any]:
        """
        Records live under the endpoint's resource name, e.g. {"orgs": [...]}

        Missing keys and unexpected body shapes yield an empty page.
        """
        body = response.body
        if not isinstance(body, dict):
            return []
        records = body.get(self.resource_key(endpoint), [])
        if not isinstance(records, list):
            return []
        return records
