"""
ConfigLoader module for loading and validating extraction settings from TOML and environment
"""

import os
import tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


class EnvironmentError(Exception):
    """Raised when required environment variables are missing"""
    pass


DEFAULT_ENDPOINTS = (
    '/academicSessions',
    '/orgs',
    '/courses',
    '/classes',
    '/users',
    '/enrollments',
    '/demographics',
)

DEFAULT_PAGE_SIZE = 10000
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_WAIT_SECONDS = 1.0
DEFAULT_RETRYABLE_STATUS_CODES = (429, 502)
DEFAULT_TOTAL_COUNT_HEADER = 'X-Total-Count'
DEFAULT_TIMEOUT_SECONDS = 30.0

CONFIG_PATH_ENV = 'ONEROSTER_CONFIG'
CONSUMER_KEY_ENV = 'ONEROSTER_CONSUMER_KEY'
CONSUMER_SECRET_ENV = 'ONEROSTER_CONSUMER_SECRET'
BASE_URL_ENV = 'ONEROSTER_BASE_URL'


@dataclass(frozen=True)
class Credentials:
    """OAuth1 consumer credentials and the API root they are valid for"""
    consumer_key: str
    consumer_secret: str
    base_url: str

    def __repr__(self) -> str:
        return f"Credentials(consumer_key={self.consumer_key!r}, consumer_secret='***', base_url={self.base_url!r})"


@dataclass(frozen=True)
class ExtractConfig:
    """Complete configuration for one extraction run"""
    credentials: Credentials
    name: str = 'oneroster'
    endpoints: Tuple[str, ...] = DEFAULT_ENDPOINTS
    page_size: int = DEFAULT_PAGE_SIZE
    limit_param: str = 'limit'
    offset_param: str = 'offset'
    total_count_header: str = DEFAULT_TOTAL_COUNT_HEADER
    max_retries: int = DEFAULT_MAX_RETRIES
    base_wait_seconds: float = DEFAULT_BASE_WAIT_SECONDS
    retryable_status_codes: Tuple[int, ...] = DEFAULT_RETRYABLE_STATUS_CODES
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    requests_per_second: Optional[float] = None
    logging: Dict[str, Any] = field(default_factory=dict)


class ConfigLoader:
    """Loads settings from an optional TOML file and credentials from the environment"""

    # Sections a TOML file may contain; anything else is a typo
    KNOWN_SECTIONS = {'api', 'authentication', 'pagination', 'retries', 'http', 'logging'}

    @staticmethod
    def load_config(config_path: Optional[Path] = None) -> ExtractConfig:
        """
        Load the run configuration

        Args:
            config_path: Optional TOML file; falls back to $ONEROSTER_CONFIG, then to defaults

        Returns:
            ExtractConfig with validated credentials and settings

        Raises:
            FileNotFoundError: If an explicit config file doesn't exist
            ConfigurationError: If the TOML is malformed or holds invalid values
            EnvironmentError: If credential environment variables are missing or empty
        """
        if config_path is None and os.getenv(CONFIG_PATH_ENV):
            config_path = Path(os.environ[CONFIG_PATH_ENV])

        config_data = ConfigLoader.load_toml_file(config_path) if config_path else {}
        return ConfigLoader.build_config(config_data)

    @staticmethod
    def load_toml_file(config_path: Path) -> Dict[str, Any]:
        """
        Read and syntax-check a TOML configuration file

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If TOML syntax is invalid or sections are unknown
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}")

        unknown_sections = sorted(set(config_data) - ConfigLoader.KNOWN_SECTIONS)
        if unknown_sections:
            raise ConfigurationError(
                f"Unknown configuration sections: {', '.join(unknown_sections)}"
            )

        return config_data

    @staticmethod
    def build_config(config_data: Dict[str, Any]) -> ExtractConfig:
        """
        Build ExtractConfig from parsed TOML data and the environment

        Args:
            config_data: Parsed TOML data (may be empty)

        Returns:
            Validated ExtractConfig
        """
        api = config_data.get('api', {})
        pagination = config_data.get('pagination', {})
        retries = config_data.get('retries', {})
        http = config_data.get('http', {})

        credentials = ConfigLoader.load_credentials(config_data)

        endpoints = api.get('endpoints', DEFAULT_ENDPOINTS)
        if not isinstance(endpoints, (list, tuple)):
            raise ConfigurationError("api.endpoints must be a list of endpoint paths")
        status_codes = retries.get('retryable_status_codes', DEFAULT_RETRYABLE_STATUS_CODES)
        if not isinstance(status_codes, (list, tuple)) or not all(
                isinstance(code, int) and not isinstance(code, bool) for code in status_codes):
            raise ConfigurationError("retries.retryable_status_codes must be a list of integers")
        requests_per_second = http.get('requests_per_second')
        if requests_per_second is not None and (
                isinstance(requests_per_second, bool) or not isinstance(requests_per_second, (int, float))):
            raise ConfigurationError("http.requests_per_second must be a number")

        base_wait_seconds = ConfigLoader._as_float(
            retries.get('base_wait_seconds', DEFAULT_BASE_WAIT_SECONDS), 'retries.base_wait_seconds'
        )
        timeout_seconds = ConfigLoader._as_float(
            http.get('timeout_seconds', DEFAULT_TIMEOUT_SECONDS), 'http.timeout_seconds'
        )

        config = ExtractConfig(
            credentials=credentials,
            name=api.get('name', 'oneroster'),
            endpoints=tuple(endpoints),
            page_size=pagination.get('page_size', DEFAULT_PAGE_SIZE),
            limit_param=pagination.get('limit_param', 'limit'),
            offset_param=pagination.get('offset_param', 'offset'),
            total_count_header=pagination.get('total_count_header', DEFAULT_TOTAL_COUNT_HEADER),
            max_retries=retries.get('max_retries', DEFAULT_MAX_RETRIES),
            base_wait_seconds=base_wait_seconds,
            retryable_status_codes=tuple(status_codes),
            timeout_seconds=timeout_seconds,
            requests_per_second=requests_per_second,
            logging=config_data.get('logging', {})
        )

        ConfigLoader._validate_settings(config)
        return config

    @staticmethod
    def load_credentials(config_data: Dict[str, Any]) -> Credentials:
        """
        Resolve credentials from environment variables named in the config

        Raises:
            EnvironmentError: If any credential is unset or empty
        """
        api = config_data.get('api', {})
        auth = config_data.get('authentication', {})

        key_env = auth.get('consumer_key_env', CONSUMER_KEY_ENV)
        secret_env = auth.get('consumer_secret_env', CONSUMER_SECRET_ENV)
        base_url_env = api.get('base_url_env', BASE_URL_ENV)

        values = {
            key_env: os.getenv(key_env, ''),
            secret_env: os.getenv(secret_env, ''),
        }
        # An explicit base_url in the file wins over the environment
        if api.get('base_url'):
            base_url = api['base_url']
        else:
            base_url = values[base_url_env] = os.getenv(base_url_env, '')

        missing_vars = [name for name, value in values.items() if not value.strip()]
        if missing_vars:
            raise EnvironmentError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

        return Credentials(
            consumer_key=values[key_env],
            consumer_secret=values[secret_env],
            base_url=base_url.rstrip('/')
        )

    @staticmethod
    def _as_float(value: Any, setting: str) -> float:
        """
        Convert a numeric setting, rejecting strings and booleans

        Raises:
            ConfigurationError: If the value is not a number
        """
        if isinstance(value, (bool, str)):
            raise ConfigurationError(f"{setting} must be a number, got {value!r}")
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{setting} must be a number, got {value!r}")

    @staticmethod
    def _validate_settings(config: ExtractConfig) -> None:
        """
        Validate numeric and list settings

        Raises:
            ConfigurationError: If any setting is out of range
        """
        problems: List[str] = []

        if not config.endpoints:
            problems.append("api.endpoints must not be empty")
        for endpoint in config.endpoints:
            if not isinstance(endpoint, str) or not endpoint.strip('/'):
                problems.append(f"invalid endpoint {endpoint!r}")
        if not isinstance(config.page_size, int) or config.page_size <= 0:
            problems.append("pagination.page_size must be a positive integer")
        if not isinstance(config.max_retries, int) or config.max_retries < 0:
            problems.append("retries.max_retries must be a non-negative integer")
        if config.base_wait_seconds < 0:
            problems.append("retries.base_wait_seconds must not be negative")
        if config.timeout_seconds <= 0:
            problems.append("http.timeout_seconds must be positive")
        if config.requests_per_second is not None and config.requests_per_second <= 0:
            problems.append("http.requests_per_second must be positive")

        if problems:
            raise ConfigurationError(
                f"Invalid configuration values: {'; '.join(problems)}"
            )
