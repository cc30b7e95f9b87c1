"""
OAuth1Signer module for building HMAC-SHA256 signed Authorization headers
"""

import base64
import hashlib
import hmac
import logging
import random
import string
import time
from typing import Callable, Dict, Optional, Tuple
from urllib.parse import parse_qsl, quote_plus, urlsplit, urlunsplit

from .config_loader import Credentials


SIGNATURE_METHOD = 'HMAC-SHA256'
NONCE_LENGTH = 10
NONCE_ALPHABET = string.digits + string.ascii_uppercase + string.ascii_lowercase

logger = logging.getLogger(__name__)


def percent_encode(value: str) -> str:
    """Form-encode a value (space becomes '+', everything outside the unreserved set is escaped)"""
    return quote_plus(str(value), safe='')


def generate_nonce(length: int = NONCE_LENGTH) -> str:
    """Random alphanumeric token; unique per request, not a secret"""
    return ''.join(random.choices(NONCE_ALPHABET, k=length))


def split_url(url: str) -> Tuple[str, Dict[str, str]]:
    """
    Split a URL into its base (no query or fragment) and decoded query parameters

    Repeated keys collapse to the last value.
    """
    parts = urlsplit(url)
    base_url = urlunsplit((parts.scheme, parts.netloc, parts.path, '', ''))
    return base_url, dict(parse_qsl(parts.query, keep_blank_values=True))


def signature_base_string(method: str, base_url: str, params: Dict[str, str]) -> str:
    """
    Build the OAuth1 signature base string

    Pairs are sorted by key so the result does not depend on insertion order.
    """
    normalised = '&'.join(
        f"{key}={percent_encode(params[key])}" for key in sorted(params)
    )
    return '&'.join([
        method.upper(),
        percent_encode(base_url),
        percent_encode(normalised)
    ])


def hmac_sha256_signature(base_string: str, consumer_secret: str, token_secret: str = '') -> str:
    """Base64 HMAC-SHA256 of the base string keyed by the encoded consumer secret"""
    key = f"{percent_encode(consumer_secret)}&{token_secret}"
    digest = hmac.new(key.encode('utf-8'), base_string.encode('utf-8'), hashlib.sha256).digest()
    return base64.b64encode(digest).decode('ascii')


class OAuth1Signer:
    """Signs requests with two-legged OAuth1 (consumer key and secret, no token)"""

    def __init__(self, credentials: Credentials,
                 clock: Callable[[], float] = time.time,
                 nonce_factory: Callable[[], str] = generate_nonce):
        self.credentials = credentials
        self.clock = clock
        self.nonce_factory = nonce_factory

    def oauth_parameters(self) -> Dict[str, str]:
        """Fresh OAuth protocol parameters; timestamp and nonce change on every call"""
        return {
            'oauth_consumer_key': self.credentials.consumer_key,
            'oauth_signature_method': SIGNATURE_METHOD,
            'oauth_timestamp': str(int(self.clock())),
            'oauth_nonce': self.nonce_factory(),
        }

    def sign(self, method: str, url: str,
             extra_params: Optional[Dict[str, str]] = None) -> Tuple[str, Dict[str, str]]:
        """
        Build the Authorization header for one request attempt

        Args:
            method: HTTP method
            url: Full request URL, query string included
            extra_params: Additional query parameters sent alongside the URL's own

        Returns:
            Tuple of (Authorization header value, query parameters to send).
            The caller must send the returned parameters with the base URL
            so the server sees exactly what was signed.
        """
        base_url, url_params = split_url(url)
        if extra_params:
            url_params.update({key: str(value) for key, value in extra_params.items()})

        oauth_params = self.oauth_parameters()
        base_string = signature_base_string(method, base_url, {**url_params, **oauth_params})
        logger.debug(f"Signature base string: {base_string}")

        oauth_params['oauth_signature'] = hmac_sha256_signature(
            base_string, self.credentials.consumer_secret
        )

        header = 'OAuth ' + ', '.join(
            f'{key}="{percent_encode(value)}"' for key, value in oauth_params.items()
        )
        return header, url_params
