"""
Test suite for OAuth1Signer component
Following TDD approach with AAA pattern and descriptive naming
"""

import re
import base64
import pytest
from urllib.parse import unquote_plus
from oneroster_adapter.config_loader import Credentials
from oneroster_adapter.oauth_signer import (
    OAuth1Signer, percent_encode, generate_nonce, split_url,
    signature_base_string, hmac_sha256_signature, NONCE_ALPHABET
)


BASE_URL = 'https://example.org/ims/oneroster/v1p1'
FIXED_TIMESTAMP = 1700000000
FIXED_NONCE = 'abcDEF1234'

# Independently computed: printf '%s' "$BASE" | openssl dgst -sha256 -hmac 'secret&' -binary | base64
EXPECTED_BASE_STRING = (
    'GET&https%3A%2F%2Fexample.org%2Fims%2Foneroster%2Fv1p1%2Forgs'
    '&limit%3D2%26oauth_consumer_key%3Dkey%26oauth_nonce%3DabcDEF1234'
    '%26oauth_signature_method%3DHMAC-SHA256%26oauth_timestamp%3D1700000000%26offset%3D0'
)
EXPECTED_SIGNATURE = 'CKVm66bu6GoKOxwBTWG2FexGQdg1gK6QbM8/hw61Wvk='


def make_signer(secret='secret', timestamp=FIXED_TIMESTAMP, nonce=FIXED_NONCE):
    credentials = Credentials(consumer_key='key', consumer_secret=secret, base_url=BASE_URL)
    return OAuth1Signer(credentials, clock=lambda: timestamp, nonce_factory=lambda: nonce)


def parse_header(header):
    assert header.startswith('OAuth ')
    return re.findall(r'(\w+)="([^"]*)"', header[len('OAuth '):])


class TestOAuth1Signer:
    """Test suite for OAuth1 header construction"""

    def test_sign_with_pinned_time_and_nonce_matches_known_signature(self):
        """
        Test that a fixed request produces the independently computed signature
        """
        # Arrange
        signer = make_signer()

        # Act
        header, params = signer.sign('GET', f'{BASE_URL}/orgs?limit=2&offset=0')

        # Assert
        pairs = dict(parse_header(header))
        assert unquote_plus(pairs['oauth_signature']) == EXPECTED_SIGNATURE
        assert params == {'limit': '2', 'offset': '0'}

    def test_sign_called_twice_with_pinned_inputs_is_deterministic(self):
        """
        Test that pinned clock and nonce give identical headers
        """
        # Arrange
        signer = make_signer()
        url = f'{BASE_URL}/users?limit=10000&offset=20000'

        # Act
        first, _ = signer.sign('GET', url)
        second, _ = signer.sign('GET', url)

        # Assert
        assert first == second

    def test_sign_header_lists_oauth_parameters_in_insertion_order(self):
        """
        Test header structure: OAuth prefix, comma-space separated, signature last
        """
        # Arrange
        signer = make_signer()

        # Act
        header, _ = signer.sign('GET', f'{BASE_URL}/orgs?limit=2&offset=0')

        # Assert
        keys = [key for key, _ in parse_header(header)]
        assert keys == [
            'oauth_consumer_key',
            'oauth_signature_method',
            'oauth_timestamp',
            'oauth_nonce',
            'oauth_signature'
        ]
        assert ', oauth_signature_method="HMAC-SHA256", ' in header
        assert 'oauth_timestamp="1700000000"' in header
        assert 'oauth_nonce="abcDEF1234"' in header

    def test_sign_header_percent_encodes_signature_value(self):
        """
        Test that base64 characters '/', '+' and '=' are escaped inside the header
        """
        # Arrange
        signer = make_signer()

        # Act
        header, _ = signer.sign('GET', f'{BASE_URL}/orgs?limit=2&offset=0')

        # Assert
        assert 'oauth_signature="CKVm66bu6GoKOxwBTWG2FexGQdg1gK6QbM8%2Fhw61Wvk%3D"' in header

    def test_sign_with_lowercase_method_signs_uppercase(self):
        """
        Test that the method is upper-cased in the base string
        """
        # Arrange
        signer = make_signer()
        url = f'{BASE_URL}/orgs?limit=2&offset=0'

        # Act
        lower, _ = signer.sign('get', url)
        upper, _ = signer.sign('GET', url)

        # Assert
        assert lower == upper

    def test_sign_with_new_timestamp_and_nonce_changes_signature(self):
        """
        Test that each attempt gets a different signature when time or nonce moves
        """
        # Arrange
        url = f'{BASE_URL}/orgs?limit=2&offset=0'

        # Act
        original, _ = make_signer().sign('GET', url)
        later, _ = make_signer(timestamp=FIXED_TIMESTAMP + 1).sign('GET', url)
        other_nonce, _ = make_signer(nonce='zzzzzzzzzz').sign('GET', url)

        # Assert
        assert len({original, later, other_nonce}) == 3

    def test_sign_with_extra_params_merges_and_returns_them(self):
        """
        Test that extra parameters are signed and handed back for sending
        """
        # Arrange
        signer = make_signer()

        # Act
        via_extra, params = signer.sign('GET', f'{BASE_URL}/orgs', {'limit': 2, 'offset': 0})
        via_url, _ = signer.sign('GET', f'{BASE_URL}/orgs?limit=2&offset=0')

        # Assert
        assert params == {'limit': '2', 'offset': '0'}
        assert via_extra == via_url

    def test_sign_with_default_sources_uses_current_time_and_random_nonce(self):
        """
        Test the unpinned signer produces a numeric timestamp and a 10 char nonce
        """
        # Arrange
        signer = OAuth1Signer(Credentials('key', 'secret', BASE_URL))

        # Act
        header, _ = signer.sign('GET', f'{BASE_URL}/orgs')

        # Assert
        pairs = dict(parse_header(header))
        assert pairs['oauth_timestamp'].isdigit()
        assert len(pairs['oauth_nonce']) == 10


class TestSignatureBaseString:
    """Test suite for base string and HMAC helpers"""

    def test_signature_base_string_matches_expected_layout(self):
        """
        Test method, encoded URL and encoded sorted parameter string
        """
        # Arrange
        params = {
            'offset': '0',
            'limit': '2',
            'oauth_consumer_key': 'key',
            'oauth_signature_method': 'HMAC-SHA256',
            'oauth_timestamp': '1700000000',
            'oauth_nonce': 'abcDEF1234'
        }

        # Act
        result = signature_base_string('GET', f'{BASE_URL}/orgs', params)

        # Assert
        assert result == EXPECTED_BASE_STRING

    def test_signature_base_string_ignores_insertion_order(self):
        """
        Test that parameter sets differing only in order give the same base string
        """
        # Arrange
        forward = {'a': '1', 'b': '2', 'c': '3'}
        backward = {'c': '3', 'b': '2', 'a': '1'}

        # Act & Assert
        assert (signature_base_string('GET', BASE_URL, forward)
                == signature_base_string('GET', BASE_URL, backward))

    def test_signature_base_string_sorts_by_codepoint(self):
        """
        Test that upper-case keys sort before lower-case ones
        """
        # Arrange
        params = {'b': '1', 'B': '2', 'a': '3'}

        # Act
        result = signature_base_string('GET', BASE_URL, params)

        # Assert
        assert result.endswith(percent_encode('B=2&a=3&b=1'))

    def test_hmac_sha256_signature_with_known_input_returns_known_output(self):
        """
        Test HMAC against the openssl-computed value
        """
        # Act
        result = hmac_sha256_signature(EXPECTED_BASE_STRING, 'secret')

        # Assert
        assert result == EXPECTED_SIGNATURE
        assert len(base64.b64decode(result)) == 32

    def test_hmac_sha256_signature_encodes_secret_in_key(self):
        """
        Test that secrets with reserved characters are escaped before keying
        """
        # Act
        plain = hmac_sha256_signature('base', 'a&b')
        pre_escaped = hmac_sha256_signature('base', 'a%26b')

        # Assert
        assert plain != pre_escaped


class TestPercentEncoding:
    """Test suite for form encoding helpers"""

    @pytest.mark.parametrize('value,expected', [
        ('a b', 'a+b'),
        ('a&b', 'a%26b'),
        ('a=b', 'a%3Db'),
        ('a/b', 'a%2Fb'),
        ('é', '%C3%A9'),
        ('-._~', '-._~'),
        ('', ''),
    ])
    def test_percent_encode_escapes_reserved_characters(self, value, expected):
        """
        Test the form-encoding table for the characters that matter in signing
        """
        assert percent_encode(value) == expected

    def test_percent_encode_round_trips_through_form_decoding(self):
        """
        Test that encoded values decode back to the original
        """
        # Arrange
        value = "filter=name='Ümit & Zoë' AND x=1"

        # Act & Assert
        assert unquote_plus(percent_encode(value)) == value

    def test_split_url_decodes_query_values_consistently_with_encoder(self):
        """
        Test that a value encoded into the URL is decoded back for signing
        """
        # Arrange
        value = 'status=active & role=teacher é'
        url = f'{BASE_URL}/users?filter={percent_encode(value)}&limit=5'

        # Act
        base_url, params = split_url(url)

        # Assert
        assert base_url == f'{BASE_URL}/users'
        assert params == {'filter': value, 'limit': '5'}

    def test_split_url_keeps_blank_values(self):
        """
        Test that empty query values are still signed
        """
        # Act
        _, params = split_url(f'{BASE_URL}/orgs?fields=&limit=1')

        # Assert
        assert params == {'fields': '', 'limit': '1'}

    def test_generate_nonce_returns_ten_alphanumeric_characters(self):
        """
        Test nonce length and alphabet
        """
        # Act
        nonces = [generate_nonce() for _ in range(50)]

        # Assert
        assert all(len(n) == 10 for n in nonces)
        assert all(set(n) <= set(NONCE_ALPHABET) for n in nonces)
        assert len(set(nonces)) > 1
