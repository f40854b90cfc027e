"""Tests for the per-provider bearer token cache and the Amadeus token exchange."""

from unittest.mock import Mock, patch

import pytest
import requests
from pydantic import SecretStr

from app.core.config import settings
from app.core.exceptions import AuthenticationError, UpstreamUnavailableError
from app.providers.auth import AuthTokenCache, fetch_amadeus_token


@pytest.fixture
def fetch_token():
    return Mock(side_effect=[("token-1", 1799), ("token-2", 1799), ("token-3", 1799)])


@pytest.fixture
def token_cache(fake_redis, fetch_token):
    return AuthTokenCache(fake_redis, provider="amadeus", fetch_token=fetch_token)


class TestAuthTokenCache:
    def test_miss_fetches_and_caches(self, token_cache, fake_redis, fetch_token):
        assert token_cache.get() == "token-1"
        assert fetch_token.call_count == 1
        assert fake_redis.get("auth-token:amadeus") == "token-1"

    def test_two_gets_within_ttl_fetch_once(self, token_cache, fetch_token):
        first = token_cache.get()
        second = token_cache.get()
        assert first == second == "token-1"
        assert fetch_token.call_count == 1

    def test_invalidate_forces_fresh_fetch(self, token_cache, fake_redis, fetch_token):
        token_cache.get()
        token_cache.invalidate()
        assert fake_redis.get("auth-token:amadeus") is None

        assert token_cache.get() == "token-2"
        assert fetch_token.call_count == 2

    def test_expired_slot_refetches(self, token_cache, fake_redis, fetch_token):
        token_cache.get()
        fake_redis.expire_all()
        assert token_cache.get() == "token-2"
        assert fetch_token.call_count == 2

    def test_ttl_shorter_than_upstream_expiry(self, token_cache, fake_redis):
        """A 30 minute token is cached for 25 minutes."""
        token_cache.get()
        assert fake_redis.ttls["auth-token:amadeus"] == 1500

    def test_token_no_longer_than_ttl_loses_margin(self, fake_redis):
        cache = AuthTokenCache(fake_redis, "amadeus", fetch_token=lambda: ("exact", 1500))
        cache.get()
        assert fake_redis.ttls["auth-token:amadeus"] == 1200

    def test_ttl_respects_safety_margin_for_short_tokens(self, fake_redis):
        cache = AuthTokenCache(fake_redis, "amadeus", fetch_token=lambda: ("short", 600))
        cache.get()
        assert fake_redis.ttls["auth-token:amadeus"] == 300

    def test_token_too_short_lived_is_not_cached(self, fake_redis):
        fetch = Mock(return_value=("brief", 120))
        cache = AuthTokenCache(fake_redis, "amadeus", fetch_token=fetch)
        assert cache.get() == "brief"
        assert fake_redis.get("auth-token:amadeus") is None
        cache.get()
        assert fetch.call_count == 2

    def test_one_slot_per_provider(self, fake_redis):
        amadeus = AuthTokenCache(fake_redis, "amadeus", fetch_token=lambda: ("a", 1799))
        other = AuthTokenCache(fake_redis, "other", fetch_token=lambda: ("b", 1799))
        amadeus.get()
        other.get()
        amadeus.invalidate()
        assert fake_redis.get("auth-token:amadeus") is None
        assert fake_redis.get("auth-token:other") == "b"


class TestFetchAmadeusToken:
    @patch("app.providers.auth.requests.post")
    def test_client_credentials_exchange(self, mock_post):
        mock_post.return_value = Mock(
            status_code=200, json=Mock(return_value={"access_token": "abc", "expires_in": 1799})
        )

        token, expires_in = fetch_amadeus_token(
            base_url="https://test.api.amadeus.com", client_id="id", client_secret="secret", timeout=5
        )

        assert (token, expires_in) == ("abc", 1799)
        args, kwargs = mock_post.call_args
        assert args[0] == "https://test.api.amadeus.com/v1/security/oauth2/token"
        assert kwargs["data"]["grant_type"] == "client_credentials"
        assert kwargs["timeout"] == 5

    def test_missing_credentials(self):
        with pytest.raises(AuthenticationError):
            fetch_amadeus_token(client_id="", client_secret="")

    @patch("app.providers.auth.requests.post")
    def test_rejected_credentials(self, mock_post):
        mock_post.return_value = Mock(status_code=401, text="invalid_client")
        with pytest.raises(AuthenticationError):
            fetch_amadeus_token(client_id="id", client_secret="bad")

    @patch("app.providers.auth.requests.post")
    def test_identity_endpoint_down(self, mock_post):
        mock_post.return_value = Mock(status_code=503, text="")
        with pytest.raises(UpstreamUnavailableError):
            fetch_amadeus_token(client_id="id", client_secret="secret")

    @patch("app.providers.auth.requests.post")
    def test_network_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(UpstreamUnavailableError):
            fetch_amadeus_token(client_id="id", client_secret="secret")

    @patch("app.providers.auth.requests.post")
    def test_credentials_read_at_call_time(self, mock_post, monkeypatch):
        monkeypatch.setattr(settings, "AMADEUS_CLIENT_ID", "rotated-id")
        monkeypatch.setattr(settings, "AMADEUS_CLIENT_SECRET", SecretStr("rotated-secret"))
        mock_post.return_value = Mock(
            status_code=200, json=Mock(return_value={"access_token": "abc", "expires_in": 1799})
        )

        fetch_amadeus_token()

        data = mock_post.call_args.kwargs["data"]
        assert data["client_id"] == "rotated-id"
        assert data["client_secret"] == "rotated-secret"
