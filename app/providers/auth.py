from typing import Callable, Optional, Tuple

import redis
import requests

from app.core.config import settings
from app.core.exceptions import AuthenticationError, UpstreamUnavailableError
from app.core.logging import get_logger

logger = get_logger(__name__)

TokenGrant = Tuple[str, int]


class AuthTokenCache:
    """
    One bearer token per upstream provider, kept in Redis.

    The token is cached for less than the upstream-advertised lifetime so a
    token that is about to expire is never handed out. Concurrent misses may
    each fetch a fresh token; the last write wins.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        provider: str,
        fetch_token: Callable[[], TokenGrant],
        ttl: int = settings.AMADEUS_TOKEN_TTL,
        safety_margin: int = settings.AMADEUS_TOKEN_SAFETY_MARGIN,
    ):
        self.redis = redis_client
        self.provider = provider
        self.fetch_token = fetch_token
        self.ttl = ttl
        self.safety_margin = safety_margin

    @property
    def cache_key(self) -> str:
        return f"auth-token:{self.provider}"

    def get(self) -> str:
        """Return a valid token, fetching a new one on a cache miss."""
        cached = self.redis.get(self.cache_key)
        if cached:
            logger.debug("Using cached token", extra={"provider": self.provider})
            return cached

        logger.info("Fetching new token", extra={"provider": self.provider})
        token, expires_in = self.fetch_token()

        # full-length tokens are capped at the configured TTL, shorter ones lose the margin
        expires_in = int(expires_in)
        ttl = self.ttl if expires_in > self.ttl else expires_in - self.safety_margin
        if ttl > 0:
            self.redis.setex(self.cache_key, ttl, token)
        else:
            logger.warning(
                "Token lifetime too short to cache",
                extra={"provider": self.provider, "expires_in": expires_in},
            )
        return token

    def invalidate(self) -> None:
        """Drop the cached token so the next get() fetches a new one."""
        self.redis.delete(self.cache_key)
        logger.info("Cleared cached token", extra={"provider": self.provider})


def fetch_amadeus_token(
    base_url: Optional[str] = None,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    timeout: Optional[float] = None,
) -> TokenGrant:
    """
    Exchange client credentials for an Amadeus bearer token.

    Arguments left as None are read from settings on every call.
    """
    base_url = base_url if base_url is not None else settings.AMADEUS_BASE_URL
    client_id = client_id if client_id is not None else settings.AMADEUS_CLIENT_ID
    if client_secret is None:
        client_secret = settings.AMADEUS_CLIENT_SECRET.get_secret_value()
    timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

    if not client_id or not client_secret:
        raise AuthenticationError(
            "Amadeus credentials not configured. Set AMADEUS_CLIENT_ID and AMADEUS_CLIENT_SECRET."
        )

    try:
        response = requests.post(
            f"{base_url.rstrip('/')}/v1/security/oauth2/token",
            data={
                "grant_type": "client_credentials",
                "client_id": client_id,
                "client_secret": client_secret,
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.error(f"Amadeus token request failed: {e}")
        raise UpstreamUnavailableError(f"Amadeus authentication unavailable: {e}")

    if response.status_code >= 500:
        raise UpstreamUnavailableError(
            f"Amadeus authentication unavailable: {response.status_code}"
        )
    if response.status_code != 200:
        raise AuthenticationError(
            f"Amadeus authentication failed: {response.status_code} - {response.text[:200]}"
        )

    data = response.json()
    return data["access_token"], int(data.get("expires_in", 1799))
