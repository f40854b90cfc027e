import json
from typing import Any, Dict, List

import redis

from app.core.config import settings
from app.core.exceptions import AuthenticationError, UpstreamUnavailableError
from app.core.logging import get_logger
from app.providers.auth import AuthTokenCache
from app.providers.http import authorized_get
from app.schemas.airport import AirportResult

logger = get_logger(__name__)

MIN_QUERY_LENGTH = 2


def get_cache_key(query: str) -> str:
    return f"airports:{query}"


def normalize_query(query: str) -> str:
    return (query or "").strip().lower()


def transform_airports(payload: Dict[str, Any]) -> List[AirportResult]:
    """Transform Amadeus locations to simplified airport results."""
    results = []
    for location in payload.get("data") or []:
        address = location.get("address") or {}
        results.append(
            AirportResult(
                code=location.get("iataCode", ""),
                name=location.get("name", ""),
                city=address.get("cityName", ""),
                country=address.get("countryCode", ""),
            )
        )
    return results


class AirportLookupCache:
    """Free-text airport search with results cached in Redis."""

    def __init__(
        self,
        redis_client: redis.Redis,
        token_cache: AuthTokenCache,
        base_url: str = settings.AMADEUS_BASE_URL,
        ttl: int = settings.AIRPORT_CACHE_EXPIRATION,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
    ):
        self.redis = redis_client
        self.token_cache = token_cache
        self.base_url = base_url.rstrip("/")
        self.ttl = ttl
        self.timeout = timeout

    def lookup(self, query: str) -> List[AirportResult]:
        normalized = normalize_query(query)
        if len(normalized) < MIN_QUERY_LENGTH:
            return []

        cache_key = get_cache_key(normalized)
        cached = self.redis.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for airport search: {normalized}")
            return [AirportResult(**item) for item in json.loads(cached)]

        logger.info(f"Fetching airports from Amadeus for query: {normalized}")
        # token service errors pass through unchanged
        token = self.token_cache.get()
        try:
            payload = authorized_get(
                f"{self.base_url}/v1/reference-data/locations",
                self.token_cache,
                params={
                    "keyword": normalized,
                    "subType": "AIRPORT,CITY",
                    "page[limit]": 10,
                },
                timeout=self.timeout,
                token=token,
            )
        except AuthenticationError:
            # a rejected token has already been invalidated by authorized_get
            raise UpstreamUnavailableError("Authentication failed. Please try again.")

        results = transform_airports(payload)
        self.redis.setex(
            cache_key, self.ttl, json.dumps([r.model_dump() for r in results])
        )
        logger.debug(f"Cached {len(results)} airports for query: {normalized}")
        return results
