"""
Builds the process-wide provider objects.

The flight provider is picked once from FLIGHT_PROVIDER when first requested:
  mock    : fixed offers, no network (default)
  amadeus : live Amadeus API behind the shared token cache
"""

from functools import lru_cache

from app.core.config import settings
from app.core.redis import redis_client
from app.providers.amadeus import AmadeusProvider
from app.providers.auth import AuthTokenCache, fetch_amadeus_token
from app.providers.base import FlightProvider
from app.providers.mock import MockFlightProvider


@lru_cache()
def get_token_cache() -> AuthTokenCache:
    """Token cache shared by every Amadeus consumer in this process."""
    return AuthTokenCache(redis_client, provider="amadeus", fetch_token=fetch_amadeus_token)


@lru_cache()
def get_flight_provider() -> FlightProvider:
    if settings.FLIGHT_PROVIDER == "amadeus":
        return AmadeusProvider(get_token_cache())
    return MockFlightProvider()
