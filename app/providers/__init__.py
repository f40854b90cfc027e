from app.providers.base import FlightProvider
from app.providers.mock import MockFlightProvider
from app.providers.amadeus import AmadeusProvider

__all__ = ["FlightProvider", "MockFlightProvider", "AmadeusProvider"]
