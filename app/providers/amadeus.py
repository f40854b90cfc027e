import re
import uuid
from typing import Any, Dict, List

from app.core.config import settings
from app.core.logging import get_logger
from app.providers.auth import AuthTokenCache
from app.providers.base import FlightProvider
from app.providers.http import authorized_get
from app.schemas.flight import FlightOffer, FlightSegment, SearchCriteria

logger = get_logger(__name__)


def parse_duration(duration: str) -> int:
    """
    Parse an ISO 8601 duration to minutes.

    Examples: "PT5H20M" -> 320, "PT1H" -> 60, "PT45M" -> 45, "P1DT2H" -> 1560
    """
    if not duration:
        return 0

    days = re.search(r"(\d+)D", duration)
    hours = re.search(r"(\d+)H", duration)
    minutes = re.search(r"(\d+)M", duration)

    total = int(days.group(1)) * 24 * 60 if days else 0
    total += int(hours.group(1)) * 60 if hours else 0
    total += int(minutes.group(1)) if minutes else 0
    return total


def count_stops(segments: List[Any]) -> int:
    """Number of stops: one less than the number of segments, never negative."""
    return max(0, len(segments) - 1)


def transform_segment(segment: Dict[str, Any]) -> FlightSegment:
    carrier = segment["carrierCode"]
    return FlightSegment(
        from_=segment["departure"]["iataCode"],
        to=segment["arrival"]["iataCode"],
        depart_at=segment["departure"]["at"],
        arrive_at=segment["arrival"]["at"],
        carrier=carrier,
        flight_number=f"{carrier}{segment['number']}",
    )


def transform_offer(offer: Dict[str, Any], provider: str = "amadeus") -> FlightOffer:
    # Round trips carry an outbound and a return itinerary; only the
    # outbound one is reported.
    itinerary = offer["itineraries"][0]
    segments = itinerary.get("segments", [])

    return FlightOffer(
        id=str(uuid.uuid4()),
        provider=provider,
        price=float(offer["price"]["total"]),
        currency=offer["price"]["currency"],
        duration_minutes=parse_duration(itinerary.get("duration", "")),
        stops=count_stops(segments),
        segments=[transform_segment(s) for s in segments],
    )


def transform_offers(payload: Dict[str, Any]) -> List[FlightOffer]:
    """Transform a flight-offers search response into FlightOffer objects."""
    data = payload.get("data") or []
    if not data:
        logger.debug("No flight offers found in Amadeus response")
        return []
    return [transform_offer(offer) for offer in data]


class AmadeusProvider(FlightProvider):
    """Live flight search against the Amadeus Flight Offers Search API."""

    name = "amadeus"

    def __init__(
        self,
        token_cache: AuthTokenCache,
        base_url: str = settings.AMADEUS_BASE_URL,
        currency: str = settings.AMADEUS_CURRENCY,
        max_results: int = settings.AMADEUS_MAX_RESULTS,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
    ):
        self.token_cache = token_cache
        self.base_url = base_url.rstrip("/")
        self.currency = currency
        self.max_results = max_results
        self.timeout = timeout

    def build_params(self, criteria: SearchCriteria) -> Dict[str, Any]:
        params = {
            "originLocationCode": criteria.origin,
            "destinationLocationCode": criteria.destination,
            "departureDate": criteria.depart_date.isoformat(),
            "adults": criteria.passengers,
            "currencyCode": self.currency,
            "max": self.max_results,
            "nonStop": "false",
        }
        if criteria.return_date:
            params["returnDate"] = criteria.return_date.isoformat()
        return params

    def search(self, criteria: SearchCriteria) -> List[FlightOffer]:
        logger.info(
            f"Searching flights: {criteria.origin} -> {criteria.destination} on {criteria.depart_date}"
        )

        payload = authorized_get(
            f"{self.base_url}/v2/shopping/flight-offers",
            self.token_cache,
            params=self.build_params(criteria),
            timeout=self.timeout,
        )

        offers = transform_offers(payload)
        logger.info(
            "Transformed flight offers",
            extra={"provider": self.name, "offers": len(offers)},
        )
        return offers
