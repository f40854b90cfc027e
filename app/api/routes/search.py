from fastapi import APIRouter, Depends
from typing import List

from app.core.logging import get_logger
from app.providers.base import FlightProvider
from app.providers.factory import get_flight_provider
from app.schemas.flight import FlightOffer, SearchCriteria

logger = get_logger(__name__)

router = APIRouter(prefix="/search", tags=["Search"])


@router.post("/flights", response_model=List[FlightOffer])
def search_flights(
        criteria: SearchCriteria,
        provider: FlightProvider = Depends(get_flight_provider)
):
    """
    Search offers for a route and date with the configured flight provider.

    Add `return_date` for a round trip. Searches are not stored.
    """
    offers = provider.search(criteria)
    logger.info(
        "Flight search served",
        extra={"provider": provider.name, "offers": len(offers)},
    )
    return offers
