from fastapi import APIRouter, Depends, Query
from typing import List

from app.api.deps import get_airport_cache
from app.schemas.airport import AirportResult
from app.services.airports import AirportLookupCache

router = APIRouter(prefix="/airports", tags=["Airports"])


@router.get("/search", response_model=List[AirportResult])
def search_airports(
        q: str = Query("", description="Airport or city name, at least 2 characters"),
        airport_cache: AirportLookupCache = Depends(get_airport_cache)
):
    """Search airports and cities by free text."""
    return airport_cache.lookup(q)
