from abc import ABC, abstractmethod
from typing import List

from app.schemas.flight import FlightOffer, SearchCriteria


class FlightProvider(ABC):
    """Source of priced itineraries for a route and date."""

    name: str = "base"

    @abstractmethod
    def search(self, criteria: SearchCriteria) -> List[FlightOffer]:
        """Return offers for the criteria; an empty list when nothing is found."""
