import uuid
from typing import List

from app.providers.base import FlightProvider
from app.schemas.flight import FlightOffer, FlightSegment, SearchCriteria


class MockFlightProvider(FlightProvider):
    """Deterministic provider used in development and tests."""

    name = "mock"

    def search(self, criteria: SearchCriteria) -> List[FlightOffer]:
        day = criteria.depart_date.isoformat()
        return [
            FlightOffer(
                id=str(uuid.uuid4()),
                provider=self.name,
                price=199,
                currency="USD",
                duration_minutes=320,
                stops=0,
                segments=[
                    FlightSegment(
                        from_=criteria.origin,
                        to=criteria.destination,
                        depart_at=f"{day}T08:00:00Z",
                        arrive_at=f"{day}T13:20:00Z",
                        carrier="MO",
                        flight_number="MO123",
                    ),
                ],
            ),
            FlightOffer(
                id=str(uuid.uuid4()),
                provider=self.name,
                price=149,
                currency="USD",
                duration_minutes=450,
                stops=1,
                segments=[
                    FlightSegment(
                        from_=criteria.origin,
                        to="DEN",
                        depart_at=f"{day}T07:30:00Z",
                        arrive_at=f"{day}T10:30:00Z",
                        carrier="MO",
                        flight_number="MO88",
                    ),
                    FlightSegment(
                        from_="DEN",
                        to=criteria.destination,
                        depart_at=f"{day}T11:30:00Z",
                        arrive_at=f"{day}T15:00:00Z",
                        carrier="MO",
                        flight_number="MO90",
                    ),
                ],
            ),
        ]
