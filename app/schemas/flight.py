from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SearchCriteria(BaseModel):
    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    depart_date: date
    passengers: int = Field(default=1, ge=1)
    return_date: Optional[date] = None


class FlightSegment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    depart_at: str
    arrive_at: str
    carrier: str
    flight_number: str


class FlightOffer(BaseModel):
    id: str
    provider: str
    price: float
    currency: str
    duration_minutes: int
    stops: int
    segments: List[FlightSegment] = []
