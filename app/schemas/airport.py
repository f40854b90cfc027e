from pydantic import BaseModel


class AirportResult(BaseModel):
    code: str
    name: str
    city: str
    country: str
