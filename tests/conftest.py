"""Shared test fixtures and configuration."""

import os
from datetime import date, timedelta

import pytest

# Keep tests off real infrastructure
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("FLIGHT_PROVIDER", "mock")
os.environ.setdefault("EMAIL_SENDER", "")
os.environ.setdefault("EMAIL_PASSWORD", "")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.models  # noqa: E402,F401
from app.db.session import Base  # noqa: E402
from app.schemas.alert import AlertSnapshot  # noqa: E402
from app.services.alert_store import SqlAlertStore  # noqa: E402


class InMemoryRedis:
    """Just enough of the redis-py client for the caches under test."""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if key in self.data:
                del self.data[key]
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def expire_all(self):
        self.data.clear()
        self.ttls.clear()


@pytest.fixture
def fake_redis():
    return InMemoryRedis()


@pytest.fixture
def session_factory():
    """SQLite in-memory database shared across sessions and threads."""
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def alert_store(session_factory):
    return SqlAlertStore(session_factory)


@pytest.fixture
def future_date():
    return date.today() + timedelta(days=30)


@pytest.fixture
def lax_jfk_alert(future_date):
    """The LAX -> JFK alert with a 150 USD target."""
    return AlertSnapshot(
        id=1,
        origin="LAX",
        destination="JFK",
        depart_date=future_date,
        passengers=1,
        target_price=150,
        currency="USD",
        email="traveler@example.com",
        webhook_url="https://hooks.example.com/alerts",
    )


def make_segment(origin, destination, depart_at, arrive_at, carrier="AA", number="100"):
    return {
        "departure": {"iataCode": origin, "at": depart_at},
        "arrival": {"iataCode": destination, "at": arrive_at},
        "carrierCode": carrier,
        "number": number,
        "duration": "PT2H",
        "id": "1",
        "numberOfStops": 0,
    }


@pytest.fixture
def sample_flight_offers_response():
    """Amadeus flight-offers payload: one direct and one two-stop offer."""
    return {
        "meta": {"count": 2},
        "data": [
            {
                "type": "flight-offer",
                "id": "1",
                "itineraries": [
                    {
                        "duration": "PT5H20M",
                        "segments": [
                            make_segment("LAX", "JFK", "2026-11-18T08:00:00", "2026-11-18T16:20:00",
                                         carrier="AA", number="100"),
                        ],
                    }
                ],
                "price": {"currency": "USD", "total": "199.00", "base": "170.00", "grandTotal": "199.00"},
            },
            {
                "type": "flight-offer",
                "id": "2",
                "itineraries": [
                    {
                        "duration": "PT9H45M",
                        "segments": [
                            make_segment("LAX", "DEN", "2026-11-18T06:00:00", "2026-11-18T09:30:00",
                                         carrier="UA", number="21"),
                            make_segment("DEN", "ORD", "2026-11-18T10:30:00", "2026-11-18T13:45:00",
                                         carrier="UA", number="522"),
                            make_segment("ORD", "JFK", "2026-11-18T14:45:00", "2026-11-18T17:45:00",
                                         carrier="UA", number="1701"),
                        ],
                    },
                    {
                        "duration": "PT6H",
                        "segments": [
                            make_segment("JFK", "LAX", "2026-11-25T08:00:00", "2026-11-25T11:00:00",
                                         carrier="UA", number="900"),
                        ],
                    },
                ],
                "price": {"currency": "USD", "total": "149.50", "base": "120.00", "grandTotal": "149.50"},
            },
        ],
    }


@pytest.fixture
def sample_locations_response():
    """Amadeus airport & city search payload."""
    return {
        "meta": {"count": 2},
        "data": [
            {
                "type": "location",
                "subType": "AIRPORT",
                "name": "LOS ANGELES INTL",
                "iataCode": "LAX",
                "address": {"cityName": "LOS ANGELES", "countryName": "UNITED STATES OF AMERICA", "countryCode": "US"},
            },
            {
                "type": "location",
                "subType": "CITY",
                "name": "LAS VEGAS",
                "iataCode": "LAS",
                "address": {"cityName": "LAS VEGAS", "countryName": "UNITED STATES OF AMERICA", "countryCode": "US"},
            },
        ],
    }
