"""Tests for the operational HTTP API."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_airport_cache, get_scheduler
from app.core.exceptions import NotFoundError, UpstreamUnavailableError
from app.main import app
from app.providers.factory import get_flight_provider
from app.providers.mock import MockFlightProvider
from app.schemas.airport import AirportResult
from app.schemas.alert import TickResult
from app.schemas.flight import FlightOffer


@pytest.fixture
def scheduler():
    return MagicMock()


@pytest.fixture
def airport_cache():
    return MagicMock()


@pytest.fixture
def client(scheduler, airport_cache):
    app.dependency_overrides[get_scheduler] = lambda: scheduler
    app.dependency_overrides[get_airport_cache] = lambda: airport_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "X-Request-ID" in response.headers

    def test_version(self, client):
        response = client.get("/health/version")
        assert response.json() == {"name": "Flight Price Alerts", "version": "1.0.0"}

    @patch("app.api.routes.health.redis_client")
    def test_readiness(self, mock_redis, client):
        mock_redis.ping.return_value = True

        body = client.get("/health/readiness").json()

        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["provider"] == "mock"

    @patch("app.api.routes.health.redis_client")
    def test_readiness_degraded(self, mock_redis, client):
        mock_redis.ping.side_effect = ConnectionError("refused")

        body = client.get("/health/readiness").json()

        assert body["status"] == "degraded"
        assert body["redis"].startswith("error")


class TestAdmin:
    def test_manual_check_accepted(self, client, scheduler):
        scheduler.trigger_manual_check.return_value = "job-abc"

        response = client.post("/admin/alerts/7/check")

        assert response.status_code == 202
        assert response.json()["job_id"] == "job-abc"
        scheduler.trigger_manual_check.assert_called_once_with(7)

    def test_manual_check_unknown_alert(self, client, scheduler):
        scheduler.trigger_manual_check.side_effect = NotFoundError("Alert with ID 7 not found")

        response = client.post("/admin/alerts/7/check")

        assert response.status_code == 404
        assert response.json()["detail"] == "Alert with ID 7 not found"

    def test_run_tick(self, client, scheduler):
        scheduler.run_tick.return_value = TickResult(selected=3, enqueued=2, failed=1)

        response = client.post("/admin/price-checks/run")

        assert response.status_code == 202
        assert response.json() == {"selected": 3, "enqueued": 2, "failed": 1}


class TestAirports:
    def test_search(self, client, airport_cache):
        airport_cache.lookup.return_value = [
            AirportResult(code="LAX", name="LOS ANGELES INTL", city="LOS ANGELES", country="US")
        ]

        response = client.get("/airports/search", params={"q": "la"})

        assert response.status_code == 200
        assert response.json()[0]["code"] == "LAX"
        airport_cache.lookup.assert_called_once_with("la")

    def test_short_query(self, client, airport_cache):
        airport_cache.lookup.return_value = []
        assert client.get("/airports/search", params={"q": "l"}).json() == []

    def test_upstream_unavailable(self, client, airport_cache):
        airport_cache.lookup.side_effect = UpstreamUnavailableError()
        assert client.get("/airports/search", params={"q": "lax"}).status_code == 503


class TestFlightSearch:
    @pytest.fixture
    def provider(self, client):
        provider = MagicMock()
        provider.name = "test"
        app.dependency_overrides[get_flight_provider] = lambda: provider
        return provider

    def test_one_way_with_mock_provider(self, client):
        app.dependency_overrides[get_flight_provider] = MockFlightProvider

        response = client.post(
            "/search/flights",
            json={"origin": "LAX", "destination": "JFK", "depart_date": "2026-11-18", "passengers": 1},
        )

        assert response.status_code == 200
        offers = response.json()
        assert sorted(o["price"] for o in offers) == [149, 199]
        assert offers[0]["segments"][0]["from"] == "LAX"

    def test_round_trip_reaches_provider(self, client, provider):
        provider.search.return_value = [
            FlightOffer(id="o-1", provider="test", price=310, currency="USD",
                        duration_minutes=320, stops=0, segments=[]),
        ]

        response = client.post(
            "/search/flights",
            json={
                "origin": "LAX",
                "destination": "JFK",
                "depart_date": "2026-11-18",
                "return_date": "2026-11-25",
                "passengers": 2,
            },
        )

        assert response.status_code == 200
        assert response.json()[0]["price"] == 310
        criteria = provider.search.call_args.args[0]
        assert criteria.return_date.isoformat() == "2026-11-25"
        assert criteria.passengers == 2

    def test_invalid_passengers_rejected(self, client, provider):
        response = client.post(
            "/search/flights",
            json={"origin": "LAX", "destination": "JFK", "depart_date": "2026-11-18", "passengers": 0},
        )

        assert response.status_code == 422
        provider.search.assert_not_called()

    def test_upstream_error_status(self, client, provider):
        provider.search.side_effect = UpstreamUnavailableError()

        response = client.post(
            "/search/flights",
            json={"origin": "LAX", "destination": "JFK", "depart_date": "2026-11-18"},
        )

        assert response.status_code == 503
