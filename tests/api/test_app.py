"""Tests for the HTTP API.

Uses FastAPI TestClient against a recommender wired to an in-memory
cache and a stub fetcher.
"""

from datetime import date, timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from trailcast.api import create_app
from trailcast.api.app import RELAY_CACHE_CONTROL
from trailcast.api.schemas import ErrorResponse, HealthResponse, ScoreResponse
from trailcast.cache.store import CacheStore, MemoryBackend
from trailcast.config import Settings
from trailcast.errors import MalformedPayloadError, NetworkError
from trailcast.recommender import Recommender
from trailcast.weather.fetcher import TomorrowFetcher
from trailcast.weather.normalizer import OpenMeteoNormalizer
from trailcast.weather.orchestrator import WeatherOrchestrator

from conftest import build_openmeteo_payload


class StubFetcher:
    name = "stub"

    def __init__(self, payload):
        self.payload = payload
        self.calls = 0

    def fetch(self, location):
        self.calls += 1
        return self.payload


@pytest.fixture
def fetcher():
    return StubFetcher(build_openmeteo_payload(start=date.today() - timedelta(days=4)))


@pytest.fixture
def recommender(fetcher, sample_trails):
    orchestrator = WeatherOrchestrator(
        fetcher, OpenMeteoNormalizer(), CacheStore(MemoryBackend()), sleep=lambda s: None
    )
    return Recommender(orchestrator, trails=sample_trails)


@pytest.fixture
def settings():
    return Settings(tomorrow_api_key="secret")


@pytest.fixture
def client(recommender, settings):
    return TestClient(create_app(recommender=recommender, settings=settings))


class TestSchemas:
    """Tests for Pydantic schemas."""

    def test_health_defaults(self):
        health = HealthResponse(provider="openmeteo")
        assert health.status == "healthy"
        assert health.cache_entries == 0

    def test_score_bounds(self):
        with pytest.raises(ValueError):
            ScoreResponse(overall=101, color="green", status="x", mud=0, weather=0, distance=0)

    def test_error_response(self):
        error = ErrorResponse(error="HTTP_400", message="bad")
        assert error.detail is None


class TestInfoEndpoints:
    """Tests for /, /health and /trails."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Trailcast API"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["provider"] == "openmeteo"
        assert data["cache_entries"] == 0

    def test_trails(self, client):
        response = client.get("/trails")
        assert response.status_code == 200
        trails = response.json()
        assert [t["id"] for t in trails] == ["north-a", "north-b", "south"]
        assert all(t["in_range"] for t in trails)
        assert trails[0]["drive_minutes"] < trails[2]["drive_minutes"]

    def test_unusable_cache_database(self, tmp_path):
        db_path = tmp_path / "corrupt.duckdb"
        db_path.write_text("this is not a duckdb file")
        client = TestClient(create_app(settings=Settings(db_path=db_path)))

        trails = client.get("/trails")
        assert trails.status_code == 200
        assert len(trails.json()) == 18

        health = client.get("/health")
        assert health.status_code == 200
        assert health.json()["cache_entries"] == 0


class TestRecommendations:
    """Tests for /recommendations."""

    def test_default_date_is_tomorrow(self, client):
        response = client.get("/recommendations")
        assert response.status_code == 200
        data = response.json()
        assert data["target_date"] == (date.today() + timedelta(days=1)).isoformat()
        assert len(data["recommendations"]) == 3
        assert sum(data["counts"].values()) == 3

    def test_ranked(self, client):
        data = client.get("/recommendations").json()
        scores = [r["score"]["overall"] for r in data["recommendations"]]
        assert scores == sorted(scores, reverse=True)

        first = data["recommendations"][0]
        assert first["score"]["color"] in {"green", "yellow", "red"}
        assert first["weather"]["source"] == "api"
        assert first["weather"]["rain_window_hours"] == 96

    def test_second_request_served_from_cache(self, client, fetcher):
        client.get("/recommendations")
        calls = fetcher.calls

        target = (date.today() + timedelta(days=2)).isoformat()
        data = client.get("/recommendations", params={"date": target}).json()

        assert fetcher.calls == calls
        assert data["from_cache_only"] is True
        assert data["target_date"] == target

    def test_refresh_fetches(self, client, fetcher):
        client.get("/recommendations")
        calls = fetcher.calls
        client.get("/recommendations", params={"refresh": "true"})
        assert fetcher.calls == calls + 2

    def test_date_out_of_range(self, client):
        target = (date.today() + timedelta(days=6)).isoformat()
        response = client.get("/recommendations", params={"date": target})

        assert response.status_code == 400
        assert response.json()["error"] == "HTTP_400"

    def test_invalid_date(self, client):
        response = client.get("/recommendations", params={"date": "tomorrow"})
        assert response.status_code == 422


class TestWeatherRelay:
    """Tests for the Tomorrow.io relay."""

    def test_missing_params(self, client):
        response = client.get("/api/weather", params={"lat": 32.2})
        assert response.status_code == 400
        assert response.json()["message"] == "Missing lat/lng parameters"

    def test_no_key(self, recommender):
        client = TestClient(create_app(recommender=recommender, settings=Settings()))
        response = client.get("/api/weather", params={"lat": 32.2, "lng": 34.9})
        assert response.status_code == 500
        assert response.json()["message"] == "API key not configured"

    def test_settings_read_on_first_request(self, recommender, monkeypatch):
        monkeypatch.delenv("TOMORROW_API_KEY", raising=False)
        client = TestClient(create_app(recommender=recommender))
        monkeypatch.setenv("TOMORROW_API_KEY", "late")

        with patch.object(TomorrowFetcher, "fetch", return_value={"timelines": {}}):
            response = client.get("/api/weather", params={"lat": 32.2, "lng": 34.9})

        assert response.status_code == 200

    def test_success(self, client):
        payload = {"timelines": {"daily": []}}
        with patch.object(TomorrowFetcher, "fetch", return_value=payload) as fetch:
            response = client.get("/api/weather", params={"lat": 32.2, "lng": 34.9})

        assert response.status_code == 200
        assert response.json() == payload
        assert response.headers["Cache-Control"] == RELAY_CACHE_CONTROL
        location = fetch.call_args.args[0]
        assert (location.lat, location.lng) == (32.2, 34.9)

    def test_upstream_error(self, client):
        error = NetworkError("tomorrow.io returned an error", status_code=429, details="r" * 300)
        with patch.object(TomorrowFetcher, "fetch", side_effect=error):
            response = client.get("/api/weather", params={"lat": 32.2, "lng": 34.9})

        assert response.status_code == 429
        data = response.json()
        assert data["message"] == "Tomorrow.io API error: 429"
        assert len(data["detail"]) == 200
        assert "Cache-Control" not in response.headers

    def test_transport_error(self, client):
        with patch.object(TomorrowFetcher, "fetch", side_effect=NetworkError("refused")):
            response = client.get("/api/weather", params={"lat": 32.2, "lng": 34.9})
        assert response.status_code == 500

    def test_malformed_upstream(self, client):
        with patch.object(TomorrowFetcher, "fetch", side_effect=MalformedPayloadError("bad json")):
            response = client.get("/api/weather", params={"lat": 32.2, "lng": 34.9})
        assert response.status_code == 502
