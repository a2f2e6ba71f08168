"""Live smoke tests against the real forecast providers.

These tests hit the network and are skipped by default.

Run with: pytest tests/live/ -v --run-live

They catch provider payload changes that the fixture-based unit tests
cannot.
"""

import os
from datetime import date, timedelta

import pytest

from trailcast.catalog import HOME_LOCATION
from trailcast.weather.fetcher import OpenMeteoFetcher, TomorrowFetcher
from trailcast.weather.normalizer import OpenMeteoNormalizer, TomorrowNormalizer

# All tests in this file are live tests
pytestmark = pytest.mark.live


class TestOpenMeteoLive:
    """Open-Meteo needs no credentials."""

    def test_fetch_and_parse(self):
        payload = OpenMeteoFetcher().fetch(HOME_LOCATION.location)
        assert "daily" in payload, "Open-Meteo response should have daily data"
        assert "hourly" in payload

        target = date.today() + timedelta(days=1)
        facts = OpenMeteoNormalizer().parse(payload, target)

        assert facts.target_date == target
        assert facts.rainfall_accumulated >= 0
        assert facts.target.temperature is not None, "Forecast should cover tomorrow"
        assert len(facts.daily_rainfall) >= 10


class TestTomorrowLive:
    """Tomorrow.io requires TOMORROW_API_KEY."""

    def test_fetch_and_parse(self):
        api_key = os.environ.get("TOMORROW_API_KEY")
        if not api_key:
            pytest.skip("TOMORROW_API_KEY not set")

        payload = TomorrowFetcher(api_key=api_key).fetch(HOME_LOCATION.location)
        target = date.today() + timedelta(days=1)
        facts = TomorrowNormalizer().parse(payload, target)

        assert facts.target.temperature is not None
        assert facts.rain_window_hours == 48
