"""Shared pytest fixtures for trailcast tests.

Test Tiers:
- unit: Fast tests with fixtures, no network (default)
- integration: Tests wiring several components against stubbed HTTP
- live: Real provider requests, slow, requires network and may need credentials

Run live tests with: pytest -m live --run-live
"""

from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest

from trailcast.catalog.models import Trail


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live provider tests (slow, requires network)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests using fixtures")
    config.addinivalue_line("markers", "integration: tests wiring several components")
    config.addinivalue_line("markers", "live: real API tests (slow, requires network)")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# -----------------------------------------------------------------------------
# Time
# -----------------------------------------------------------------------------

# Local date the payload fixtures are built around
TODAY = date(2026, 10, 17)

# 09:00 UTC, i.e. 12:00 local at a +3h offset
NOW = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced epoch-seconds clock."""

    def __init__(self, start: float = 1_800_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0, hours: float = 0) -> None:
        self.now += seconds + hours * 3600


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


# -----------------------------------------------------------------------------
# Trails
# -----------------------------------------------------------------------------


def make_trail(**overrides) -> Trail:
    fields = dict(
        id="test-trail",
        name="Test Trail",
        lat=32.22,
        lng=34.98,
        soil_type="Loam",
        rock_type="Sandstone",
        length_km=12.0,
        difficulty="Intermediate",
        description="Fixture trail",
        region="Center",
    )
    fields.update(overrides)
    return Trail(**fields)


@pytest.fixture
def trail_factory():
    """Build trails with overridable fields."""
    return make_trail


@pytest.fixture
def sample_trails() -> list[Trail]:
    """Three trails: two sharing a grid cell, one further south."""
    return [
        make_trail(id="north-a", name="North A", lat=32.2205, lng=34.9825, soil_type="Clay/Silt"),
        make_trail(id="north-b", name="North B", lat=32.2150, lng=34.9900, soil_type="Loam"),
        make_trail(id="south", name="South", lat=31.9680, lng=34.9450, soil_type="Heavy Clay",
                   rock_type="Limestone"),
    ]


# -----------------------------------------------------------------------------
# Provider payloads
# -----------------------------------------------------------------------------


def build_openmeteo_payload(
    start: date = TODAY - timedelta(days=4),
    days: int = 10,
    hourly_precip: Optional[dict[str, float]] = None,
    daily_precip: Optional[dict[str, float]] = None,
    temperature: float = 20.0,
    daily_probability: float = 10.0,
    hourly_probability: float = 0.0,
    include_hourly: bool = True,
    utc_offset_seconds: int = 10800,
) -> dict:
    """Open-Meteo style payload.

    Hourly precipitation is zero except for ``hourly_precip`` entries
    keyed by 'YYYY-MM-DDTHH:00'. Daily precipitation is zero except for
    ``daily_precip`` entries keyed by 'YYYY-MM-DD'.
    """
    hourly_precip = hourly_precip or {}
    daily_precip = daily_precip or {}
    dates = [start + timedelta(days=i) for i in range(days)]

    payload = {
        "latitude": 32.25,
        "longitude": 34.9,
        "timezone": "Asia/Jerusalem",
        "utc_offset_seconds": utc_offset_seconds,
        "daily": {
            "time": [d.isoformat() for d in dates],
            "temperature_2m_max": [temperature + 5] * days,
            "temperature_2m_min": [temperature - 5] * days,
            "precipitation_probability_max": [daily_probability] * days,
            "precipitation_sum": [daily_precip.get(d.isoformat(), 0.0) for d in dates],
        },
    }

    if include_hourly:
        times = [f"{d.isoformat()}T{h:02d}:00" for d in dates for h in range(24)]
        payload["hourly"] = {
            "time": times,
            "temperature_2m": [temperature] * len(times),
            "precipitation": [hourly_precip.get(t, 0.0) for t in times],
            "precipitation_probability": [hourly_probability] * len(times),
        }
    return payload


def build_tomorrow_payload(
    start: date = TODAY - timedelta(days=1),
    days: int = 6,
    hourly_rain: Optional[dict[str, float]] = None,
    temperature: float = 20.0,
    probability_max: float = 10.0,
    use_intensity: bool = False,
) -> dict:
    """Tomorrow.io style payload with UTC timestamps.

    ``hourly_rain`` is keyed by UTC 'YYYY-MM-DDTHH:00:00Z'.
    """
    hourly_rain = hourly_rain or {}
    dates = [start + timedelta(days=i) for i in range(days)]
    rain_field = "rainIntensity" if use_intensity else "rainAccumulation"

    hourly = []
    for d in dates:
        for h in range(24):
            t = f"{d.isoformat()}T{h:02d}:00:00Z"
            hourly.append({
                "time": t,
                "values": {
                    "temperature": temperature,
                    rain_field: hourly_rain.get(t, 0.0),
                    "precipitationProbability": 0,
                },
            })

    daily = [
        {
            "time": f"{d.isoformat()}T04:00:00Z",
            "values": {
                "temperatureMax": temperature + 5,
                "temperatureMin": temperature - 5,
                "temperatureAvg": temperature,
                "precipitationProbabilityMax": probability_max,
                "rainAccumulationSum": 0.0,
            },
        }
        for d in dates
    ]

    return {"timelines": {"hourly": hourly, "daily": daily}}


@pytest.fixture
def openmeteo_payload() -> dict:
    return build_openmeteo_payload()


@pytest.fixture
def tomorrow_payload() -> dict:
    return build_tomorrow_payload()
