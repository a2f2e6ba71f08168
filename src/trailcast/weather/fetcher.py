"""Forecast providers: one HTTP GET per grid cell, issued in batches.

Two interchangeable providers are supported:
- Open-Meteo: no key, local-time daily + hourly series with past days
- Tomorrow.io: key required, UTC timelines; can be routed through a
  relay so the key stays on the server
"""

import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

import requests

from trailcast.config import DEFAULT_HTTP_TIMEOUT
from trailcast.errors import MalformedPayloadError, NetworkError, WeatherError
from trailcast.utils.geo import Point

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
TOMORROW_URL = "https://api.tomorrow.io/v4/weather/forecast"
RELAY_PATH = "/api/weather"

T = TypeVar("T")


class ForecastFetcher(ABC):
    """Fetch the raw forecast payload for one location."""

    name: str = "provider"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout

    @abstractmethod
    def build_request(self, location: Point) -> tuple[str, dict]:
        """Return (url, query params) for a location."""

    def fetch(self, location: Point) -> dict:
        """GET the forecast for ``location``.

        Raises:
            NetworkError: Transport failure or non-success status
            MalformedPayloadError: Response body is not a JSON object
        """
        url, params = self.build_request(location)

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(f"{self.name} request failed: {e}", url=url) from e

        if not response.ok:
            raise NetworkError(
                f"{self.name} returned an error",
                status_code=response.status_code,
                details=response.text,
                url=url,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"{self.name} returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedPayloadError(
                f"{self.name} returned {type(payload).__name__}, expected an object"
            )
        return payload


class OpenMeteoFetcher(ForecastFetcher):
    """Open-Meteo forecast (no API key).

    past_days=4 provides the historical rainfall for the look-back
    window; forecast_days=6 covers today plus five selectable days.
    """

    name = "open-meteo"

    def __init__(self, *args, past_days: int = 4, forecast_days: int = 6, **kwargs):
        super().__init__(*args, **kwargs)
        self.past_days = past_days
        self.forecast_days = forecast_days

    def build_request(self, location: Point) -> tuple[str, dict]:
        return OPEN_METEO_URL, {
            "latitude": location.lat,
            "longitude": location.lng,
            "daily": (
                "temperature_2m_max,temperature_2m_min,"
                "precipitation_probability_max,precipitation_sum"
            ),
            "hourly": "temperature_2m,precipitation,precipitation_probability",
            "past_days": self.past_days,
            "forecast_days": self.forecast_days,
            "timezone": "auto",
        }


class TomorrowFetcher(ForecastFetcher):
    """Tomorrow.io forecast, direct with a key or through a relay."""

    name = "tomorrow.io"

    def __init__(
        self,
        *args,
        api_key: Optional[str] = None,
        relay_url: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        if not api_key and not relay_url:
            raise ValueError("TomorrowFetcher needs an api_key or a relay_url")
        self.api_key = api_key
        self.relay_url = relay_url.rstrip("/") if relay_url else None

    def build_request(self, location: Point) -> tuple[str, dict]:
        if self.relay_url:
            return f"{self.relay_url}{RELAY_PATH}", {
                "lat": location.lat,
                "lng": location.lng,
            }
        return TOMORROW_URL, {
            "location": f"{location.lat},{location.lng}",
            "apikey": self.api_key,
        }


@dataclass
class BatchOutcome(Generic[T]):
    """Result of fetching one item: a payload or the error raised."""

    item: T
    payload: Optional[dict] = None
    error: Optional[WeatherError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fetch_in_batches(
    items: Sequence[T],
    fetch_one: Callable[[T], Any],
    batch_size: int = 5,
    delay_seconds: float = 0.3,
    sleep: Callable[[float], None] = time.sleep,
) -> list[BatchOutcome[T]]:
    """Fetch items in fixed-size batches.

    Requests within a batch run concurrently; batches run one after
    another with ``delay_seconds`` between them to respect provider rate
    limits. There is no retry: a failed item carries its error.

    Args:
        items: Items to fetch, in order
        fetch_one: Callable performing one fetch
        batch_size: Concurrent requests per batch
        delay_seconds: Pause between batches
        sleep: Sleep function (injectable for tests)

    Returns:
        One BatchOutcome per item, in input order
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    outcomes: list[BatchOutcome[T]] = []

    for start in range(0, len(items), batch_size):
        batch = items[start:start + batch_size]

        with ThreadPoolExecutor(max_workers=len(batch)) as executor:
            futures = [executor.submit(fetch_one, item) for item in batch]
            for item, future in zip(batch, futures):
                try:
                    outcomes.append(BatchOutcome(item=item, payload=future.result()))
                except WeatherError as e:
                    outcomes.append(BatchOutcome(item=item, error=e))

        if start + batch_size < len(items) and delay_seconds > 0:
            sleep(delay_seconds)

    return outcomes
