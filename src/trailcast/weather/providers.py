"""Provider registry: fetcher/normalizer pairs selected by configuration."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from trailcast.cache.database import CacheDatabase
from trailcast.cache.store import CacheBackend, CacheStore, MemoryBackend
from trailcast.config import Settings
from trailcast.errors import CacheUnavailable
from trailcast.weather.fetcher import ForecastFetcher, OpenMeteoFetcher, TomorrowFetcher
from trailcast.weather.normalizer import (
    OpenMeteoNormalizer,
    TomorrowNormalizer,
    WeatherNormalizer,
)
from trailcast.weather.orchestrator import WeatherOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderProfile:
    """Per-provider constants.

    Attributes:
        name: Provider key used in configuration and cache namespaces
        cache_max_age_hours: Age after which a cached payload is absent
        rain_window_hours: Rainfall look-back window
        batch_size: Concurrent requests per batch
        batch_delay: Seconds between batches
    """

    name: str
    cache_max_age_hours: float
    rain_window_hours: int
    batch_size: int
    batch_delay: float


PROVIDERS: dict[str, ProviderProfile] = {
    # No key, ~600 req/min allowed
    "openmeteo": ProviderProfile(
        name="openmeteo",
        cache_max_age_hours=2,
        rain_window_hours=96,
        batch_size=5,
        batch_delay=0.3,
    ),
    # Free tier is tightly rate limited
    "tomorrow": ProviderProfile(
        name="tomorrow",
        cache_max_age_hours=6,
        rain_window_hours=48,
        batch_size=3,
        batch_delay=1.0,
    ),
}


def get_profile(name: str) -> ProviderProfile:
    try:
        return PROVIDERS[name]
    except KeyError:
        raise ValueError(
            f"Unknown provider: {name}. Must be one of {sorted(PROVIDERS)}"
        ) from None


def build_fetcher(
    settings: Settings, session: Optional[requests.Session] = None
) -> ForecastFetcher:
    profile = get_profile(settings.provider)
    if profile.name == "tomorrow":
        return TomorrowFetcher(
            session=session,
            timeout=settings.http_timeout,
            api_key=settings.tomorrow_api_key,
            relay_url=settings.relay_url,
        )
    return OpenMeteoFetcher(session=session, timeout=settings.http_timeout)


def build_normalizer(settings: Settings) -> WeatherNormalizer:
    profile = get_profile(settings.provider)
    if profile.name == "tomorrow":
        return TomorrowNormalizer(
            rain_window_hours=profile.rain_window_hours, tz=settings.timezone
        )
    return OpenMeteoNormalizer(rain_window_hours=profile.rain_window_hours)


def build_orchestrator(
    settings: Optional[Settings] = None,
    backend: Optional[CacheBackend] = None,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> WeatherOrchestrator:
    """Wire up an orchestrator for the configured provider.

    Args:
        settings: Settings (defaults to the environment)
        backend: Cache backing store. Defaults to a CacheDatabase at
            ``settings.db_path``, which also records the fetch log; an
            in-memory store is used when that database cannot be opened.
        session: HTTP session to share
        sleep: Sleep used between batches

    Returns:
        Configured WeatherOrchestrator
    """
    settings = settings or Settings.from_env()
    profile = get_profile(settings.provider)

    fetch_log = None
    if backend is None:
        try:
            backend = CacheDatabase(settings.db_path)
            fetch_log = backend
        except CacheUnavailable as e:
            logger.warning(f"Cache database unavailable, using memory cache: {e}")
            backend = MemoryBackend()
    elif isinstance(backend, CacheDatabase):
        fetch_log = backend

    cache = CacheStore(
        backend,
        max_age_hours=profile.cache_max_age_hours,
        namespace=profile.name,
    )

    logger.debug(f"Using provider {profile.name} (cache {profile.cache_max_age_hours}h)")
    return WeatherOrchestrator(
        fetcher=build_fetcher(settings, session=session),
        normalizer=build_normalizer(settings),
        cache=cache,
        batch_size=profile.batch_size,
        batch_delay=profile.batch_delay,
        sleep=sleep,
        fetch_log=fetch_log,
    )
