"""Weather acquisition: grouping, fetching, normalization, orchestration."""

from trailcast.weather.fetcher import (
    BatchOutcome,
    ForecastFetcher,
    OpenMeteoFetcher,
    TomorrowFetcher,
    fetch_in_batches,
)
from trailcast.weather.grouping import GeoGrouper, TrailGroup, group_trails
from trailcast.weather.models import (
    CurrentConditions,
    DailyRainfall,
    HourlyTemperature,
    RainfallSample,
    TargetDayWeather,
    WeatherFacts,
)
from trailcast.weather.normalizer import (
    OpenMeteoNormalizer,
    TomorrowNormalizer,
    WeatherNormalizer,
)
from trailcast.weather.orchestrator import (
    FactSource,
    GroupResult,
    WeatherOrchestrator,
    WeatherRun,
)
from trailcast.weather.providers import PROVIDERS, ProviderProfile, build_orchestrator, get_profile

__all__ = [
    "BatchOutcome",
    "CurrentConditions",
    "DailyRainfall",
    "FactSource",
    "ForecastFetcher",
    "GeoGrouper",
    "GroupResult",
    "HourlyTemperature",
    "OpenMeteoFetcher",
    "OpenMeteoNormalizer",
    "PROVIDERS",
    "ProviderProfile",
    "RainfallSample",
    "TargetDayWeather",
    "TomorrowFetcher",
    "TomorrowNormalizer",
    "TrailGroup",
    "WeatherFacts",
    "WeatherNormalizer",
    "WeatherOrchestrator",
    "WeatherRun",
    "build_orchestrator",
    "fetch_in_batches",
    "get_profile",
    "group_trails",
]
