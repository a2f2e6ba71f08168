"""trailcast: which mountain-bike trails are rideable on a given day.

Combines static trail metadata (soil, rock, location) with live weather
forecasts into a 0-100 match score per trail.
"""

__version__ = "0.1.0"

from trailcast.catalog import HOME_LOCATION, TRAILS_DATA, HomeLocation, Trail, load_trails
from trailcast.config import Settings
from trailcast.errors import CacheUnavailable, MalformedPayloadError, NetworkError, WeatherError
from trailcast.recommender import RecommendationSet, Recommender, TrailRecommendation
from trailcast.scoring import MatchScore, match_score
from trailcast.weather import WeatherFacts, WeatherOrchestrator, build_orchestrator

__all__ = [
    "CacheUnavailable",
    "HOME_LOCATION",
    "HomeLocation",
    "MalformedPayloadError",
    "MatchScore",
    "NetworkError",
    "RecommendationSet",
    "Recommender",
    "Settings",
    "TRAILS_DATA",
    "Trail",
    "TrailRecommendation",
    "WeatherError",
    "WeatherFacts",
    "WeatherOrchestrator",
    "build_orchestrator",
    "load_trails",
    "match_score",
]
