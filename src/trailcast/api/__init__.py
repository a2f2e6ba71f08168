"""HTTP API for trailcast.

Note: create_app is lazy-loaded so schemas can be imported without
FastAPI installed.
"""

from trailcast.api.schemas import (
    ErrorResponse,
    HealthResponse,
    RecommendationItem,
    RecommendationsResponse,
    ScoreResponse,
    TrailInfo,
    WeatherSummary,
)


def __getattr__(name):
    """Lazy load FastAPI-dependent components."""
    if name == "create_app":
        from trailcast.api.app import create_app

        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "create_app",
    "ErrorResponse",
    "HealthResponse",
    "RecommendationItem",
    "RecommendationsResponse",
    "ScoreResponse",
    "TrailInfo",
    "WeatherSummary",
]
