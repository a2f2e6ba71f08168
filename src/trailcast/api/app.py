"""FastAPI application for trail recommendations.

Provides REST API endpoints for:
- Ranked trail recommendations for a date
- The trail catalog
- A Tomorrow.io relay that keeps the API key server side

Example:
    >>> from trailcast.api import create_app
    >>> app = create_app()
    >>> # Run with: uvicorn trailcast.api.app:app --reload
"""

import logging
from datetime import date
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trailcast.api.schemas import (
    ErrorResponse,
    HealthResponse,
    RecommendationItem,
    RecommendationsResponse,
    ScoreResponse,
    TrailInfo,
    WeatherSummary,
)
from trailcast.catalog.models import HOME_LOCATION, Trail
from trailcast.config import Settings
from trailcast.errors import MalformedPayloadError, NetworkError
from trailcast.recommender import (
    RecommendationSet,
    Recommender,
    default_target_date,
    is_selectable_date,
    max_target_date,
)
from trailcast.scoring.engine import drive_minutes, within_range
from trailcast.utils.geo import Point
from trailcast.weather.fetcher import TomorrowFetcher
from trailcast.weather.providers import build_orchestrator

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Relay responses may be cached at the edge for 30 minutes
RELAY_CACHE_CONTROL = "s-maxage=1800, stale-while-revalidate=3600"


def trail_info(trail: Trail) -> TrailInfo:
    return TrailInfo(
        id=trail.id,
        name=trail.name,
        lat=trail.lat,
        lng=trail.lng,
        soil_type=trail.soil_type,
        rock_type=trail.rock_type,
        length_km=trail.length_km,
        difficulty=trail.difficulty,
        region=trail.region,
        area=trail.area,
        description=trail.description,
        drive_minutes=drive_minutes(trail, HOME_LOCATION),
        in_range=within_range(trail, HOME_LOCATION),
    )


def to_response(result: RecommendationSet) -> RecommendationsResponse:
    """Convert a RecommendationSet to its API schema."""
    items = []
    for rec in result.recommendations:
        score = rec.score
        target = rec.facts.target
        items.append(
            RecommendationItem(
                trail=trail_info(rec.trail),
                score=ScoreResponse(
                    overall=score.overall,
                    color=score.color,
                    status=score.status,
                    mud=score.components.mud,
                    weather=score.components.weather,
                    distance=score.components.distance,
                    slip_penalty=score.slip_penalty,
                ),
                weather=WeatherSummary(
                    rainfall_accumulated=score.rainfall_accumulated,
                    rain_window_hours=score.rain_window_hours,
                    temperature=score.temperature,
                    temp_max=target.temp_max,
                    rain_probability=score.rain_probability,
                    source=rec.source.value,
                ),
            )
        )

    return RecommendationsResponse(
        target_date=result.target_date,
        generated_at=result.generated_at,
        from_cache_only=result.from_cache_only,
        all_failed=result.all_failed,
        counts=result.color_counts,
        recommendations=items,
    )


def create_app(
    recommender: Optional[Recommender] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Create FastAPI application.

    Args:
        recommender: Recommender to serve. Built from settings on first
            request when not provided.
        settings: Deployment settings (defaults to the environment)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Trailcast API",
        description="Rideability scores for mountain-bike trails from live forecasts",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    state = {"recommender": recommender, "settings": settings}

    def get_settings() -> Settings:
        if state["settings"] is None:
            state["settings"] = Settings.from_env()
        return state["settings"]

    def get_recommender() -> Recommender:
        if state["recommender"] is None:
            state["recommender"] = Recommender(build_orchestrator(get_settings()))
            logger.info(f"Recommender ready (provider {get_settings().provider})")
        return state["recommender"]

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with custom response."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
            ).model_dump(),
        )

    @app.get("/", tags=["info"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Trailcast API",
            "version": API_VERSION,
            "docs": "/docs",
        }

    @app.get("/health", response_model=HealthResponse, tags=["info"])
    def health_check():
        """Health check endpoint."""
        cache = get_recommender().orchestrator.cache
        return HealthResponse(
            status="healthy",
            provider=get_settings().provider,
            cache_entries=len(cache.keys()),
            version=API_VERSION,
        )

    @app.get("/trails", response_model=list[TrailInfo], tags=["trails"])
    def list_trails():
        """All catalog trails with drive time from home."""
        return [trail_info(t) for t in get_recommender().trails]

    @app.get(
        "/recommendations",
        response_model=RecommendationsResponse,
        responses={400: {"model": ErrorResponse, "description": "Date out of range"}},
        tags=["trails"],
    )
    def recommendations(
        target_date: Optional[date] = Query(default=None, alias="date"),
        refresh: bool = Query(default=False, description="Fetch even when cached"),
    ):
        """Rank in-range trails for a date (default tomorrow).

        Without ``refresh``, cached forecasts are re-scored for the date
        and the providers are only called when nothing is cached.
        """
        target_date = target_date or default_target_date()
        if not is_selectable_date(target_date):
            raise HTTPException(
                status_code=400,
                detail=f"Date must be between today and {max_target_date()}",
            )

        recommender = get_recommender()
        if refresh:
            result = recommender.recommend(target_date)
        else:
            result = recommender.change_date(target_date)
        return to_response(result)

    @app.get(
        "/api/weather",
        responses={
            400: {"model": ErrorResponse, "description": "Missing lat/lng"},
            500: {"model": ErrorResponse, "description": "Relay not configured"},
        },
        tags=["relay"],
    )
    def weather_relay(lat: Optional[float] = None, lng: Optional[float] = None):
        """Forward a Tomorrow.io forecast request without exposing the key."""
        if lat is None or lng is None:
            raise HTTPException(status_code=400, detail="Missing lat/lng parameters")
        settings = get_settings()
        if not settings.tomorrow_api_key:
            raise HTTPException(status_code=500, detail="API key not configured")

        fetcher = TomorrowFetcher(
            api_key=settings.tomorrow_api_key, timeout=settings.http_timeout
        )
        try:
            payload = fetcher.fetch(Point(lat, lng))
        except NetworkError as e:
            status_code = e.status_code or 500
            logger.warning(f"Relay request failed: {e}")
            return JSONResponse(
                status_code=status_code,
                content=ErrorResponse(
                    error=f"HTTP_{status_code}",
                    message=f"Tomorrow.io API error: {status_code}",
                    detail=e.details or None,
                ).model_dump(),
            )
        except MalformedPayloadError as e:
            raise HTTPException(status_code=502, detail=str(e))

        return JSONResponse(
            content=payload,
            headers={"Cache-Control": RELAY_CACHE_CONTROL},
        )

    return app


# Default app instance for uvicorn
app = create_app()
