"""Pydantic schemas for API responses."""

from datetime import date as date_type
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response.

    Attributes:
        status: Service status ('healthy')
        provider: Configured forecast provider
        cache_entries: Live cached payloads for the provider
        version: API version
    """

    status: str = Field(default="healthy", description="Service status")
    provider: str = Field(..., description="Forecast provider")
    cache_entries: int = Field(default=0, ge=0, description="Live cache entries")
    version: str = Field(default="1.0.0", description="API version")


class ErrorResponse(BaseModel):
    """Error response schema.

    Attributes:
        error: Error type/code
        message: Human-readable error message
        detail: Additional error details (e.g. truncated provider body)
    """

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Additional details")


class TrailInfo(BaseModel):
    """Static trail metadata plus drive time from home."""

    id: str
    name: str
    lat: float
    lng: float
    soil_type: str
    rock_type: str
    length_km: float = Field(..., ge=0)
    difficulty: str
    region: str
    area: str = ""
    description: str = ""
    drive_minutes: int = Field(..., ge=0, description="Estimated drive from home")
    in_range: bool = Field(..., description="Within the maximum drive time")


class ScoreResponse(BaseModel):
    """Match score with its components.

    Attributes:
        overall: Composite 0-100 score
        color: 'green', 'yellow' or 'red'
        status: Human-readable label
        mud: Mud sub-score
        weather: Weather comfort sub-score
        distance: Drive distance sub-score
        slip_penalty: Points removed for wet slippery rock
    """

    overall: int = Field(..., ge=0, le=100)
    color: str
    status: str
    mud: int = Field(..., ge=0, le=100)
    weather: int = Field(..., ge=0, le=100)
    distance: int = Field(..., ge=0, le=100)
    slip_penalty: int = Field(default=0, ge=0)


class WeatherSummary(BaseModel):
    """Weather facts that fed a score."""

    rainfall_accumulated: float = Field(..., description="Rain in look-back window (mm)")
    rain_window_hours: int = Field(..., ge=0)
    temperature: Optional[float] = Field(default=None, description="Ride-start temperature (C)")
    temp_max: Optional[float] = None
    rain_probability: Optional[float] = Field(default=None, description="Percent")
    source: str = Field(..., description="'api', 'cache' or 'fallback'")


class RecommendationItem(BaseModel):
    trail: TrailInfo
    score: ScoreResponse
    weather: WeatherSummary


class RecommendationsResponse(BaseModel):
    """Ranked trails for a target date.

    Attributes:
        target_date: Ride date
        from_cache_only: Scores were computed without any fetch
        all_failed: No weather could be loaded for any trail
        counts: Number of trails per score color
        recommendations: Trails, best first
    """

    target_date: date_type
    generated_at: datetime
    from_cache_only: bool = False
    all_failed: bool = False
    counts: dict[str, int] = Field(default_factory=dict)
    recommendations: list[RecommendationItem] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "target_date": "2026-10-18",
                    "generated_at": "2026-10-17T18:00:00",
                    "from_cache_only": False,
                    "all_failed": False,
                    "counts": {"green": 9, "yellow": 4, "red": 2},
                    "recommendations": [],
                }
            ]
        }
    }
