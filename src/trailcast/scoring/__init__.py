"""Trail scoring: soil tables and the match score engine."""

from trailcast.scoring.engine import (
    DEFAULT_CONFIG,
    MatchScore,
    ScoreComponents,
    ScoringConfig,
    distance_score,
    drive_minutes,
    match_score,
    mud_score,
    score_color,
    slip_penalty,
    status_label,
    weather_comfort_score,
    within_range,
)
from trailcast.scoring.tables import MUD_CURVES, SOIL_TYPE_CATEGORIES, SoilCategory, soil_category

__all__ = [
    "DEFAULT_CONFIG",
    "MUD_CURVES",
    "MatchScore",
    "SOIL_TYPE_CATEGORIES",
    "ScoreComponents",
    "ScoringConfig",
    "SoilCategory",
    "distance_score",
    "drive_minutes",
    "match_score",
    "mud_score",
    "score_color",
    "slip_penalty",
    "soil_category",
    "status_label",
    "weather_comfort_score",
    "within_range",
]
