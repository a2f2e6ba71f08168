"""Trail match scoring.

Pure functions: (Trail, WeatherFacts) -> MatchScore. Mud is weighted
highest because rideability is dominated by how the soil responds to
rain; comfort and drive time are secondary filters.
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

from trailcast.catalog.models import HOME_LOCATION, HomeLocation, Trail
from trailcast.config import AVG_SPEED_KMH, MAX_DRIVE_MINUTES, ROAD_FACTOR
from trailcast.scoring.tables import (
    MUD_CURVES,
    SLIP_RAIN_THRESHOLD_MM,
    SoilCategory,
    slip_penalty_for,
    soil_category,
)
from trailcast.weather.models import WeatherFacts

# (min_score, color) - first match wins
SCORE_COLORS = [
    (70, "green"),
    (40, "yellow"),
    (0, "red"),
]

# (min_score, label) - first match wins
STATUS_LABELS = [
    (80, "Perfect Conditions"),
    (70, "Good to Ride"),
    (55, "Rideable, Expect Mud"),
    (40, "Risky / Tacky"),
    (20, "Not Recommended"),
    (0, "Don't Go - Muddy"),
]

# (max_minutes, score) steps for drive distance
DISTANCE_STEPS = [(20, 100), (40, 90), (60, 75)]
DISTANCE_FLOOR = 50


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and comfort parameters for match scoring."""

    mud_weight: float = 0.5
    weather_weight: float = 0.3
    distance_weight: float = 0.2
    rain_probability_factor: float = 0.5
    rain_probability_max_penalty: float = 50
    comfort_temp_low: float = 5
    comfort_temp_high: float = 38
    penalty_per_degree: float = 5
    slip_penalty: bool = True


DEFAULT_CONFIG = ScoringConfig()


@dataclass(frozen=True)
class ScoreComponents:
    mud: int
    weather: int
    distance: int


@dataclass(frozen=True)
class MatchScore:
    """Composite rideability score with the facts that produced it."""

    overall: int
    components: ScoreComponents
    drive_minutes: int
    rainfall_accumulated: float
    rain_window_hours: int
    temperature: Optional[float]
    rain_probability: Optional[float]
    soil_category: str
    mud_factor: float
    rock_type: str
    slip_penalty: int = 0

    @property
    def color(self) -> str:
        return score_color(self.overall)

    @property
    def status(self) -> str:
        return status_label(self.overall)


def _round(value: float) -> int:
    """Round half up."""
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _finite(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _resolve_soil(soil: Union[SoilCategory, str]) -> SoilCategory:
    if isinstance(soil, SoilCategory):
        return soil
    try:
        return SoilCategory(soil)
    except ValueError:
        return soil_category(soil)


# -----------------------------------------------------------------------------
# Distance
# -----------------------------------------------------------------------------


def drive_minutes(trail: Trail, home: HomeLocation = HOME_LOCATION) -> int:
    """Estimated drive time from home in minutes.

    Straight-line distance scaled by a road factor, at an average speed.
    """
    straight_km = home.location.distance_to(trail.location)
    road_km = straight_km * ROAD_FACTOR
    return _round(road_km / AVG_SPEED_KMH * 60)


def within_range(
    trail: Trail,
    home: HomeLocation = HOME_LOCATION,
    max_minutes: int = MAX_DRIVE_MINUTES,
) -> bool:
    return drive_minutes(trail, home) <= max_minutes


def distance_score(minutes: float) -> float:
    """Full score for short drives, stepping down, never below the floor."""
    minutes = max(0.0, minutes)
    for max_minutes, score in DISTANCE_STEPS:
        if minutes <= max_minutes:
            return float(score)
    return float(max(DISTANCE_FLOOR, 100 - minutes))


# -----------------------------------------------------------------------------
# Mud and weather
# -----------------------------------------------------------------------------


def mud_score(soil: Union[SoilCategory, str], rainfall_mm: Optional[float]) -> float:
    """Score 0-100 for mud, 100 meaning dry.

    Args:
        soil: Soil category, category value, or catalog soil type
        rainfall_mm: Accumulated rainfall; None counts as dry

    Returns:
        Step-curve score for the soil category (unknown soils: mixed)
    """
    rain = _finite(rainfall_mm)
    rain = max(0.0, rain) if rain is not None else 0.0
    curve = MUD_CURVES[_resolve_soil(soil)]
    return _clamp(curve.score(rain))


def weather_comfort_score(
    facts: WeatherFacts, config: ScoringConfig = DEFAULT_CONFIG
) -> float:
    """Score 0-100 for riding comfort on the target date.

    Rain probability costs up to ``rain_probability_max_penalty``;
    each degree outside the comfort band costs ``penalty_per_degree``.
    Missing fields cost nothing.
    """
    score = 100.0

    probability = _finite(facts.target.rain_probability)
    if probability is not None:
        probability = _clamp(probability)
        score -= min(
            probability * config.rain_probability_factor,
            config.rain_probability_max_penalty,
        )

    temperature = _finite(facts.target.temperature)
    if temperature is not None:
        if temperature < config.comfort_temp_low:
            score -= (config.comfort_temp_low - temperature) * config.penalty_per_degree
        elif temperature > config.comfort_temp_high:
            score -= (temperature - config.comfort_temp_high) * config.penalty_per_degree

    return _clamp(score)


def slip_penalty(
    trail: Trail, rainfall_mm: Optional[float], config: ScoringConfig = DEFAULT_CONFIG
) -> int:
    """Points lost to wet rock, 0 when dry or when disabled."""
    rain = _finite(rainfall_mm)
    if not config.slip_penalty or rain is None or rain < SLIP_RAIN_THRESHOLD_MM:
        return 0
    return slip_penalty_for(trail.rock_type)


# -----------------------------------------------------------------------------
# Composite
# -----------------------------------------------------------------------------


def match_score(
    trail: Trail,
    facts: WeatherFacts,
    config: ScoringConfig = DEFAULT_CONFIG,
    home: HomeLocation = HOME_LOCATION,
) -> MatchScore:
    """Combine mud, weather and distance into a 0-100 match score."""
    category = trail.soil_category
    minutes = drive_minutes(trail, home)

    mud = mud_score(category, facts.rainfall_accumulated)
    weather = weather_comfort_score(facts, config)
    distance = distance_score(minutes)
    penalty = slip_penalty(trail, facts.rainfall_accumulated, config)

    raw = (
        mud * config.mud_weight
        + weather * config.weather_weight
        + distance * config.distance_weight
        - penalty
    )

    return MatchScore(
        overall=_round(_clamp(raw)),
        components=ScoreComponents(
            mud=_round(mud), weather=_round(weather), distance=_round(distance)
        ),
        drive_minutes=minutes,
        rainfall_accumulated=_finite(facts.rainfall_accumulated) or 0.0,
        rain_window_hours=facts.rain_window_hours,
        temperature=_finite(facts.target.temperature),
        rain_probability=_finite(facts.target.rain_probability),
        soil_category=category.value,
        mud_factor=MUD_CURVES[category].mud_factor,
        rock_type=trail.rock_type,
        slip_penalty=penalty,
    )


def score_color(score: float) -> str:
    """green / yellow / red."""
    for min_score, color in SCORE_COLORS:
        if score >= min_score:
            return color
    return SCORE_COLORS[-1][1]


def status_label(score: float) -> str:
    for min_score, label in STATUS_LABELS:
        if score >= min_score:
            return label
    return STATUS_LABELS[-1][1]
