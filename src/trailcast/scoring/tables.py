"""Lookup tables for trail scoring.

Soil response to rain is modelled as a step curve per soil category:
each step is ``(max_rain_mm, score)`` and rainfall above the last step
gets the tail score. Tables are validated when this module is imported
so a bad edit fails loudly instead of scoring silently with the wrong curve.
"""

from dataclasses import dataclass
from enum import Enum


class SoilCategory(str, Enum):
    """Soil categories with distinct rain response."""

    HEAVY_CLAY = "heavy_clay"
    CLAY_SILT = "clay_silt"
    CLAY = "clay"
    TERRA_ROSSA = "terra_rossa"
    LOAM = "loam"
    SANDY_LOAM = "sandy_loam"
    MIXED = "mixed"
    CHALK = "chalk"
    ROCK = "rock"
    SAND = "sand"
    DESERT = "desert"


DEFAULT_SOIL_CATEGORY = SoilCategory.MIXED


@dataclass(frozen=True)
class MudCurve:
    """Rainfall -> mud score step function for one soil category.

    Attributes:
        steps: ``(max_rain_mm, score)`` pairs, ascending by rain
        tail: Score once rainfall exceeds the last step
        mud_factor: Display multiplier for rain sensitivity
    """

    steps: tuple[tuple[float, float], ...]
    tail: float
    mud_factor: float

    def score(self, rain_mm: float) -> float:
        for max_rain, score in self.steps:
            if rain_mm <= max_rain:
                return score
        return self.tail


MUD_CURVES: dict[SoilCategory, MudCurve] = {
    # Heavy clay: unrideable past a few mm
    SoilCategory.HEAVY_CLAY: MudCurve(
        steps=((0.5, 90), (2, 60), (5, 25), (10, 5)), tail=0, mud_factor=2.5
    ),
    SoilCategory.CLAY_SILT: MudCurve(
        steps=((1, 90), (4, 60), (8, 30), (15, 10)), tail=0, mud_factor=2.0
    ),
    SoilCategory.CLAY: MudCurve(
        steps=((1, 90), (5, 45), (10, 10)), tail=0, mud_factor=2.2
    ),
    # Drains reasonably but gets slippery
    SoilCategory.TERRA_ROSSA: MudCurve(
        steps=((3, 95), (8, 70), (15, 40)), tail=15, mud_factor=1.8
    ),
    SoilCategory.LOAM: MudCurve(
        steps=((2, 95), (6, 70), (12, 45), (20, 20)), tail=5, mud_factor=1.5
    ),
    SoilCategory.SANDY_LOAM: MudCurve(
        steps=((4, 100), (10, 80), (20, 55), (30, 30)), tail=15, mud_factor=1.2
    ),
    SoilCategory.MIXED: MudCurve(
        steps=((3, 95), (10, 65), (20, 35)), tail=10, mud_factor=1.5
    ),
    SoilCategory.CHALK: MudCurve(
        steps=((5, 100), (15, 85), (25, 65)), tail=40, mud_factor=0.8
    ),
    SoilCategory.ROCK: MudCurve(
        steps=((5, 100), (15, 85), (25, 65)), tail=40, mud_factor=0.7
    ),
    SoilCategory.SAND: MudCurve(
        steps=((10, 100), (25, 85)), tail=65, mud_factor=0.6
    ),
    # Always ride unless flash floods
    SoilCategory.DESERT: MudCurve(
        steps=((20, 100), (40, 75)), tail=30, mud_factor=0.5
    ),
}

# Catalog soil descriptions -> category
SOIL_TYPE_CATEGORIES: dict[str, SoilCategory] = {
    "Heavy Clay": SoilCategory.HEAVY_CLAY,
    "Clay/Silt": SoilCategory.CLAY_SILT,
    "Clay": SoilCategory.CLAY,
    "Hamra": SoilCategory.CLAY,
    "Terra Rossa": SoilCategory.TERRA_ROSSA,
    "Loam": SoilCategory.LOAM,
    "Sandy Loam": SoilCategory.SANDY_LOAM,
    "Mixed": SoilCategory.MIXED,
    "Chalk": SoilCategory.CHALK,
    "Limestone": SoilCategory.CHALK,
    "Rock": SoilCategory.ROCK,
    "Sand/Loess": SoilCategory.SAND,
    "Sand": SoilCategory.SAND,
    "Loess": SoilCategory.SAND,
    "Desert": SoilCategory.DESERT,
}

# Points subtracted from the overall score when rocks are wet
ROCK_SLIP_PENALTIES: dict[str, int] = {
    "Basalt": 10,
    "Limestone": 8,
    "Chalk": 8,
    "Dolomite": 6,
    "Granite": 4,
    "Sandstone": 0,
}
DEFAULT_SLIP_PENALTY = 0

# Rainfall accumulation (mm) above which rocks count as wet
SLIP_RAIN_THRESHOLD_MM = 2.0


def soil_category(soil_type: str) -> SoilCategory:
    """Map a catalog soil description to its category (default: mixed)."""
    return SOIL_TYPE_CATEGORIES.get(soil_type, DEFAULT_SOIL_CATEGORY)


def is_known_soil_type(soil_type: str) -> bool:
    return soil_type in SOIL_TYPE_CATEGORIES


def slip_penalty_for(rock_type: str) -> int:
    return ROCK_SLIP_PENALTIES.get(rock_type, DEFAULT_SLIP_PENALTY)


def validate_tables() -> list[str]:
    """Check scoring tables for consistency.

    Returns:
        List of problems found (empty when the tables are valid)
    """
    issues = []

    for category in SoilCategory:
        if category not in MUD_CURVES:
            issues.append(f"No mud curve for soil category {category.value}")

    for category, curve in MUD_CURVES.items():
        if not curve.steps:
            issues.append(f"{category.value}: curve has no steps")
            continue

        thresholds = [t for t, _ in curve.steps]
        scores = [s for _, s in curve.steps] + [curve.tail]

        if thresholds != sorted(thresholds) or len(set(thresholds)) != len(thresholds):
            issues.append(f"{category.value}: thresholds must be strictly ascending")
        if any(b > a for a, b in zip(scores, scores[1:])):
            issues.append(f"{category.value}: scores must be non-increasing")
        if any(s < 0 or s > 100 for s in scores):
            issues.append(f"{category.value}: scores must be within 0-100")
        if curve.mud_factor <= 0:
            issues.append(f"{category.value}: mud_factor must be positive")

    for rock, penalty in ROCK_SLIP_PENALTIES.items():
        if penalty < 0 or penalty > 100:
            issues.append(f"{rock}: slip penalty must be within 0-100")

    return issues


_issues = validate_tables()
if _issues:
    raise ValueError(f"Invalid scoring tables: {_issues}")
