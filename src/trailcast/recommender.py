"""Trail recommendations for a target ride date."""

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from trailcast.catalog.models import HOME_LOCATION, HomeLocation, Trail, load_trails
from trailcast.config import MAX_FORECAST_DAYS_AHEAD
from trailcast.scoring.engine import DEFAULT_CONFIG, MatchScore, ScoringConfig, match_score, within_range
from trailcast.weather.models import WeatherFacts
from trailcast.weather.orchestrator import FactSource, WeatherOrchestrator, WeatherRun

logger = logging.getLogger(__name__)


def default_target_date(today: Optional[date] = None) -> date:
    """Tomorrow."""
    return (today or date.today()) + timedelta(days=1)


def max_target_date(today: Optional[date] = None) -> date:
    return (today or date.today()) + timedelta(days=MAX_FORECAST_DAYS_AHEAD)


def is_selectable_date(target_date: date, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return today <= target_date <= max_target_date(today)


@dataclass
class TrailRecommendation:
    trail: Trail
    score: MatchScore
    facts: WeatherFacts
    source: FactSource


@dataclass
class RecommendationSet:
    """Scored trails for one date, best first."""

    target_date: date
    recommendations: list[TrailRecommendation] = field(default_factory=list)
    from_cache_only: bool = False
    all_failed: bool = False
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def color_counts(self) -> dict[str, int]:
        counts = Counter(r.score.color for r in self.recommendations)
        return {color: counts.get(color, 0) for color in ("green", "yellow", "red")}

    def get(self, trail_id: str) -> Optional[TrailRecommendation]:
        for rec in self.recommendations:
            if rec.trail.id == trail_id:
                return rec
        return None


class Recommender:
    """Score in-range trails for a date.

    Example:
        >>> recommender = Recommender(build_orchestrator())
        >>> result = recommender.recommend(date(2026, 10, 18))
        >>> result.recommendations[0].trail.name
        'Sugar Trail (Arava)'
    """

    def __init__(
        self,
        orchestrator: WeatherOrchestrator,
        trails: Optional[Iterable[Trail]] = None,
        home: HomeLocation = HOME_LOCATION,
        config: ScoringConfig = DEFAULT_CONFIG,
    ):
        self.orchestrator = orchestrator
        self.trails = load_trails(trails)
        self.home = home
        self.config = config

    def in_range_trails(self) -> list[Trail]:
        return [t for t in self.trails if within_range(t, self.home)]

    def _score(self, trails: list[Trail], run: WeatherRun, from_cache_only: bool) -> RecommendationSet:
        facts = run.facts
        sources = run.sources
        recommendations = [
            TrailRecommendation(
                trail=trail,
                score=match_score(trail, facts[trail.id], self.config, self.home),
                facts=facts[trail.id],
                source=sources[trail.id],
            )
            for trail in trails
            if trail.id in facts
        ]
        recommendations.sort(key=lambda r: (-r.score.overall, r.score.drive_minutes))

        return RecommendationSet(
            target_date=run.target_date,
            recommendations=recommendations,
            from_cache_only=from_cache_only,
            all_failed=run.all_failed,
        )

    def recommend(self, target_date: date, now: Optional[datetime] = None) -> RecommendationSet:
        """Fetch weather for all in-range trails and score them."""
        trails = self.in_range_trails()
        run = self.orchestrator.fetch_all(trails, target_date, now=now)
        if run.all_failed:
            logger.error(f"Could not load weather for any of {len(trails)} trails")
        return self._score(trails, run, from_cache_only=False)

    def change_date(self, target_date: date, now: Optional[datetime] = None) -> RecommendationSet:
        """Re-score from cached payloads; fetch only when nothing is cached."""
        trails = self.in_range_trails()
        run = self.orchestrator.rescore_from_cache(trails, target_date, now=now)
        if run is None:
            return self.recommend(target_date, now=now)
        return self._score(trails, run, from_cache_only=True)
