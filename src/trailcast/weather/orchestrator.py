"""Fetch-or-cache-or-fallback weather acquisition for a set of trails.

Per group of nearby trails:
    fetch -> (success | cache fallback | zero fallback) -> normalize
A failed group degrades on its own; the run as a whole never fails.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable, Optional

from trailcast.cache.database import CacheDatabase
from trailcast.cache.store import CacheStore
from trailcast.catalog.models import Trail
from trailcast.errors import CacheUnavailable, MalformedPayloadError, WeatherError
from trailcast.weather.fetcher import ForecastFetcher, fetch_in_batches
from trailcast.weather.grouping import GeoGrouper, TrailGroup
from trailcast.weather.models import WeatherFacts
from trailcast.weather.normalizer import WeatherNormalizer

logger = logging.getLogger(__name__)


class FactSource(str, Enum):
    """Where a group's weather facts came from."""

    API = "api"
    CACHE = "cache"
    FALLBACK = "fallback"


@dataclass
class GroupResult:
    group: TrailGroup
    facts: WeatherFacts
    source: FactSource
    error: Optional[str] = None


@dataclass
class WeatherRun:
    """Weather facts for every trail in a scoring request."""

    target_date: date
    groups: list[GroupResult] = field(default_factory=list)

    @property
    def facts(self) -> dict[str, WeatherFacts]:
        """Trail id -> facts."""
        return {
            trail.id: result.facts
            for result in self.groups
            for trail in result.group.trails
        }

    @property
    def sources(self) -> dict[str, FactSource]:
        return {
            trail.id: result.source
            for result in self.groups
            for trail in result.group.trails
        }

    def _count(self, source: FactSource) -> int:
        return sum(1 for r in self.groups if r.source == source)

    @property
    def fresh_count(self) -> int:
        return self._count(FactSource.API)

    @property
    def cached_count(self) -> int:
        return self._count(FactSource.CACHE)

    @property
    def fallback_count(self) -> int:
        return self._count(FactSource.FALLBACK)

    @property
    def all_failed(self) -> bool:
        """True when every group fell back to empty facts."""
        return bool(self.groups) and self.fallback_count == len(self.groups)

    def __str__(self) -> str:
        return (
            f"Weather for {self.target_date}: {self.fresh_count} fresh, "
            f"{self.cached_count} cached, {self.fallback_count} fallback "
            f"({len(self.groups)} groups)"
        )


class WeatherOrchestrator:
    """Compose grouping, batched fetching, caching and normalization.

    Example:
        >>> orchestrator = WeatherOrchestrator(OpenMeteoFetcher(), OpenMeteoNormalizer(), CacheStore())
        >>> run = orchestrator.fetch_all(TRAILS_DATA, date(2026, 10, 18))
        >>> print(run)
        Weather for 2026-10-18: 18 fresh, 0 cached, 0 fallback (18 groups)
    """

    def __init__(
        self,
        fetcher: ForecastFetcher,
        normalizer: WeatherNormalizer,
        cache: CacheStore,
        grouper: Optional[GeoGrouper] = None,
        batch_size: int = 5,
        batch_delay: float = 0.3,
        sleep: Callable[[float], None] = time.sleep,
        fetch_log: Optional[CacheDatabase] = None,
    ):
        self.fetcher = fetcher
        self.normalizer = normalizer
        self.cache = cache
        self.grouper = grouper or GeoGrouper()
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self.sleep = sleep
        self.fetch_log = fetch_log

    def _empty(self, target_date: date) -> WeatherFacts:
        return WeatherFacts.empty(target_date, self.normalizer.rain_window_hours)

    def _from_cache(
        self,
        group: TrailGroup,
        target_date: date,
        now: Optional[datetime],
    ) -> Optional[WeatherFacts]:
        raw = self.cache.get(group.key)
        if raw is None:
            return None
        try:
            return self.normalizer.parse(raw, target_date, now=now)
        except MalformedPayloadError as e:
            logger.warning(f"Cached payload for {group.key} is unusable: {e}")
            return None

    def fetch_all(
        self,
        trails: Iterable[Trail],
        target_date: date,
        now: Optional[datetime] = None,
    ) -> WeatherRun:
        """Fetch, cache and normalize weather for all trails.

        Args:
            trails: Trails to cover
            target_date: Ride date
            now: Moment of parsing, for "current" conditions

        Returns:
            WeatherRun with facts for every trail
        """
        groups = self.grouper.group(trails)
        start_time = time.time()
        logger.info(
            f"Fetching {self.fetcher.name} weather for {len(groups)} groups "
            f"(target {target_date})"
        )

        outcomes = fetch_in_batches(
            groups,
            lambda g: self.fetcher.fetch(g.representative.location),
            batch_size=self.batch_size,
            delay_seconds=self.batch_delay,
            sleep=self.sleep,
        )

        run = WeatherRun(target_date=target_date)
        for outcome in outcomes:
            group = outcome.item
            error: Optional[WeatherError] = outcome.error

            if outcome.ok:
                try:
                    facts = self.normalizer.parse(outcome.payload, target_date, now=now)
                except MalformedPayloadError as e:
                    error = e
                else:
                    self.cache.put(group.key, outcome.payload)
                    run.groups.append(GroupResult(group, facts, FactSource.API))
                    continue

            cached = self._from_cache(group, target_date, now)
            if cached is not None:
                logger.warning(
                    f"{group.representative.name}: using cached data ({error})"
                )
                run.groups.append(GroupResult(group, cached, FactSource.CACHE, str(error)))
            else:
                logger.warning(f"{group.representative.name}: no data ({error})")
                run.groups.append(
                    GroupResult(group, self._empty(target_date), FactSource.FALLBACK, str(error))
                )

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"Done: {run} in {duration_ms}ms")
        self._log_fetch(run, duration_ms)
        return run

    def rescore_from_cache(
        self,
        trails: Iterable[Trail],
        target_date: date,
        now: Optional[datetime] = None,
    ) -> Optional[WeatherRun]:
        """Re-normalize cached payloads for a new date without any fetch.

        Returns:
            WeatherRun covering only groups with a live cache entry, or
            None when no group has one
        """
        run = WeatherRun(target_date=target_date)
        for group in self.grouper.group(trails):
            facts = self._from_cache(group, target_date, now)
            if facts is not None:
                run.groups.append(GroupResult(group, facts, FactSource.CACHE))

        if not run.groups:
            logger.info(f"No cached weather usable for {target_date}")
            return None

        logger.info(f"Re-scored {len(run.groups)} groups from cache for {target_date}")
        return run

    def _log_fetch(self, run: WeatherRun, duration_ms: int) -> None:
        if self.fetch_log is None:
            return
        errors = [r.error for r in run.groups if r.error]
        try:
            self.fetch_log.log_fetch(
                source=self.fetcher.name,
                status="error" if run.all_failed else "success",
                group_count=len(run.groups),
                duration_ms=duration_ms,
                error_message="; ".join(errors)[:500] if errors else None,
            )
        except CacheUnavailable as e:
            logger.warning(f"Could not record fetch log: {e}")
