"""Command-line trail recommendations.

Usage:
    python -m trailcast.cli                    # Tomorrow's ranking
    python -m trailcast.cli --date 2026-10-20  # A specific date
    python -m trailcast.cli --rescore          # Prefer cached forecasts
    python -m trailcast.cli --status           # Cache status
"""

import argparse
import dataclasses
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from trailcast.cache.database import CacheDatabase
from trailcast.cache.store import MemoryBackend
from trailcast.config import DEFAULT_DB_PATH, Settings
from trailcast.errors import CacheUnavailable
from trailcast.recommender import (
    RecommendationSet,
    Recommender,
    default_target_date,
    is_selectable_date,
    max_target_date,
)
from trailcast.weather.providers import PROVIDERS, build_orchestrator

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value} (expected YYYY-MM-DD)") from None


def print_recommendations(result: RecommendationSet) -> None:
    """Print a ranked table of trails."""
    counts = result.color_counts
    print()
    print("=" * 78)
    print(f"Trail conditions for {result.target_date:%A %Y-%m-%d}")
    print(
        f"{counts['green']} good, {counts['yellow']} fair, {counts['red']} poor"
        + (" (from cache)" if result.from_cache_only else "")
    )
    print("=" * 78)

    for rec in result.recommendations:
        score = rec.score
        temp = f"{score.temperature:.0f}C" if score.temperature is not None else "--"
        print(
            f"  {score.overall:>3}  {rec.trail.name:<30} {score.status:<26}"
            f" {score.rainfall_accumulated:>5.1f}mm {temp:>4} {score.drive_minutes:>3}min"
        )

    if result.all_failed:
        print()
        print("Could not load weather data. Scores assume no rain.")
    print("=" * 78)


def print_status(db: CacheDatabase) -> None:
    """Print cache statistics and recent fetches."""
    stats = db.get_stats()
    print()
    print("=" * 60)
    print("Trailcast Cache Status")
    print("=" * 60)
    print(f"Database: {stats['db_path']}")
    print(f"Cached payloads: {stats['entry_count']}")
    if stats["latest_update"]:
        print(f"Latest update: {stats['latest_update']}")
    print(f"Fetches logged: {stats['fetch_count']}")

    recent = db.get_recent_fetches(limit=5)
    if recent:
        print()
        print("Recent fetches:")
        print("-" * 60)
        for fetch in recent:
            print(
                f"  {fetch['timestamp']}  {fetch['source']:<12} {fetch['status']:<8}"
                f" {fetch['group_count']} groups {fetch['duration_ms']}ms"
            )
    print("=" * 60)


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Rank mountain-bike trails by expected riding conditions",
        epilog="""
Environment:
  TRAILCAST_PROVIDER   openmeteo (default) or tomorrow
  TOMORROW_API_KEY     Tomorrow.io key
  TRAILCAST_RELAY_URL  Relay that holds the Tomorrow.io key
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--date",
        type=_parse_date,
        default=None,
        help="Ride date YYYY-MM-DD (default: tomorrow)",
    )
    parser.add_argument(
        "--provider",
        choices=sorted(PROVIDERS),
        default=None,
        help="Forecast provider (default: TRAILCAST_PROVIDER or openmeteo)",
    )
    parser.add_argument(
        "--rescore",
        action="store_true",
        help="Score from cached forecasts, fetching only if none are cached",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show current cache status",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"Database path (default: {DEFAULT_DB_PATH})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )

    args = parser.parse_args(argv)

    # Configure logging
    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    settings = Settings.from_env()
    if args.provider:
        settings = dataclasses.replace(settings, provider=args.provider)
    if args.db:
        settings = dataclasses.replace(settings, db_path=args.db)

    target_date = args.date or default_target_date()
    if not is_selectable_date(target_date):
        parser.error(f"--date must be between today and {max_target_date()}")

    try:
        db = CacheDatabase(settings.db_path)
    except CacheUnavailable as e:
        if args.status:
            logger.error(f"Cache database unavailable: {e}")
            return 1
        logger.warning(f"Cache database unavailable, caching in memory: {e}")
        db = None

    try:
        if args.status:
            print_status(db)
            return 0

        try:
            orchestrator = build_orchestrator(
                settings, backend=db if db is not None else MemoryBackend()
            )
        except ValueError as e:
            logger.error(f"Configuration error: {e}")
            return 2

        recommender = Recommender(orchestrator)
        if args.rescore:
            result = recommender.change_date(target_date)
        else:
            result = recommender.recommend(target_date)

        if not args.quiet:
            print_recommendations(result)
        return 1 if result.all_failed else 0

    except CacheUnavailable as e:
        logger.error(f"Cache database unavailable: {e}")
        return 1

    finally:
        if db is not None:
            db.close()


if __name__ == "__main__":
    sys.exit(main())
