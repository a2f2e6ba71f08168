"""Runtime configuration for trailcast.

Product constants (drive-time model, ride start hour) are module-level.
Deployment switches (provider choice, credentials, cache location) come
from the environment via ``Settings.from_env()``.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from trailcast.utils.io import get_project_root

logger = logging.getLogger(__name__)

# Drive-time model
AVG_SPEED_KMH = 80  # no traffic, early morning
ROAD_FACTOR = 1.3  # roads are not straight lines
MAX_DRIVE_MINUTES = 75

# Local hour the ride starts; rainfall windows end here and the
# target temperature is sampled here.
RIDE_START_HOUR = 9
TEMP_TOLERANCE_HOURS = 3

# Furthest selectable target date (forecast horizon of the providers)
MAX_FORECAST_DAYS_AHEAD = 5

DEFAULT_PROVIDER = "openmeteo"
DEFAULT_TIMEZONE = "Asia/Jerusalem"
DEFAULT_HTTP_TIMEOUT = 20
DEFAULT_DB_PATH = get_project_root() / "data" / "cache" / "trailcast.duckdb"


@dataclass
class Settings:
    """Deployment settings.

    Attributes:
        provider: Forecast provider name ('openmeteo' or 'tomorrow')
        tomorrow_api_key: Tomorrow.io credential, server side only
        relay_url: Base URL of a relay that hides the credential
        db_path: DuckDB cache file
        timezone: Local timezone for providers that report UTC
        http_timeout: HTTP timeout in seconds
    """

    provider: str = DEFAULT_PROVIDER
    tomorrow_api_key: Optional[str] = None
    relay_url: Optional[str] = None
    db_path: Path = DEFAULT_DB_PATH
    timezone: str = DEFAULT_TIMEZONE
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        timeout_raw = env.get("TRAILCAST_HTTP_TIMEOUT")
        try:
            http_timeout = float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT
        except ValueError:
            logger.warning(
                f"Invalid TRAILCAST_HTTP_TIMEOUT={timeout_raw!r}, "
                f"using {DEFAULT_HTTP_TIMEOUT}s"
            )
            http_timeout = DEFAULT_HTTP_TIMEOUT

        db_path = env.get("TRAILCAST_DB_PATH")

        return cls(
            provider=env.get("TRAILCAST_PROVIDER", DEFAULT_PROVIDER).strip().lower(),
            tomorrow_api_key=env.get("TOMORROW_API_KEY") or None,
            relay_url=env.get("TRAILCAST_RELAY_URL") or None,
            db_path=Path(db_path) if db_path else DEFAULT_DB_PATH,
            timezone=env.get("TRAILCAST_TIMEZONE", DEFAULT_TIMEZONE),
            http_timeout=http_timeout,
        )
