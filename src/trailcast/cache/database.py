"""DuckDB backing store for the weather cache."""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import duckdb

from trailcast.config import DEFAULT_DB_PATH
from trailcast.errors import CacheUnavailable

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS seq_fetch_log_id START 1;

-- Raw provider responses, one row per key
CREATE TABLE IF NOT EXISTS weather_cache (
    key VARCHAR PRIMARY KEY,
    value VARCHAR NOT NULL,
    updated_at TIMESTAMP NOT NULL
);

-- Fetch log for debugging/monitoring
CREATE TABLE IF NOT EXISTS fetch_log (
    id INTEGER DEFAULT nextval('seq_fetch_log_id') PRIMARY KEY,
    source VARCHAR NOT NULL,
    timestamp TIMESTAMP NOT NULL,
    status VARCHAR NOT NULL,
    group_count INTEGER,
    duration_ms INTEGER,
    error_message VARCHAR
);

CREATE INDEX IF NOT EXISTS idx_fetch_log_time ON fetch_log(timestamp);
"""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CacheDatabase:
    """Persistent key -> string store backed by DuckDB.

    Every duckdb failure surfaces as CacheUnavailable so callers can
    degrade to running without a cache.

    Example:
        >>> db = CacheDatabase()
        >>> db.set("openmeteo:32.25,34.90", '{"raw": {}, "stored_at": 0}')
        >>> db.get("openmeteo:32.25,34.90")
        '{"raw": {}, "stored_at": 0}'
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize database connection.

        Args:
            db_path: Path to DuckDB file. Creates if doesn't exist.
        """
        self.db_path = Path(db_path or DEFAULT_DB_PATH)
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheUnavailable(f"Cannot create cache directory: {e}") from e

        self._conn = None
        self._init_schema()

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get database connection (lazy initialization with retry)."""
        if self._conn is None:
            self._conn = self._connect_with_retry()
        return self._conn

    def _connect_with_retry(self, max_retries: int = 3) -> duckdb.DuckDBPyConnection:
        """Connect to database with retry logic for lock handling."""
        last_error = None
        for attempt in range(max_retries):
            try:
                return duckdb.connect(str(self.db_path))
            except duckdb.IOException as e:
                last_error = e
                if "lock" in str(e).lower() and attempt < max_retries - 1:
                    wait_time = 0.5 * (2 ** attempt)
                    logger.warning(f"Database locked, retrying in {wait_time}s...")
                    time.sleep(wait_time)
                else:
                    raise CacheUnavailable(f"Cannot open cache database: {e}") from e
            except duckdb.Error as e:
                raise CacheUnavailable(f"Cannot open cache database: {e}") from e
        raise CacheUnavailable(f"Cannot open cache database: {last_error}")

    def _execute(self, sql: str, params: Optional[list] = None):
        try:
            return self.conn.execute(sql, params or [])
        except duckdb.Error as e:
            raise CacheUnavailable(f"Cache database error: {e}") from e

    def _init_schema(self) -> None:
        """Initialize database schema."""
        for statement in SCHEMA_SQL.split(";"):
            statement = statement.strip()
            if statement:
                self._execute(statement)
        logger.info(f"Cache database initialized at {self.db_path}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # -------------------------------------------------------------------------
    # Key/value operations
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        result = self._execute(
            "SELECT value FROM weather_cache WHERE key = ?", [key]
        ).fetchone()
        return result[0] if result else None

    def set(self, key: str, value: str) -> None:
        self._execute(
            """
            INSERT INTO weather_cache (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT (key)
            DO UPDATE SET
                value = EXCLUDED.value,
                updated_at = EXCLUDED.updated_at
            """,
            [key, value, _utcnow()],
        )

    def remove(self, key: str) -> None:
        self._execute("DELETE FROM weather_cache WHERE key = ?", [key])

    def keys(self) -> list[str]:
        rows = self._execute("SELECT key FROM weather_cache ORDER BY key").fetchall()
        return [row[0] for row in rows]

    # -------------------------------------------------------------------------
    # Logging Operations
    # -------------------------------------------------------------------------

    def log_fetch(
        self,
        source: str,
        status: str,
        group_count: int,
        duration_ms: int,
        error_message: Optional[str] = None,
    ) -> None:
        """Log a forecast fetch run."""
        self._execute(
            """
            INSERT INTO fetch_log (source, timestamp, status, group_count, duration_ms, error_message)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [source, _utcnow(), status, group_count, duration_ms, error_message],
        )

    def get_recent_fetches(self, limit: int = 10) -> list[dict]:
        rows = self._execute(
            """
            SELECT source, timestamp, status, group_count, duration_ms, error_message
            FROM fetch_log
            ORDER BY timestamp DESC
            LIMIT ?
            """,
            [limit],
        ).fetchall()
        return [
            {
                "source": row[0],
                "timestamp": row[1],
                "status": row[2],
                "group_count": row[3],
                "duration_ms": row[4],
                "error_message": row[5],
            }
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Get cache statistics."""
        entry_count = self._execute("SELECT COUNT(*) FROM weather_cache").fetchone()[0]
        latest = self._execute("SELECT MAX(updated_at) FROM weather_cache").fetchone()[0]
        fetch_count = self._execute("SELECT COUNT(*) FROM fetch_log").fetchone()[0]

        return {
            "entry_count": entry_count,
            "latest_update": latest,
            "fetch_count": fetch_count,
            "db_path": str(self.db_path),
        }
