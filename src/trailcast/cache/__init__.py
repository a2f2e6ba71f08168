"""Weather payload cache for trailcast.

Raw forecast responses are cached per grid cell in DuckDB (or in memory
for tests) and re-parsed on demand for any target date.
"""

from trailcast.cache.database import CacheDatabase
from trailcast.cache.store import (
    DEFAULT_MAX_AGE_HOURS,
    CacheBackend,
    CacheEntry,
    CacheStore,
    MemoryBackend,
)

__all__ = [
    "DEFAULT_MAX_AGE_HOURS",
    "CacheBackend",
    "CacheDatabase",
    "CacheEntry",
    "CacheStore",
    "MemoryBackend",
]
