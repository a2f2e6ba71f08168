"""Age-bounded cache of raw forecast payloads.

Raw provider responses are cached rather than parsed facts so a cached
payload can be re-parsed for a different target date without a fetch.
Caching is best-effort: storage failures degrade to "no cache" and are
never raised to callers.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from trailcast.errors import CacheUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_HOURS = 2


class CacheBackend(Protocol):
    """Key -> string storage."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class MemoryBackend:
    """In-memory backing store.

    Args:
        max_entries: Optional size ceiling; writing a new key past it
            raises CacheUnavailable, like a full browser storage quota.
    """

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries
        self._data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if (
            self.max_entries is not None
            and key not in self._data
            and len(self._data) >= self.max_entries
        ):
            raise CacheUnavailable(f"Cache full ({self.max_entries} entries)")
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


@dataclass(frozen=True)
class CacheEntry:
    """A cached raw payload and when it was stored (epoch seconds)."""

    raw: Any
    stored_at: float

    def age_seconds(self, now: float) -> float:
        return now - self.stored_at

    def to_json(self) -> str:
        return json.dumps({"raw": self.raw, "stored_at": self.stored_at})

    @classmethod
    def from_json(cls, value: str) -> "CacheEntry":
        data = json.loads(value)
        if not isinstance(data, dict) or "raw" not in data:
            raise ValueError("Cache entry missing raw payload")
        return cls(raw=data["raw"], stored_at=float(data.get("stored_at", 0)))


class CacheStore:
    """Raw payload cache keyed by grid cell.

    Entries older than ``max_age_hours`` are treated as absent and pruned
    lazily on read. Keys are namespaced so several providers can share one
    backing store without reading each other's payloads.

    Example:
        >>> store = CacheStore(MemoryBackend(), max_age_hours=2, namespace="openmeteo")
        >>> store.put("32.25,34.90", {"daily": {}})
        True
        >>> store.get("32.25,34.90")
        {'daily': {}}
    """

    def __init__(
        self,
        backend: Optional[CacheBackend] = None,
        max_age_hours: float = DEFAULT_MAX_AGE_HOURS,
        namespace: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend if backend is not None else MemoryBackend()
        self.max_age_seconds = max_age_hours * 3600
        self.namespace = namespace
        self.clock = clock

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}:{key}" if self.namespace else key

    def _short_key(self, full_key: str) -> Optional[str]:
        if not self.namespace:
            return full_key
        prefix = f"{self.namespace}:"
        if full_key.startswith(prefix):
            return full_key[len(prefix):]
        return None

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return entry.age_seconds(self.clock()) <= self.max_age_seconds

    def _discard(self, key: str) -> None:
        try:
            self.backend.remove(self._full_key(key))
        except CacheUnavailable as e:
            logger.debug(f"Could not prune cache entry {key}: {e}")

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key``, or None if missing or expired."""
        try:
            value = self.backend.get(self._full_key(key))
        except CacheUnavailable as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

        if value is None:
            logger.debug(f"Cache MISS for {key}")
            return None

        try:
            entry = CacheEntry.from_json(value)
        except (ValueError, TypeError) as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            self._discard(key)
            return None

        if not self._is_fresh(entry):
            logger.debug(f"Cache EXPIRED for {key}")
            self._discard(key)
            return None

        logger.debug(f"Cache HIT for {key}")
        return entry

    def get(self, key: str) -> Optional[Any]:
        """Return the cached raw payload for ``key``, or None."""
        entry = self.get_entry(key)
        return entry.raw if entry is not None else None

    def put(self, key: str, raw: Any) -> bool:
        """Store ``raw`` under ``key``, replacing any previous entry.

        Returns:
            True if stored, False if the write failed (the failure is logged)
        """
        entry = CacheEntry(raw=raw, stored_at=self.clock())
        try:
            self.backend.set(self._full_key(key), entry.to_json())
        except (CacheUnavailable, TypeError, ValueError) as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False
        return True

    def remove(self, key: str) -> None:
        self._discard(key)

    def keys(self) -> list[str]:
        """Snapshot of keys that currently hold a live entry."""
        try:
            full_keys = self.backend.keys()
        except CacheUnavailable as e:
            logger.warning(f"Cache listing failed: {e}")
            return []

        live = []
        for full_key in full_keys:
            key = self._short_key(full_key)
            if key is not None and self.get_entry(key) is not None:
                live.append(key)
        return live

    def prune(self) -> int:
        """Remove expired and unreadable entries.

        Returns:
            Number of entries removed
        """
        try:
            full_keys = self.backend.keys()
        except CacheUnavailable as e:
            logger.warning(f"Cache listing failed: {e}")
            return 0

        before = [k for k in (self._short_key(fk) for fk in full_keys) if k is not None]
        live = set(self.keys())
        removed = len([k for k in before if k not in live])
        if removed:
            logger.info(f"Pruned {removed} stale cache entries")
        return removed

    def clear(self) -> None:
        try:
            full_keys = self.backend.keys()
        except CacheUnavailable as e:
            logger.warning(f"Cache listing failed: {e}")
            return
        for full_key in full_keys:
            key = self._short_key(full_key)
            if key is not None:
                self._discard(key)

    def stats(self) -> dict:
        live = self.keys()
        return {
            "namespace": self.namespace,
            "live_entries": len(live),
            "max_age_hours": self.max_age_seconds / 3600,
            "keys": live,
        }
