"""Weather acquisition errors.

All of these are recovered inside the orchestrator: a group that fails
degrades to cached data or to empty facts, it never fails the whole run.
"""

from typing import Optional

# Provider error bodies are truncated to this many characters
MAX_DETAILS_LENGTH = 200


class WeatherError(Exception):
    """Base class for recoverable weather acquisition failures."""


class NetworkError(WeatherError):
    """Forecast request failed (transport error or non-success status)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: str = "",
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = (details or "")[:MAX_DETAILS_LENGTH]
        self.url = url

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            base = f"{base} (HTTP {self.status_code})"
        if self.details:
            base = f"{base}: {self.details}"
        return base


class MalformedPayloadError(WeatherError):
    """Provider payload lacks the structure needed to derive any facts."""


class CacheUnavailable(WeatherError):
    """Cache backing store could not be read or written."""
