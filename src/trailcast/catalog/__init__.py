"""Static trail catalog and home location."""

from trailcast.catalog.models import (
    HOME_LOCATION,
    TRAILS_DATA,
    HomeLocation,
    Trail,
    load_trails,
)

__all__ = ["HOME_LOCATION", "TRAILS_DATA", "HomeLocation", "Trail", "load_trails"]
