"""Geographic utilities and constants."""

from dataclasses import dataclass
from math import asin, cos, radians, sin, sqrt

# Grid resolution for sharing one forecast between nearby trails.
# 0.05 degrees is ~5.5 km of latitude.
GRID_RESOLUTION_DEG = 0.05


@dataclass(frozen=True)
class Point:
    """Geographic point."""

    lat: float
    lng: float

    def distance_to(self, other: "Point") -> float:
        """Calculate distance in km to another point using Haversine formula."""
        return haversine(self.lat, self.lng, other.lat, other.lng)


def haversine(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate the great circle distance in km between two points.

    Args:
        lat1, lng1: First point coordinates (degrees)
        lat2, lng2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    R = 6371  # Earth radius in km

    lat1, lng1, lat2, lng2 = map(radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1

    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlng / 2) ** 2
    c = 2 * asin(sqrt(a))

    return R * c


def snap_to_grid(value: float, resolution: float = GRID_RESOLUTION_DEG) -> float:
    """Round a coordinate to the nearest multiple of ``resolution``."""
    steps = round(value / resolution)
    return round(steps * resolution, 6)


def grid_key(lat: float, lng: float, resolution: float = GRID_RESOLUTION_DEG) -> str:
    """Build the cache/batch key for the grid cell containing a coordinate.

    Examples:
        >>> grid_key(32.2569, 34.9194)
        '32.25,34.90'
    """
    return f"{snap_to_grid(lat, resolution):.2f},{snap_to_grid(lng, resolution):.2f}"
