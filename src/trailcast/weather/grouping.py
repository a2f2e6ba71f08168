"""Spatial grouping of trails so nearby trails share one forecast request."""

from dataclasses import dataclass, field
from typing import Iterable

from trailcast.catalog.models import Trail
from trailcast.utils.geo import GRID_RESOLUTION_DEG, grid_key


@dataclass
class TrailGroup:
    """Trails sharing one grid cell.

    The first trail encountered is the representative whose coordinates
    are sent to the forecast provider.
    """

    key: str
    trails: list[Trail] = field(default_factory=list)

    @property
    def representative(self) -> Trail:
        return self.trails[0]

    @property
    def trail_ids(self) -> list[str]:
        return [t.id for t in self.trails]


class GeoGrouper:
    """Bucket trails onto a coarse lat/lng grid.

    Example:
        >>> groups = GeoGrouper().group(TRAILS_DATA)
        >>> groups[0].representative.name
        'Hadid (Green) - Ben Shemen'
    """

    def __init__(self, resolution: float = GRID_RESOLUTION_DEG):
        self.resolution = resolution

    def key_for(self, trail: Trail) -> str:
        return grid_key(trail.lat, trail.lng, self.resolution)

    def group(self, trails: Iterable[Trail]) -> list[TrailGroup]:
        """Partition trails by grid cell, preserving encounter order."""
        groups: dict[str, TrailGroup] = {}
        for trail in trails:
            key = self.key_for(trail)
            if key not in groups:
                groups[key] = TrailGroup(key=key)
            groups[key].trails.append(trail)
        return list(groups.values())


def group_trails(
    trails: Iterable[Trail], resolution: float = GRID_RESOLUTION_DEG
) -> list[TrailGroup]:
    return GeoGrouper(resolution).group(trails)
