"""Shared utilities for trailcast."""

from .geo import GRID_RESOLUTION_DEG, Point, grid_key, haversine, snap_to_grid
from .io import get_project_root

__all__ = [
    "GRID_RESOLUTION_DEG",
    "Point",
    "get_project_root",
    "grid_key",
    "haversine",
    "snap_to_grid",
]
