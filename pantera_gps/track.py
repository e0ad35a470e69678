"""Session travel path: append-only list of (lat, lon) points."""

from __future__ import annotations

from pantera_gps.geo import haversine_m
from pantera_gps.models import Coordinate, TrackPath


def append_point(path: TrackPath, point: Coordinate) -> TrackPath:
    """Return ``path`` with ``point`` appended unless it repeats the last point.

    Only consecutive duplicates are dropped; revisiting an earlier point
    appends it again.
    """

    if path and path[-1] == point:
        return path
    return (*path, point)


def path_distance_m(path: TrackPath) -> float:
    """Total length of the path in meters."""

    return sum(
        haversine_m(lat1, lon1, lat2, lon2)
        for (lat1, lon1), (lat2, lon2) in zip(path, path[1:])
    )
