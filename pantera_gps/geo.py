"""Geospatial utilities (no external dependencies)."""

from __future__ import annotations

import math
from dataclasses import dataclass


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute Haversine distance in meters between two lat/lon points.

    Args:
        lat1: Latitude 1 in degrees.
        lon1: Longitude 1 in degrees.
        lat2: Latitude 2 in degrees.
        lon2: Longitude 2 in degrees.

    Returns:
        Distance in meters.
    """

    r = 6_371_000.0  # mean Earth radius in meters
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return r * c


@dataclass(frozen=True, slots=True)
class DmsCoordinate:
    """A coordinate split into whole degrees and decimal minutes."""

    degrees: int
    minutes: float
    hemisphere: str

    def __str__(self) -> str:
        return f"{self.degrees}° {self.minutes:.4f}' {self.hemisphere}"


# West is "O" (Oeste), as the dashboard has always shown it.
_HEMISPHERES = {
    "latitude": ("N", "S"),
    "longitude": ("E", "O"),
}


def format_coordinate(coord: float | str, axis: str) -> DmsCoordinate:
    """Decompose decimal degrees into degrees + decimal minutes + hemisphere.

    Args:
        coord: Decimal degrees, as a float or numeric string.
        axis: "latitude" or "longitude".

    Returns:
        DmsCoordinate; non-negative values map to N/E, negative to S/O.

    Raises:
        ValueError: If axis is unknown or coord is not numeric.
    """

    try:
        positive, negative = _HEMISPHERES[axis]
    except KeyError as exc:
        raise ValueError(f"Unknown axis: {axis!r} (expected 'latitude' or 'longitude')") from exc

    value = float(coord)
    absolute = abs(value)
    degrees = math.floor(absolute)
    minutes = (absolute - degrees) * 60.0
    return DmsCoordinate(
        degrees=int(degrees),
        minutes=minutes,
        hemisphere=positive if value >= 0 else negative,
    )
