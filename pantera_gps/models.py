"""Data models for location fixes, poller snapshots and date ranges."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Final

Coordinate = tuple[float, float]
TrackPath = tuple[Coordinate, ...]

DEFAULT_TZ: Final[str] = "Europe/Madrid"
NO_DATA_MESSAGE: Final[str] = "No location data available"
CONNECTION_ERROR_MESSAGE: Final[str] = "Could not connect to the location server"


@dataclass(frozen=True, slots=True)
class LocationFix:
    """A single reported position.

    Attributes:
        latitude: Latitude in decimal degrees (trusted from the server).
        longitude: Longitude in decimal degrees (trusted from the server).
        timestamp_value: The timestamp exactly as the server sent it.
        timestamp_ms: Unix epoch milliseconds parsed from ``timestamp_value``.
    """

    latitude: float
    longitude: float
    timestamp_value: str
    timestamp_ms: int

    @property
    def position(self) -> Coordinate:
        """(latitude, longitude) pair as drawn on the map."""

        return (self.latitude, self.longitude)


class Outcome(str, Enum):
    """Classification of the most recent completed fetch."""

    PENDING = "pending"
    LIVE = "live"
    NO_DATA = "no_data"
    CONNECTION_ERROR = "connection_error"


@dataclass(frozen=True, slots=True)
class PollerState:
    """Immutable snapshot of everything the dashboard renders.

    Note:
        ``path`` only ever grows. A connection error keeps the previous fix
        and path so the last known position stays available.
    """

    loading: bool = True
    data: LocationFix | None = None
    error: str | None = None
    outcome: Outcome = Outcome.PENDING
    last_update: datetime | None = None
    path: TrackPath = field(default_factory=tuple)

    def with_fix(self, fix: LocationFix, path: TrackPath, at: datetime) -> PollerState:
        return replace(
            self,
            loading=False,
            data=fix,
            error=None,
            outcome=Outcome.LIVE,
            last_update=at,
            path=path,
        )

    def with_no_data(self, message: str = NO_DATA_MESSAGE) -> PollerState:
        return replace(self, loading=False, data=None, error=message, outcome=Outcome.NO_DATA)

    def with_connection_error(self, message: str = CONNECTION_ERROR_MESSAGE) -> PollerState:
        return replace(self, loading=False, error=message, outcome=Outcome.CONNECTION_ERROR)


@dataclass(frozen=True, slots=True)
class DateRange:
    """A validated [start, end] search window (timezone-aware)."""

    start: datetime
    end: datetime

    def to_payload(self) -> dict[str, str]:
        """Search payload with UTC ISO-8601 bounds, e.g. ``2023-11-14T22:13:20.000Z``."""

        return {"startDate": _iso_utc(self.start), "endDate": _iso_utc(self.end)}


def _iso_utc(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
