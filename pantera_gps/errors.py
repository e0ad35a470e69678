"""Error types raised by the client and the date search."""

from __future__ import annotations


class PanteraError(Exception):
    """Base class for dashboard errors."""


class NoDataAvailable(PanteraError):
    """The server answered 404: no fix has been reported yet."""


class ApiConnectionError(PanteraError):
    """Transport failure, non-success status or an unreadable response body."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class DateRangeError(PanteraError, ValueError):
    """A date range that cannot be searched (missing, inverted or in the future)."""
