"""Which panel the dashboard shows for a given poller snapshot."""

from __future__ import annotations

from enum import Enum

from pantera_gps.models import Outcome, PollerState


class View(str, Enum):
    LOADING = "loading"
    CONNECTION_ERROR = "connection_error"
    NO_DATA = "no_data"
    LIVE = "live"


def select_view(state: PollerState) -> View:
    """Map a snapshot to the panel that renders it.

    Loading only gates the very first render. A connection error wins over a
    previously received fix so the retry panel is visible.
    """

    if state.loading:
        return View.LOADING
    if state.outcome is Outcome.CONNECTION_ERROR:
        return View.CONNECTION_ERROR
    if state.outcome is Outcome.NO_DATA or state.data is None:
        return View.NO_DATA
    return View.LIVE
