"""Date range selection for the historical search.

The search itself is simulated: it validates the range, waits briefly and
hands the ISO-8601 bounds to a callback. No backend is queried.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Callable

from pantera_gps.errors import DateRangeError
from pantera_gps.models import DEFAULT_TZ, DateRange
from pantera_gps.timeutils import ensure_aware, utc_now

logger = logging.getLogger(__name__)

MISSING_DATES_MESSAGE = "Select both start and end dates."
INVERTED_RANGE_MESSAGE = "End date must be after the start date."
FUTURE_DATE_MESSAGE = "Dates cannot be in the future."


def validate_date_range(
    start: datetime | None,
    end: datetime | None,
    *,
    now: datetime | None = None,
    tz_name: str = DEFAULT_TZ,
) -> DateRange:
    """Check a user-picked range and return it as a DateRange.

    Args:
        start: Start instant; naive values are read in ``tz_name``.
        end: End instant; naive values are read in ``tz_name``.
        now: Reference time for the "not in the future" rule (default: now).
        tz_name: IANA timezone for naive inputs.

    Raises:
        DateRangeError: If a bound is missing, ``end <= start``, or a bound is in the future.
    """

    if start is None or end is None:
        raise DateRangeError(MISSING_DATES_MESSAGE)
    start_dt = ensure_aware(start, tz_name)
    end_dt = ensure_aware(end, tz_name)
    if end_dt <= start_dt:
        raise DateRangeError(INVERTED_RANGE_MESSAGE)
    ref = now if now is not None else utc_now()
    if start_dt > ref or end_dt > ref:
        raise DateRangeError(FUTURE_DATE_MESSAGE)
    return DateRange(start=start_dt, end=end_dt)


class DateSearch:
    """Simulated historical search behind the "Search by Date" panel."""

    def __init__(
        self,
        on_search: Callable[[dict[str, str]], None],
        *,
        delay_seconds: float = 1.5,
        tz_name: str = DEFAULT_TZ,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._on_search = on_search
        self._delay = delay_seconds
        self._tz_name = tz_name
        self._sleep = sleep
        self.busy = False

    def submit(
        self,
        start: datetime | None,
        end: datetime | None,
        *,
        now: datetime | None = None,
    ) -> dict[str, str]:
        """Validate, simulate the search and pass the payload to the callback once."""

        date_range = validate_date_range(start, end, now=now, tz_name=self._tz_name)
        payload = date_range.to_payload()
        self.busy = True
        try:
            if self._delay > 0:
                self._sleep(self._delay)
            logger.info("Date search %s -> %s", payload["startDate"], payload["endDate"])
            self._on_search(payload)
        finally:
            self.busy = False
        return payload
