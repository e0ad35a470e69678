"""Tests for date range validation and the simulated search."""

from datetime import UTC, datetime

import pytest
from hamcrest import assert_that, contains_exactly, equal_to, has_entries, is_

from pantera_gps.date_search import (FUTURE_DATE_MESSAGE, INVERTED_RANGE_MESSAGE,
                                     MISSING_DATES_MESSAGE, DateSearch,
                                     validate_date_range)
from pantera_gps.errors import DateRangeError
from pantera_gps.models import DateRange

NOW = datetime(2025, 1, 10, 12, 0, tzinfo=UTC)
START = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)
END = datetime(2025, 1, 2, 20, 30, tzinfo=UTC)


class TestValidateDateRange:
    """Tests for validate_date_range."""

    def test_only_start(self) -> None:
        """Should reject a range with only the start set."""
        with pytest.raises(DateRangeError, match=MISSING_DATES_MESSAGE):
            validate_date_range(START, None, now=NOW)

    def test_only_end(self) -> None:
        with pytest.raises(DateRangeError, match=MISSING_DATES_MESSAGE):
            validate_date_range(None, END, now=NOW)

    def test_end_before_start(self) -> None:
        """Should reject an inverted range."""
        with pytest.raises(DateRangeError, match=INVERTED_RANGE_MESSAGE):
            validate_date_range(END, START, now=NOW)

    def test_equal_bounds(self) -> None:
        with pytest.raises(DateRangeError, match=INVERTED_RANGE_MESSAGE):
            validate_date_range(START, START, now=NOW)

    def test_future(self) -> None:
        """Should reject bounds after now."""
        with pytest.raises(DateRangeError, match=FUTURE_DATE_MESSAGE):
            validate_date_range(START, datetime(2025, 2, 1, tzinfo=UTC), now=NOW)

    def test_valid(self) -> None:
        assert_that(validate_date_range(START, END, now=NOW), equal_to(DateRange(start=START, end=END)))

    def test_naive_values_use_timezone(self) -> None:
        """Should read naive inputs in the given zone."""
        rng = validate_date_range(
            datetime(2025, 1, 1, 10, 0), datetime(2025, 1, 1, 11, 0), now=NOW, tz_name="Europe/Madrid"
        )
        assert_that(rng.to_payload()["startDate"], equal_to("2025-01-01T09:00:00.000Z"))

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_date_range(None, None, now=NOW)


class TestDateRangePayload:
    """Tests for DateRange.to_payload."""

    def test_iso_utc_with_millis(self) -> None:
        payload = DateRange(start=START, end=END).to_payload()
        assert_that(
            payload,
            has_entries(startDate="2025-01-01T08:00:00.000Z", endDate="2025-01-02T20:30:00.000Z"),
        )


class TestDateSearch:
    """Tests for DateSearch.submit."""

    def test_valid_range_calls_back_once(self) -> None:
        """Should invoke the callback exactly once with ISO bounds."""
        received: list[dict[str, str]] = []
        delays: list[float] = []
        search = DateSearch(received.append, delay_seconds=1.5, sleep=delays.append)

        payload = search.submit(START, END, now=NOW)

        assert_that(received, contains_exactly(payload))
        assert_that(payload, has_entries(startDate="2025-01-01T08:00:00.000Z"))
        assert_that(delays, contains_exactly(1.5))
        assert_that(search.busy, is_(False))

    def test_invalid_range_skips_callback(self) -> None:
        """Should raise before waiting or calling back."""
        received: list[dict[str, str]] = []
        delays: list[float] = []
        search = DateSearch(received.append, sleep=delays.append)

        with pytest.raises(DateRangeError):
            search.submit(START, None, now=NOW)
        assert_that(received, equal_to([]))
        assert_that(delays, equal_to([]))

    def test_busy_while_searching(self) -> None:
        search: DateSearch
        seen: list[bool] = []

        def on_search(_: dict[str, str]) -> None:
            seen.append(search.busy)

        search = DateSearch(on_search, delay_seconds=0)
        search.submit(START, END, now=NOW)
        assert_that(seen, contains_exactly(True))
        assert_that(search.busy, is_(False))
