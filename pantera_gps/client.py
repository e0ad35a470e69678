"""HTTP client for the location backend.

Uses only the Python standard library, the same way the rest of the project
talks HTTP.
"""

from __future__ import annotations

import json
import logging
import math
import urllib.error
import urllib.request
from typing import Any

from pantera_gps.config import DashboardConfig
from pantera_gps.errors import ApiConnectionError, NoDataAvailable
from pantera_gps.models import NO_DATA_MESSAGE, LocationFix
from pantera_gps.timeutils import epoch_ms_from_value

logger = logging.getLogger(__name__)


def _parse_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"not a coordinate: {value!r}")
    number = float(str(value).strip()) if isinstance(value, str) else float(value)
    if not math.isfinite(number):
        raise ValueError(f"not a finite coordinate: {value!r}")
    return number


def parse_fix(payload: Any) -> LocationFix:
    """Build a LocationFix from the decoded JSON body.

    Args:
        payload: Decoded JSON, expected ``{latitude, longitude, timestamp_value}``
            where each value is a number or a numeric string.

    Raises:
        ApiConnectionError: If the body is not an object or a field is missing/non-numeric.
    """

    if not isinstance(payload, dict):
        raise ApiConnectionError(f"Unexpected response body: {type(payload).__name__}")
    try:
        raw_ts = payload["timestamp_value"]
        return LocationFix(
            latitude=_parse_float(payload["latitude"]),
            longitude=_parse_float(payload["longitude"]),
            timestamp_value=str(raw_ts),
            timestamp_ms=epoch_ms_from_value(raw_ts),
        )
    except KeyError as exc:
        raise ApiConnectionError(f"Response is missing field {exc}. Fields: {sorted(payload)}") from exc
    except (TypeError, ValueError, OverflowError) as exc:
        raise ApiConnectionError(f"Response has a non-numeric field: {exc}") from exc


class LocationClient:
    """Fetches the latest fix from ``GET {api_base_url}/api/location/latest``."""

    def __init__(self, config: DashboardConfig) -> None:
        self._url = config.latest_location_url
        self._timeout = config.request_timeout_seconds

    @property
    def url(self) -> str:
        return self._url

    def fetch_latest(self) -> LocationFix:
        """Return the most recent fix.

        Raises:
            NoDataAvailable: On HTTP 404.
            ApiConnectionError: On transport failure, any other non-2xx status,
                or a body that is not a valid fix.
        """

        req = urllib.request.Request(self._url, headers={"Accept": "application/json"}, method="GET")
        try:
            with urllib.request.urlopen(req, timeout=self._timeout) as resp:  # noqa: S310
                body = resp.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as exc:
            exc.close()
            if exc.code == 404:
                raise NoDataAvailable(NO_DATA_MESSAGE) from exc
            raise ApiConnectionError(f"HTTP {exc.code} from {self._url}", status=exc.code) from exc
        except OSError as exc:
            # URLError, timeouts and refused connections all land here
            raise ApiConnectionError(f"Cannot reach {self._url}: {exc}") from exc

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as exc:
            raise ApiConnectionError(f"Response is not JSON: {body[:80]!r}") from exc
        fix = parse_fix(payload)
        logger.debug("Fetched fix lat=%s lon=%s ts=%s", fix.latitude, fix.longitude, fix.timestamp_value)
        return fix
