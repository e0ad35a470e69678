"""Time parsing and formatting utilities."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo

from zoneinfo import ZoneInfo


def tzinfo_from_name(tz_name: str) -> tzinfo:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "Europe/Madrid".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"Invalid timezone: {tz_name!r}. Example: Europe/Madrid") from exc


def epoch_ms_from_value(value: int | float | str) -> int:
    """Parse a millisecond timestamp sent as a number or a numeric string.

    Fractional values are truncated toward zero.

    Raises:
        ValueError: If the value is not numeric.
    """

    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    s = str(value).strip()
    try:
        return int(s)
    except ValueError:
        return int(float(s))


def dt_from_epoch_ms(epoch_ms: int, tz_name: str) -> datetime:
    """Convert epoch milliseconds to timezone-aware datetime.

    Args:
        epoch_ms: Unix epoch milliseconds.
        tz_name: IANA timezone name.

    Returns:
        Timezone-aware datetime.
    """

    tz = tzinfo_from_name(tz_name)
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=tz)


def format_timestamp(value: int | float | str, tz_name: str) -> str:
    """Render a millisecond timestamp as ``DD/MM/YYYY, HH:MM:SS TZ``.

    Example:
        >>> format_timestamp(1700000000000, "UTC")
        '14/11/2023, 22:13:20 UTC'
    """

    dt = dt_from_epoch_ms(epoch_ms_from_value(value), tz_name)
    return dt.strftime("%d/%m/%Y, %H:%M:%S %Z")


def ensure_aware(dt: datetime, tz_name: str) -> datetime:
    """Attach ``tz_name`` to naive datetimes, convert aware ones into it."""

    tz = tzinfo_from_name(tz_name)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def parse_dt(text: str, tz_name: str) -> datetime:
    """Parse user-provided datetime text to a timezone-aware datetime.

    Supported formats:
      - "YYYY-MM-DD HH:MM:SS"
      - "YYYY-MM-DDTHH:MM:SS"
      - with optional timezone offset, e.g. "+01:00" or "Z"

    If timezone is missing, it will be assumed to be tz_name.

    Raises:
        ValueError: If cannot parse.
    """

    s = text.strip().replace("T", " ")
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError as exc:
        raise ValueError(f"Cannot parse datetime: {text!r}. Suggested format: 2025-12-18 09:30:00") from exc
    return ensure_aware(dt, tz_name)


def utc_now() -> datetime:
    return datetime.now(UTC)
