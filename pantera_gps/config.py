"""Dashboard configuration sourced from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping

from pantera_gps.models import DEFAULT_TZ
from pantera_gps.timeutils import tzinfo_from_name

LATEST_LOCATION_PATH = "/api/location/latest"


@dataclass(frozen=True, slots=True)
class DashboardConfig:
    """Runtime settings for the poller, the client and the page."""

    api_base_url: str = "http://localhost:2000"
    polling_interval_ms: int = 5000
    request_timeout_seconds: float = 10.0
    display_tz: str = DEFAULT_TZ
    app_name: str = "Pantera GPS"
    app_subtitle: str = "the best"
    log_level: str = "INFO"

    @property
    def latest_location_url(self) -> str:
        return f"{self.api_base_url}{LATEST_LOCATION_PATH}"

    @property
    def polling_interval_seconds(self) -> float:
        return self.polling_interval_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DashboardConfig:
        """Build a config from ``environ`` (defaults to ``os.environ``).

        Raises:
            ValueError: If a variable holds an unusable value.
        """

        env = os.environ if environ is None else environ
        defaults = cls()
        cfg = cls(
            api_base_url=env.get("API_BASE_URL", defaults.api_base_url),
            polling_interval_ms=_positive_int(env, "POLLING_INTERVAL", defaults.polling_interval_ms),
            request_timeout_seconds=_positive_float(
                env, "REQUEST_TIMEOUT", defaults.request_timeout_seconds
            ),
            display_tz=env.get("DISPLAY_TZ", defaults.display_tz),
            app_name=env.get("APP_NAME", defaults.app_name),
            app_subtitle=env.get("APP_SUBTITLE", defaults.app_subtitle),
            log_level=env.get("LOG_LEVEL", defaults.log_level),
        )
        return cfg.validated()

    def override(self, **changes: object) -> DashboardConfig:
        """Copy with non-None ``changes`` applied (CLI flags win over env)."""

        return replace(self, **{k: v for k, v in changes.items() if v is not None}).validated()

    def validated(self) -> DashboardConfig:
        base = self.api_base_url.strip().rstrip("/")
        if not base.startswith(("http://", "https://")):
            raise ValueError(f"API_BASE_URL must be an http(s) URL, got {self.api_base_url!r}")
        if self.polling_interval_ms <= 0:
            raise ValueError(f"POLLING_INTERVAL must be positive, got {self.polling_interval_ms}")
        if self.request_timeout_seconds <= 0:
            raise ValueError(f"REQUEST_TIMEOUT must be positive, got {self.request_timeout_seconds}")
        tzinfo_from_name(self.display_tz)
        level = self.log_level.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown LOG_LEVEL: {self.log_level!r}")
        return replace(self, api_base_url=base, log_level=level)


def _positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer number of milliseconds, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value
