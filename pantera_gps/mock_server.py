"""Local stand-in for the location backend (for development and tests).

Serves ``GET /api/location/latest`` from a pluggable source. The default
source walks around a start point with small random steps, sometimes
reporting the same fix twice so the path de-duplication is visible.
"""

from __future__ import annotations

import json
import logging
import random
import threading
import time
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Final, Iterable

from pantera_gps.config import LATEST_LOCATION_PATH

logger = logging.getLogger(__name__)

MockResponse = tuple[int, Any]
FixSource = Callable[[], MockResponse]


@dataclass(frozen=True, slots=True)
class StartPoint:
    name: str
    lat: float
    lon: float


START_POINTS: Final[tuple[StartPoint, ...]] = (
    StartPoint("madrid_sol", 40.4168000, -3.7038000),
    StartPoint("madrid_retiro", 40.4153000, -3.6845000),
    StartPoint("valencia_port", 39.4590000, -0.3310000),
)


class RandomWalkSource:
    """Fake fixes drifting around a start point."""

    def __init__(
        self,
        *,
        seed: int = 42,
        start: StartPoint | None = None,
        step_deg: float = 0.00015,
        repeat_probability: float = 0.25,
        no_data_first: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rng = random.Random(seed)
        point = start or self._rng.choice(START_POINTS)
        self._lat = point.lat
        self._lon = point.lon
        self._step = step_deg
        self._repeat_probability = repeat_probability
        self._no_data_left = max(0, no_data_first)
        self._clock = clock
        self._last: dict[str, Any] | None = None
        self._lock = threading.Lock()

    def __call__(self) -> MockResponse:
        with self._lock:
            if self._no_data_left > 0:
                self._no_data_left -= 1
                return 404, {"error": "No location data"}

            # Mostly move, occasionally report the previous fix again
            if self._last is not None and self._rng.random() < self._repeat_probability:
                return 200, self._last

            self._lat += self._rng.uniform(-self._step, self._step)
            self._lon += self._rng.uniform(-self._step, self._step)
            self._last = {
                "latitude": f"{self._lat:.7f}",
                "longitude": f"{self._lon:.7f}",
                "timestamp_value": str(int(self._clock() * 1000)),
            }
            return 200, self._last


class ScriptedSource:
    """Replays a fixed list of responses; the last one repeats forever."""

    def __init__(self, responses: Iterable[MockResponse]) -> None:
        self._responses = list(responses)
        if not self._responses:
            raise ValueError("ScriptedSource needs at least one response")
        self._index = 0
        self._lock = threading.Lock()
        self.requests = 0

    def __call__(self) -> MockResponse:
        with self._lock:
            self.requests += 1
            response = self._responses[min(self._index, len(self._responses) - 1)]
            self._index += 1
            return response


class _LocationHandler(BaseHTTPRequestHandler):
    server: _LocationHTTPServer

    def do_GET(self) -> None:  # noqa: N802
        if self.path.split("?", 1)[0] != LATEST_LOCATION_PATH:
            self._send(404, {"error": f"Unknown path {self.path}"})
            return
        status, body = self.server.source()
        self._send(status, body)

    def _send(self, status: int, body: Any) -> None:
        raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        logger.debug("%s - %s", self.address_string(), format % args)


class _LocationHTTPServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self, address: tuple[str, int], source: FixSource) -> None:
        super().__init__(address, _LocationHandler)
        self.source = source


class MockLocationServer:
    """Threaded HTTP server exposing ``/api/location/latest``.

    Port 0 picks a free port; read it back from ``base_url``.
    """

    def __init__(self, source: FixSource, host: str = "127.0.0.1", port: int = 0) -> None:
        self._httpd = _LocationHTTPServer((host, port), source)
        self._thread: threading.Thread | None = None

    @property
    def base_url(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._httpd.serve_forever, name="mock-location-server", daemon=True)
        self._thread.start()
        logger.info("Mock location server listening on %s", self.base_url)

    def serve_forever(self) -> None:
        logger.info("Mock location server listening on %s", self.base_url)
        try:
            self._httpd.serve_forever()
        finally:
            self._httpd.server_close()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        self._thread.join()
        self._thread = None

    def __enter__(self) -> MockLocationServer:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
