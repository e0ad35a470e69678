"""Location poller: fetch cadence, current fix, error state and travel path."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable, Protocol

from pantera_gps.errors import ApiConnectionError, NoDataAvailable
from pantera_gps.models import CONNECTION_ERROR_MESSAGE, LocationFix, PollerState
from pantera_gps.timeutils import utc_now
from pantera_gps.track import append_point

logger = logging.getLogger(__name__)

Listener = Callable[[PollerState], None]


class LatestLocationSource(Protocol):
    def fetch_latest(self) -> LocationFix: ...


class LocationPoller:
    """Owns the PollerState of one dashboard session.

    ``fetch_latest`` may be called from any thread (timer or manual retry).
    Each call takes a generation number when it starts; a completion older
    than the last applied one is dropped, so the last-started call wins.
    Timer ticks are skipped while another fetch is in flight.
    """

    def __init__(
        self,
        source: LatestLocationSource,
        interval_seconds: float,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._source = source
        self._interval = interval_seconds
        self._clock = clock

        self._lock = threading.Lock()
        self._state = PollerState()
        self._listeners: list[Listener] = []
        self._started_generation = 0
        self._applied_generation = 0
        self._in_flight = 0

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def state(self) -> PollerState:
        with self._lock:
            return self._state

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every new snapshot; returns an unsubscribe callable."""

        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def fetch_latest(self) -> PollerState:
        """Fetch once and fold the outcome into the state. Never raises."""

        with self._lock:
            self._started_generation += 1
            generation = self._started_generation
            self._in_flight += 1

        try:
            transition = self._fetch_transition()
        finally:
            with self._lock:
                self._in_flight -= 1
        return self._apply(generation, transition)

    def _fetch_transition(self) -> Callable[[PollerState], PollerState]:
        try:
            fix = self._source.fetch_latest()
        except NoDataAvailable as exc:
            logger.info("No location data available yet")
            message = str(exc)
            return lambda s: s.with_no_data(message)
        except ApiConnectionError as exc:
            logger.warning("Error fetching location: %s", exc)
            return lambda s: s.with_connection_error(CONNECTION_ERROR_MESSAGE)
        except Exception:
            logger.exception("Unexpected failure fetching location")
            return lambda s: s.with_connection_error(CONNECTION_ERROR_MESSAGE)

        at = self._clock()
        return lambda s: s.with_fix(fix, append_point(s.path, fix.position), at)

    def _apply(self, generation: int, transition: Callable[[PollerState], PollerState]) -> PollerState:
        with self._lock:
            if generation < self._applied_generation:
                logger.debug(
                    "Dropping stale fetch result (generation %s < %s)", generation, self._applied_generation
                )
                return self._state
            self._applied_generation = generation
            self._state = transition(self._state)
            snapshot = self._state
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener %r failed", listener)
        return snapshot

    def start(self) -> None:
        """Fetch immediately, then every interval, on a background thread."""

        if self.running:
            if not self._stop_event.is_set():
                return
            # a timed-out stop(): let the old worker finish before reusing the event
            self._thread.join()
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="location-poller", daemon=True)
        self._thread.start()
        logger.info("Location polling started (every %.1fs)", self._interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer and wait for the worker to exit."""

        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                logger.warning("Location poller still running after stop(timeout=%s)", timeout)
                return
        self._thread = None
        logger.info("Location polling stopped")

    def _run(self) -> None:
        self.tick()
        while not self._stop_event.wait(self._interval):
            self.tick()

    def tick(self) -> PollerState:
        """Timer-driven fetch: skipped while another fetch is in flight."""

        with self._lock:
            if self._in_flight > 0:
                logger.debug("Skipping timer tick: a fetch is already in flight")
                return self._state
        return self.fetch_latest()

    def __enter__(self) -> LocationPoller:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
