"""Command-line interface for pantera_gps.

Run:
    python -m pantera_gps latest --api-url http://localhost:2000
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading

from pantera_gps.client import LocationClient
from pantera_gps.config import DashboardConfig
from pantera_gps.dashboard import View, select_view
from pantera_gps.date_search import validate_date_range
from pantera_gps.errors import ApiConnectionError, NoDataAvailable
from pantera_gps.geo import format_coordinate
from pantera_gps.models import LocationFix, PollerState
from pantera_gps.poller import LocationPoller
from pantera_gps.timeutils import format_timestamp, parse_dt
from pantera_gps.track import path_distance_m


def _config_from_args(args: argparse.Namespace) -> DashboardConfig:
    return DashboardConfig.from_env().override(
        api_base_url=getattr(args, "api_url", None),
        polling_interval_ms=getattr(args, "interval_ms", None),
        display_tz=getattr(args, "tz", None),
        log_level=getattr(args, "log_level", None),
    )


def _describe_fix(fix: LocationFix, tz_name: str) -> str:
    lat = format_coordinate(fix.latitude, "latitude")
    lon = format_coordinate(fix.longitude, "longitude")
    return (
        f"lat={fix.latitude:.8f} ({lat}) lon={fix.longitude:.8f} ({lon}) "
        f"time={format_timestamp(fix.timestamp_ms, tz_name)}"
    )


def _describe_state(state: PollerState, tz_name: str) -> str:
    view = select_view(state)
    if view is View.LIVE and state.data is not None:
        return (
            f"[live] {_describe_fix(state.data, tz_name)} "
            f"path={len(state.path)} distance={path_distance_m(state.path):.1f}m"
        )
    if view is View.LOADING:
        return "[loading]"
    return f"[{view.value}] {state.error}"


def _cmd_latest(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    client = LocationClient(cfg)
    try:
        fix = client.fetch_latest()
    except NoDataAvailable as exc:
        print(str(exc))
        return 1
    except ApiConnectionError as exc:
        print(f"Connection error: {exc}", file=sys.stderr)
        return 2
    if args.json:
        payload = {"latitude": fix.latitude, "longitude": fix.longitude, "timestamp_value": fix.timestamp_value}
        print(json.dumps(payload))
    else:
        print(_describe_fix(fix, cfg.display_tz))
    return 0


def _cmd_watch(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    poller = LocationPoller(LocationClient(cfg), cfg.polling_interval_seconds)
    done = threading.Event()
    seen = 0

    def on_state(state: PollerState) -> None:
        nonlocal seen
        print(_describe_state(state, cfg.display_tz), flush=True)
        seen += 1
        if args.max_updates is not None and seen >= args.max_updates:
            done.set()

    poller.subscribe(on_state)
    print(f"Polling {cfg.latest_location_url} every {cfg.polling_interval_ms} ms (Ctrl-C to stop)", file=sys.stderr)
    try:
        with poller:
            done.wait()
    except KeyboardInterrupt:
        print("\nStopped.", file=sys.stderr)
    return 0


def _cmd_search(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    try:
        start = parse_dt(args.start, cfg.display_tz) if args.start else None
        end = parse_dt(args.end, cfg.display_tz) if args.end else None
        date_range = validate_date_range(start, end, tz_name=cfg.display_tz)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    print(json.dumps(date_range.to_payload(), indent=2))
    return 0


def _cmd_format_coord(args: argparse.Namespace) -> int:
    try:
        print(format_coordinate(args.value, args.axis))
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 2
    return 0


def _cmd_serve_mock(args: argparse.Namespace) -> int:
    from pantera_gps.mock_server import MockLocationServer, RandomWalkSource

    source = RandomWalkSource(seed=args.seed, no_data_first=args.no_data_first)
    server = MockLocationServer(source, host=args.host, port=args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nStopped.", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="pantera_gps")
    p.add_argument("--log-level", type=str, default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_api_args(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--api-url", type=str, default=None, help="Backend base URL (default: API_BASE_URL)")
        sp.add_argument("--tz", type=str, default=None, help="Display timezone, IANA (default: DISPLAY_TZ)")

    p_latest = sub.add_parser("latest", help="Fetch the latest fix once")
    add_api_args(p_latest)
    p_latest.add_argument("--json", action="store_true", help="Print the fix as JSON")
    p_latest.set_defaults(func=_cmd_latest)

    p_watch = sub.add_parser("watch", help="Poll continuously and print every state change")
    add_api_args(p_watch)
    p_watch.add_argument(
        "--interval-ms", type=int, default=None, help="Polling interval in ms (default: POLLING_INTERVAL)"
    )
    p_watch.add_argument("--max-updates", type=int, default=None, help="Exit after this many state updates")
    p_watch.set_defaults(func=_cmd_watch)

    p_search = sub.add_parser("search", help="Validate a date range and print the search payload")
    p_search.add_argument("--start", type=str, default=None, help="Start, e.g. 2025-12-01 00:00:00")
    p_search.add_argument("--end", type=str, default=None, help="End, e.g. 2025-12-31 23:59:59")
    p_search.add_argument("--tz", type=str, default=None, help="Timezone for naive dates")
    p_search.set_defaults(func=_cmd_search)

    p_fmt = sub.add_parser("format-coord", help="Show a coordinate as degrees and decimal minutes")
    p_fmt.add_argument("value", type=float, help="Decimal degrees")
    p_fmt.add_argument("--axis", type=str, choices=["latitude", "longitude"], required=True)
    p_fmt.set_defaults(func=_cmd_format_coord)

    p_mock = sub.add_parser("serve-mock", help="Run a fake backend serving /api/location/latest")
    p_mock.add_argument("--host", type=str, default="127.0.0.1")
    p_mock.add_argument("--port", type=int, default=2000)
    p_mock.add_argument("--seed", type=int, default=42, help="Random seed (reproducible walk)")
    p_mock.add_argument("--no-data-first", type=int, default=0, help="Answer 404 for the first N requests")
    p_mock.set_defaults(func=_cmd_serve_mock)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = _config_from_args(args)
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
