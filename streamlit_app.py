from __future__ import annotations

from datetime import date, datetime
from datetime import time as dtime

import streamlit as st
from streamlit_folium import st_folium

from pantera_gps.client import LocationClient
from pantera_gps.config import DashboardConfig
from pantera_gps.dashboard import View, select_view
from pantera_gps.date_search import DateSearch
from pantera_gps.errors import DateRangeError
from pantera_gps.geo import format_coordinate
from pantera_gps.map_view import build_base_map, build_track_layer
from pantera_gps.models import LocationFix, PollerState
from pantera_gps.poller import LocationPoller
from pantera_gps.timeutils import format_timestamp, tzinfo_from_name
from pantera_gps.track import path_distance_m

_SEARCH_KEYS = ("search_start_d", "search_start_t", "search_end_d", "search_end_t")


def _session_poller(cfg: DashboardConfig) -> LocationPoller:
    """One poller per browser session.

    It is never started: the live fragment reruns on the polling interval and
    ticks it, so polling ends with the session.
    """

    poller: LocationPoller | None = st.session_state.get("poller")
    if poller is None:
        poller = LocationPoller(LocationClient(cfg), cfg.polling_interval_seconds)
        st.session_state.poller = poller
    return poller


def _retry(poller: LocationPoller) -> None:
    poller.fetch_latest()
    st.session_state.retried = True


def _combine(d: date | None, t: dtime | None) -> datetime | None:
    if d is None:
        return None
    return datetime.combine(d, t or dtime.min)


def _reset_search_form() -> None:
    for key in _SEARCH_KEYS:
        st.session_state.pop(key, None)


def _render_error(state: PollerState, poller: LocationPoller) -> None:
    st.error(f"**Connection error**\n\n{state.error}")
    st.button("Retry", on_click=_retry, args=(poller,), type="primary")


def _render_no_data(poller: LocationPoller) -> None:
    st.info("Waiting for location data...")
    st.caption("Connecting via polling...")
    st.button("Refresh", on_click=_retry, args=(poller,))


def _render_map(fix: LocationFix, state: PollerState, cfg: DashboardConfig) -> None:
    # The base map is built once; st_folium pans it when `center` changes.
    base = st.session_state.get("base_map")
    if base is None:
        base = build_base_map(fix.position)
        st.session_state.base_map = base
    st_folium(
        base,
        center=list(fix.position),
        feature_group_to_add=build_track_layer(fix, state.path, cfg.display_tz),
        key="live_map",
        height=560,
        use_container_width=True,
        returned_objects=[],
    )


def _render_info(fix: LocationFix, state: PollerState, cfg: DashboardConfig) -> None:
    st.subheader("Last Location Received")
    c1, c2 = st.columns(2)
    c1.metric("Latitude", f"{fix.latitude:.8f}")
    c1.caption(str(format_coordinate(fix.latitude, "latitude")))
    c2.metric("Longitude", f"{fix.longitude:.8f}")
    c2.caption(str(format_coordinate(fix.longitude, "longitude")))

    st.metric("Timestamp", fix.timestamp_value)
    st.caption(format_timestamp(fix.timestamp_ms, cfg.display_tz))

    c3, c4 = st.columns(2)
    c3.metric("Path points", str(len(state.path)))
    c4.metric("Distance", f"{path_distance_m(state.path):.1f} m")
    if state.last_update is not None:
        local = state.last_update.astimezone(tzinfo_from_name(cfg.display_tz))
        st.caption(f"Updated at {local.strftime('%H:%M:%S')}")


def _render_date_search(cfg: DashboardConfig) -> None:
    today = datetime.now(tzinfo_from_name(cfg.display_tz)).date()
    with st.expander("Search by Date", expanded=False):
        with st.form("date_search"):
            c1, c2 = st.columns(2)
            with c1:
                st.markdown("**Start Date**")
                start_d = st.date_input("Start day", value=None, max_value=today, key="search_start_d")
                start_t = st.time_input("Start time", value=None, key="search_start_t")
            with c2:
                st.markdown("**End Date**")
                end_d = st.date_input("End day", value=None, max_value=today, key="search_end_d")
                end_t = st.time_input("End time", value=None, key="search_end_t")
            b1, b2 = st.columns(2)
            b1.form_submit_button("Clean", on_click=_reset_search_form, width="stretch")
            submitted = b2.form_submit_button("Search", type="primary", width="stretch")

        if submitted:
            search = DateSearch(
                on_search=lambda payload: st.session_state.__setitem__("last_search", payload),
                tz_name=cfg.display_tz,
            )
            try:
                with st.spinner("Searching..."):
                    search.submit(_combine(start_d, start_t), _combine(end_d, end_t))
            except DateRangeError as exc:
                st.error(str(exc))

        last = st.session_state.get("last_search")
        if last:
            st.success(f"Search range: {last['startDate']} → {last['endDate']}")


def _live_panel(poller: LocationPoller, cfg: DashboardConfig) -> None:
    if poller.state.loading:
        with st.spinner("Loading..."):
            poller.fetch_latest()
    elif not st.session_state.pop("retried", False):
        poller.tick()

    state = poller.state
    view = select_view(state)
    if view is View.CONNECTION_ERROR:
        _render_error(state, poller)
    elif view is View.NO_DATA:
        _render_no_data(poller)
    elif state.data is not None:
        left, right = st.columns([1.9, 1.1])
        with left:
            _render_map(state.data, state, cfg)
        with right:
            _render_info(state.data, state, cfg)
            _render_date_search(cfg)


def main() -> None:
    try:
        cfg = DashboardConfig.from_env()
    except ValueError as exc:
        st.set_page_config(page_title=DashboardConfig().app_name, layout="wide")
        st.error(f"Configuration error: {exc}")
        st.stop()

    st.set_page_config(page_title=cfg.app_name, layout="wide")
    st.title(cfg.app_name)
    st.caption(cfg.app_subtitle)

    poller = _session_poller(cfg)
    live_panel = st.fragment(run_every=cfg.polling_interval_seconds)(_live_panel)
    live_panel(poller, cfg)


if __name__ == "__main__":
    main()
