"""Folium map pieces for the live view."""

from __future__ import annotations

import folium

from pantera_gps.models import Coordinate, LocationFix, TrackPath
from pantera_gps.timeutils import format_timestamp

DEFAULT_ZOOM = 18
PATH_COLOR = "#8B5CF6"
PATH_WEIGHT = 4


def build_base_map(center: Coordinate, zoom: int = DEFAULT_ZOOM) -> folium.Map:
    """OpenStreetMap base map; created once per session and panned afterwards."""

    return folium.Map(location=list(center), zoom_start=zoom, tiles="OpenStreetMap")


def _popup_html(fix: LocationFix, tz_name: str) -> str:
    return (
        '<div style="text-align:center">'
        "<strong>Current location</strong><br/>"
        f"<small>Received: {format_timestamp(fix.timestamp_ms, tz_name)}</small><br/>"
        f"<small>Lat: {fix.latitude:.6f}</small><br/>"
        f"<small>Lng: {fix.longitude:.6f}</small>"
        "</div>"
    )


def build_track_layer(fix: LocationFix, path: TrackPath, tz_name: str) -> folium.FeatureGroup:
    """Marker for the current fix plus the travel polyline (from two points on)."""

    layer = folium.FeatureGroup(name="Track")
    if len(path) >= 2:
        folium.PolyLine(
            [list(p) for p in path],
            color=PATH_COLOR,
            weight=PATH_WEIGHT,
        ).add_to(layer)
    folium.Marker(
        list(fix.position),
        popup=folium.Popup(_popup_html(fix, tz_name), max_width=260),
        tooltip="Current location",
        icon=folium.Icon(color="purple", icon="map-marker", prefix="fa"),
    ).add_to(layer)
    return layer
