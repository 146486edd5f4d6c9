"""Observation to marker projection."""

from __future__ import annotations

from datetime import UTC, tzinfo
from html import escape

from pyroadsigns._constants import MARKER_ICON_SIZE
from pyroadsigns.models.catalog import category_name, resolve_category
from pyroadsigns.models.marker import Marker
from pyroadsigns.models.observation import RoadSignObservation


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def format_capture_time(observation: RoadSignObservation, tz: tzinfo = UTC) -> str:
    return observation.captured_at.astimezone(tz).strftime("%Y-%m-%d %H:%M:%S")


def _icon_html(color: str, label: str) -> str:
    size = MARKER_ICON_SIZE
    return (
        f'<div style="background-color: {escape(color)}; width: {size}px; height: {size}px; '
        "border-radius: 50%; border: 3px solid white; display: flex; align-items: center; "
        "justify-content: center; font-weight: bold; color: white; font-size: 12px; "
        f'box-shadow: 0 2px 8px rgba(0,0,0,0.3);">{escape(label)}</div>'
    )


def _popup_html(observation: RoadSignObservation, latitude: float, longitude: float, tz: tzinfo) -> str:
    title = escape(category_name(observation.category))
    return (
        '<div style="text-align: center; min-width: 180px;">'
        f'<h3 style="margin: 0 0 8px; font-size: 16px; font-weight: bold;">{title}</h3>'
        f'<p style="margin: 0 0 4px; font-size: 12px; color: #666;">'
        f"Lat: {latitude:.4f} | Lng: {longitude:.4f}</p>"
        f'<p style="margin: 0; font-size: 12px; color: #999;">'
        f"Captured: {format_capture_time(observation, tz)}</p>"
        "</div>"
    )


def build_marker(observation: RoadSignObservation, *, tz: tzinfo = UTC) -> Marker:
    """Build the marker for *observation*.

    Styling uses the resolved category, so an unknown category id renders
    with the first catalog entry's color and label; the popup title reads
    "Unknown" in that case. Coordinates are clamped into the valid WGS84
    range.
    """
    category = resolve_category(observation.category)
    latitude = _clamp(observation.latitude, -90.0, 90.0)
    longitude = _clamp(observation.longitude, -180.0, 180.0)
    return Marker(
        observation_id=observation.id,
        latitude=latitude,
        longitude=longitude,
        color=category.color,
        label=category.label,
        icon_html=_icon_html(category.color, category.label),
        popup_html=_popup_html(observation, latitude, longitude, tz),
    )
