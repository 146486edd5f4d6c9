"""Data models for road sign logging."""

from pyroadsigns.models._base import MillisTimestamp, format_timestamp, to_utc_millis
from pyroadsigns.models.catalog import (
    CATALOG,
    DEFAULT_CATEGORY_ID,
    SignCategory,
    category_color,
    category_name,
    find_category,
    is_known_category,
    resolve_category,
)
from pyroadsigns.models.credential import UserCredential
from pyroadsigns.models.marker import Marker
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.models.position import Position, PositionOptions

__all__ = [
    "CATALOG",
    "DEFAULT_CATEGORY_ID",
    "Marker",
    "MillisTimestamp",
    "Position",
    "PositionOptions",
    "RoadSignObservation",
    "SignCategory",
    "UserCredential",
    "category_color",
    "category_name",
    "find_category",
    "format_timestamp",
    "is_known_category",
    "resolve_category",
    "to_utc_millis",
]
