"""Map surface interface and the bundled headless surface."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from typing import Any, Protocol

from pyroadsigns.config import RoadSignsConfig, TileLayerConfig
from pyroadsigns.exceptions import MapSurfaceReleasedError
from pyroadsigns.models.marker import Marker

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Bounds:
    """Axis-aligned latitude/longitude box."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_points(cls, points: Iterable[tuple[float, float]]) -> Bounds:
        """Smallest box containing every ``(latitude, longitude)`` point.

        A single point gives a degenerate box.

        Raises
        ------
        ValueError
            If *points* is empty.
        """
        iterator = iter(points)
        try:
            lat, lng = next(iterator)
        except StopIteration:
            raise ValueError("cannot compute bounds of no points") from None
        south = north = lat
        west = east = lng
        for lat, lng in iterator:
            south = min(south, lat)
            north = max(north, lat)
            west = min(west, lng)
            east = max(east, lng)
        return cls(south=south, west=west, north=north, east=east)

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    @property
    def is_point(self) -> bool:
        return self.south == self.north and self.west == self.east


class MapSurface(Protocol):
    """What the reconciler and the logout hook need from a map.

    Only the marker layers are managed here; base layers (tiles) belong to
    the surface and are never enumerated by :meth:`markers`.
    """

    @property
    def is_live(self) -> bool: ...

    def markers(self) -> list[Marker]: ...

    def add_marker(self, marker: Marker) -> None: ...

    def remove_marker(self, marker: Marker) -> None: ...

    def fit_bounds(self, bounds: Bounds, padding: tuple[int, int]) -> None: ...

    def invalidate_size(self) -> None: ...

    def remove(self) -> None: ...


class InMemoryMapSurface:
    """Headless map surface that records what a real map would show.

    It keeps a tile layer plus the attached markers, remembers the last
    viewport request and counts size rechecks. After :meth:`remove` it is no
    longer live and refuses further changes.
    """

    def __init__(
        self,
        *,
        center: tuple[float, float],
        zoom: int,
        tiles: TileLayerConfig | None = None,
    ) -> None:
        self.center = center
        self.zoom = zoom
        self.tiles = tiles if tiles is not None else TileLayerConfig()
        self.bounds: Bounds | None = None
        self.padding: tuple[int, int] | None = None
        self.size_checks = 0
        self._markers: list[Marker] = []
        self._live = True

    @classmethod
    def from_config(cls, config: RoadSignsConfig) -> InMemoryMapSurface:
        return cls(center=config.default_center, zoom=config.default_zoom, tiles=config.tiles)

    def _require_live(self) -> None:
        if not self._live:
            raise MapSurfaceReleasedError("map surface has been removed")

    @property
    def is_live(self) -> bool:
        return self._live

    def markers(self) -> list[Marker]:
        return list(self._markers)

    def add_marker(self, marker: Marker) -> None:
        self._require_live()
        self._markers.append(marker)

    def remove_marker(self, marker: Marker) -> None:
        self._require_live()
        try:
            self._markers.remove(marker)
        except ValueError:
            _logger.debug("Marker for %s was not attached", marker.observation_id)

    def fit_bounds(self, bounds: Bounds, padding: tuple[int, int]) -> None:
        self._require_live()
        self.bounds = bounds
        self.padding = padding
        self.center = bounds.center

    def invalidate_size(self) -> None:
        self._require_live()
        self.size_checks += 1

    def remove(self) -> None:
        if not self._live:
            return
        self._markers.clear()
        self._live = False
        _logger.debug("Map surface removed")

    def to_geojson(self) -> dict[str, Any]:
        """Attached markers as a GeoJSON ``FeatureCollection``."""
        features = [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [marker.longitude, marker.latitude]},
                "properties": {
                    "id": marker.observation_id,
                    "color": marker.color,
                    "label": marker.label,
                },
            }
            for marker in self._markers
        ]
        return {"type": "FeatureCollection", "features": features}
