"""Map surface interface and marker reconciliation."""

from pyroadsigns.map.markers import build_marker, format_capture_time
from pyroadsigns.map.reconciler import MarkerReconciler
from pyroadsigns.map.surface import Bounds, InMemoryMapSurface, MapSurface

__all__ = [
    "Bounds",
    "InMemoryMapSurface",
    "MapSurface",
    "MarkerReconciler",
    "build_marker",
    "format_capture_time",
]
