"""Keeps a map surface's markers identical to the sign repository.

Every pass tears down all markers and rebuilds them from the repository
rather than diffing. Stale markers are therefore impossible, at the price of
redrawing a handful of markers per change.

Two independent events trigger a pass: the repository changing and a
surface becoming available. Either may happen first, so :meth:`reconcile`
is safe to call at any time and any number of times.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, tzinfo

from pyroadsigns._constants import FIT_PADDING, SIZE_RECHECK_DELAY
from pyroadsigns.map.markers import build_marker
from pyroadsigns.map.surface import Bounds, MapSurface
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.repository import SignRepository

_logger = logging.getLogger(__name__)


class MarkerReconciler:
    """Project the repository onto the attached map surface.

    Parameters
    ----------
    repository : SignRepository
        Source of truth; the reconciler subscribes to its changes.
    padding : tuple of int
        Viewport padding used when fitting to the markers.
    recheck_delay : float
        Seconds before the follow-up size recheck. ``0`` disables it.
    tz : tzinfo
        Zone for the capture time shown in popups.
    """

    def __init__(
        self,
        repository: SignRepository,
        *,
        padding: tuple[int, int] = FIT_PADDING,
        recheck_delay: float = SIZE_RECHECK_DELAY,
        tz: tzinfo = UTC,
    ) -> None:
        self._repository = repository
        self._padding = padding
        self._recheck_delay = recheck_delay
        self._tz = tz
        self._surface: MapSurface | None = None
        self._pending_recheck: asyncio.TimerHandle | None = None
        self._unsubscribe = repository.subscribe(self._on_repository_change)

    @property
    def surface(self) -> MapSurface | None:
        return self._surface

    def close(self) -> None:
        """Stop following the repository and cancel any pending recheck."""
        self._unsubscribe()
        self._cancel_recheck()

    def _on_repository_change(self, _snapshot: tuple[RoadSignObservation, ...]) -> None:
        self.reconcile()

    # ------------------------------------------------------------------
    # Surface lifecycle
    # ------------------------------------------------------------------

    def attach_surface(self, surface: MapSurface) -> int:
        """Start rendering onto *surface*; returns the marker count."""
        if self._surface is not None and self._surface is not surface:
            _logger.debug("Replacing attached map surface")
            self._cancel_recheck()
        self._surface = surface
        return self.reconcile()

    def release_surface(self) -> None:
        """Dispose the attached surface so the next one starts fresh."""
        self._cancel_recheck()
        surface = self._surface
        self._surface = None
        if surface is not None and surface.is_live:
            surface.remove()
            _logger.debug("Released map surface")

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile(self) -> int:
        """Make the surface's markers match the repository exactly.

        Returns the number of markers attached, ``0`` when there is no live
        surface (the pass is then deferred until one is attached).
        """
        surface = self._surface
        if surface is None or not surface.is_live:
            _logger.debug("No live map surface; reconciliation deferred")
            return 0

        for marker in surface.markers():
            surface.remove_marker(marker)

        markers = [build_marker(observation, tz=self._tz) for observation in self._repository.observations]
        for marker in markers:
            surface.add_marker(marker)

        # Fit to where the markers are drawn, which is clamped to valid ranges.
        if markers:
            bounds = Bounds.from_points((m.latitude, m.longitude) for m in markers)
            surface.fit_bounds(bounds, self._padding)

        self.request_size_check()
        _logger.debug("Reconciled %d marker(s)", len(markers))
        return len(markers)

    def request_size_check(self) -> None:
        """Recheck the surface size now and once more shortly after.

        The delayed check catches container layout that settles after the
        current event handler returns. It needs a running event loop; with
        none, only the immediate check runs.
        """
        surface = self._surface
        if surface is None or not surface.is_live:
            return
        surface.invalidate_size()

        if self._recheck_delay <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._cancel_recheck()
        self._pending_recheck = loop.call_later(self._recheck_delay, self._delayed_size_check, surface)

    def _delayed_size_check(self, surface: MapSurface) -> None:
        self._pending_recheck = None
        if surface is self._surface and surface.is_live:
            surface.invalidate_size()

    def _cancel_recheck(self) -> None:
        if self._pending_recheck is not None:
            self._pending_recheck.cancel()
            self._pending_recheck = None
