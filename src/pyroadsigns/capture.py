"""Capture flow: position fix → new observation.

Only one capture may wait for a fix at a time. The wait is bounded by the
request timeout; there is no other way to cancel it.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pyroadsigns.exceptions import (
    CaptureInProgressError,
    GeolocationTimeoutError,
    GeolocationUnavailableError,
    SessionInactiveError,
)
from pyroadsigns.geolocation.provider import GeolocationProvider
from pyroadsigns.models._base import to_utc_millis, utcnow
from pyroadsigns.models.catalog import is_known_category, resolve_category
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.models.position import Position, PositionOptions
from pyroadsigns.repository import SignRepository

_logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class CaptureFlow:
    """Acquire a position and append a new observation.

    Parameters
    ----------
    repository : SignRepository
        Receives the new observation.
    is_active : callable
        Session gate; captures are refused while it returns ``False``.
    provider : GeolocationProvider or None
        Position source. ``None`` means the host has no geolocation.
    options : PositionOptions
        Accuracy, timeout and cache staleness for each request.
    clock : callable
        Monotonic clock used to age the cached fix.
    now : callable
        Wall clock for capture times.
    """

    def __init__(
        self,
        repository: SignRepository,
        *,
        is_active: Callable[[], bool],
        provider: GeolocationProvider | None = None,
        options: PositionOptions | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repository = repository
        self._is_active = is_active
        self.provider = provider
        self.options = options if options is not None else PositionOptions()
        self._clock = clock
        self._now = now
        self._in_flight = False
        self._cached_fix: tuple[Position, float] | None = None
        self._last_id_ms = 0

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def forget_cached_fix(self) -> None:
        self._cached_fix = None

    async def capture(self, category: str) -> RoadSignObservation:
        """Record a sign of *category* at the current position.

        Unknown categories are recorded as the first catalog category.

        Raises
        ------
        SessionInactiveError
            If nobody is logged in, before or after the fix arrives.
        CaptureInProgressError
            If another capture is still waiting for its fix.
        GeolocationUnavailableError, GeolocationDeniedError, GeolocationTimeoutError
            If no fix could be obtained. Nothing is recorded.
        """
        if not self._is_active():
            raise SessionInactiveError("Log in before capturing road signs")
        if self._in_flight:
            raise CaptureInProgressError("A capture is already waiting for a position fix")

        if not is_known_category(category):
            _logger.debug("Unknown category %r, using %s", category, resolve_category(category).id)
        category_id = resolve_category(category).id

        self._in_flight = True
        try:
            position = await self._acquire_fix()
        finally:
            self._in_flight = False

        if not self._is_active():
            self._cached_fix = None
            raise SessionInactiveError("Session ended while waiting for a position fix")

        captured_at = to_utc_millis(self._now())
        observation = RoadSignObservation(
            id=self._next_id(captured_at),
            category=category_id,
            latitude=position.latitude,
            longitude=position.longitude,
            captured_at=captured_at,
        )
        self._repository.append(observation)
        _logger.info(
            "Captured %s at %.5f, %.5f (id=%s)",
            category_id,
            observation.latitude,
            observation.longitude,
            observation.id,
        )
        return observation

    async def _acquire_fix(self) -> Position:
        options = self.options
        cached = self._cached_fix
        if cached is not None and options.maximum_age > 0:
            position, acquired_at = cached
            if self._clock() - acquired_at <= options.maximum_age:
                _logger.debug("Reusing cached position fix")
                return position

        provider = self.provider
        if provider is None:
            raise GeolocationUnavailableError("Geolocation is not supported on this host")

        try:
            position = await asyncio.wait_for(provider.request_position(options), options.timeout)
        except TimeoutError as exc:
            raise GeolocationTimeoutError(
                f"No position fix within {options.timeout:g}s",
                timeout=options.timeout,
            ) from exc

        if not (math.isfinite(position.latitude) and math.isfinite(position.longitude)):
            raise GeolocationUnavailableError(
                f"Position fix has non-finite coordinates: {position.latitude}, {position.longitude}"
            )
        self._cached_fix = (position, self._clock())
        return position

    def _next_id(self, captured_at: datetime) -> str:
        """Epoch milliseconds, bumped so ids strictly increase and never collide."""
        epoch_ms = (captured_at - _EPOCH) // timedelta(milliseconds=1)
        candidate = max(epoch_ms, self._last_id_ms + 1)
        taken = self._repository.ids()
        while str(candidate) in taken:
            candidate += 1
        self._last_id_ms = candidate
        return str(candidate)
