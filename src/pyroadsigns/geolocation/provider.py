"""Geolocation collaborator interface and a fixed-position provider."""

from __future__ import annotations

import asyncio
from typing import Protocol

from pyroadsigns.exceptions import GeolocationError, GeolocationUnavailableError
from pyroadsigns.models.position import Position, PositionOptions


class GeolocationProvider(Protocol):
    """One-shot position source.

    Implementations raise a :class:`~pyroadsigns.exceptions.GeolocationError`
    subclass on failure. Enforcing ``options.timeout`` is the caller's job;
    providers may honor it as well.
    """

    async def request_position(self, options: PositionOptions) -> Position: ...


class StaticGeolocationProvider:
    """Returns a fixed position, or fails with a fixed error.

    Parameters
    ----------
    position : Position or None
        The fix to return. ``None`` without *error* behaves like a host
        without a sensor.
    error : GeolocationError, optional
        Raised instead of returning a fix.
    delay : float
        Seconds to wait before answering.
    """

    def __init__(
        self,
        position: Position | None = None,
        *,
        error: GeolocationError | None = None,
        delay: float = 0.0,
    ) -> None:
        self.position = position
        self.error = error
        self.delay = delay
        self.calls = 0
        self.last_options: PositionOptions | None = None

    async def request_position(self, options: PositionOptions) -> Position:
        self.calls += 1
        self.last_options = options
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.position is None:
            raise GeolocationUnavailableError("No position available")
        return self.position
