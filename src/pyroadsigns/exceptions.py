"""Custom exception hierarchy for pyroadsigns."""

from __future__ import annotations


class RoadSignsError(Exception):
    """Base exception for all pyroadsigns errors."""


class RoadSignsConfigError(RoadSignsError):
    """Invalid or missing configuration."""


class StorageError(RoadSignsError):
    """Durable storage could not be read or written."""

    def __init__(self, message: str, *, bucket: str = "") -> None:
        self.bucket = bucket
        super().__init__(message)


class MalformedPersistedDataError(StorageError):
    """A stored blob could not be decoded.

    Raised by the decoders only; the store recovers by falling back to the
    bucket default, so callers of :class:`PersistentStore` never see it.
    """


class AuthenticationError(RoadSignsError):
    """Base for registration, login and session gating failures."""


class DuplicateIdentityError(AuthenticationError):
    """Registration attempted with an identity that already exists."""

    def __init__(self, identity: str) -> None:
        self.identity = identity
        super().__init__(f"Identity already registered: {identity}")


class InvalidCredentialsError(AuthenticationError):
    """Login failed.

    The message deliberately does not say whether the identity or the
    secret was wrong.
    """

    def __init__(self) -> None:
        super().__init__("Invalid identity or secret")


class SessionInactiveError(AuthenticationError):
    """Operation requires an active session."""


class RepositoryError(RoadSignsError):
    """Sign repository rejected a mutation."""


class DuplicateObservationError(RepositoryError):
    """An observation with the same id is already in the repository."""

    def __init__(self, observation_id: str) -> None:
        self.observation_id = observation_id
        super().__init__(f"Observation already present: {observation_id}")


class MapSurfaceReleasedError(RoadSignsError):
    """A released map surface was asked to change."""


class CaptureError(RoadSignsError):
    """Base for capture flow failures."""


class CaptureInProgressError(CaptureError):
    """A capture is already waiting for a position fix."""


class GeolocationError(CaptureError):
    """The position fix could not be obtained."""


class GeolocationUnavailableError(GeolocationError):
    """No geolocation capability, or the sensor failed to produce a fix."""


class GeolocationDeniedError(GeolocationError):
    """The host refused access to the position."""


class GeolocationTimeoutError(GeolocationError):
    """No fix arrived within the requested wait."""

    def __init__(self, message: str, *, timeout: float | None = None) -> None:
        self.timeout = timeout
        super().__init__(message)
