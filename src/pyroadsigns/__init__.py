"""pyroadsigns - Offline road sign field log with a reconciled marker map."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyroadsigns")
except PackageNotFoundError:
    __version__ = "0+local"
from pyroadsigns.app import NoticeLevel, RoadSignsApp
from pyroadsigns.capture import CaptureFlow
from pyroadsigns.config import RoadSignsConfig, TileLayerConfig
from pyroadsigns.exceptions import (
    AuthenticationError,
    CaptureError,
    CaptureInProgressError,
    DuplicateIdentityError,
    DuplicateObservationError,
    GeolocationDeniedError,
    GeolocationError,
    GeolocationTimeoutError,
    GeolocationUnavailableError,
    InvalidCredentialsError,
    MalformedPersistedDataError,
    MapSurfaceReleasedError,
    RepositoryError,
    RoadSignsConfigError,
    RoadSignsError,
    SessionInactiveError,
    StorageError,
)
from pyroadsigns.geolocation import GeolocationProvider, HttpGeolocationProvider, StaticGeolocationProvider
from pyroadsigns.map import Bounds, InMemoryMapSurface, MapSurface, MarkerReconciler
from pyroadsigns.models import (
    CATALOG,
    Marker,
    Position,
    PositionOptions,
    RoadSignObservation,
    SignCategory,
    UserCredential,
)
from pyroadsigns.repository import SignRepository
from pyroadsigns.session import Session, SessionManager
from pyroadsigns.storage import Bucket, JsonFileBackend, MemoryBackend, PersistentStore

__all__ = [
    "__version__",
    "AuthenticationError",
    "Bounds",
    "Bucket",
    "CATALOG",
    "CaptureError",
    "CaptureFlow",
    "CaptureInProgressError",
    "DuplicateIdentityError",
    "DuplicateObservationError",
    "GeolocationDeniedError",
    "GeolocationError",
    "GeolocationProvider",
    "GeolocationTimeoutError",
    "GeolocationUnavailableError",
    "HttpGeolocationProvider",
    "InMemoryMapSurface",
    "InvalidCredentialsError",
    "JsonFileBackend",
    "MalformedPersistedDataError",
    "MapSurface",
    "MapSurfaceReleasedError",
    "Marker",
    "MarkerReconciler",
    "MemoryBackend",
    "NoticeLevel",
    "PersistentStore",
    "Position",
    "PositionOptions",
    "RepositoryError",
    "RoadSignObservation",
    "RoadSignsApp",
    "RoadSignsConfig",
    "RoadSignsConfigError",
    "RoadSignsError",
    "Session",
    "SessionInactiveError",
    "SessionManager",
    "SignCategory",
    "SignRepository",
    "StaticGeolocationProvider",
    "StorageError",
    "TileLayerConfig",
    "UserCredential",
]
