"""Process-wide application context.

:class:`RoadSignsApp` wires storage, session, repository, reconciler and
capture flow together and owns their start-up and teardown rules:

* start-up restores the session and loads the signs once;
* logout purges the signs and releases the map surface;
* every mutation goes through the repository, which keeps storage and the
  marker layer in step.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from typing import Any

import aiohttp

from pyroadsigns._crypto import codec_for_scheme
from pyroadsigns._redact import redact_for_log
from pyroadsigns.capture import CaptureFlow
from pyroadsigns.config import RoadSignsConfig
from pyroadsigns.exceptions import (
    DuplicateIdentityError,
    GeolocationError,
    InvalidCredentialsError,
    MalformedPersistedDataError,
    SessionInactiveError,
)
from pyroadsigns.geolocation.http_provider import HttpGeolocationProvider
from pyroadsigns.geolocation.provider import GeolocationProvider
from pyroadsigns.map.reconciler import MarkerReconciler
from pyroadsigns.map.surface import InMemoryMapSurface, MapSurface
from pyroadsigns.models._base import utcnow
from pyroadsigns.models.catalog import DEFAULT_CATEGORY_ID, category_name, is_known_category
from pyroadsigns.models.credential import UserCredential
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.models.position import PositionOptions
from pyroadsigns.repository import SignRepository
from pyroadsigns.session import Session, SessionManager
from pyroadsigns.storage.backend import JsonFileBackend, StorageBackend
from pyroadsigns.storage.buckets import Bucket
from pyroadsigns.storage.store import PersistentStore

_logger = logging.getLogger(__name__)


class NoticeLevel(StrEnum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


NoticeCallback = Callable[[NoticeLevel, str], None]
SurfaceFactory = Callable[[RoadSignsConfig], MapSurface]


class RoadSignsApp:
    """Road sign field log.

    Usage::

        async with RoadSignsApp(config) as app:
            app.login("user@example.com", "password123")
            app.open_surface()
            await app.capture("no_parking")
    """

    def __init__(
        self,
        config: RoadSignsConfig | None = None,
        *,
        backend: StorageBackend | None = None,
        provider: GeolocationProvider | None = None,
        surface_factory: SurfaceFactory = InMemoryMapSurface.from_config,
        on_notice: NoticeCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self._config = config if config is not None else RoadSignsConfig()
        self._surface_factory = surface_factory
        self._on_notice = on_notice
        self._http_session: aiohttp.ClientSession | None = None
        self._started = False
        self._selected_category = DEFAULT_CATEGORY_ID

        codec = codec_for_scheme(
            self._config.secret_scheme,
            salt=self._config.secret_salt,
            iterations=self._config.secret_iterations,
        )
        self._store = PersistentStore(
            backend if backend is not None else JsonFileBackend(self._config.data_path),
            codec=codec,
        )
        self._repository = SignRepository(self._store, should_persist=self._is_active)
        self._reconciler = MarkerReconciler(
            self._repository,
            padding=self._config.fit_padding,
            recheck_delay=self._config.recheck_delay,
            tz=self._config.zoneinfo(),
        )
        self._sessions = SessionManager(
            self._store,
            self._repository,
            codec=codec,
            on_logout=self._reconciler.release_surface,
        )
        self._capture = CaptureFlow(
            self._repository,
            is_active=self._is_active,
            provider=provider,
            options=PositionOptions(
                high_accuracy=self._config.capture_high_accuracy,
                timeout=self._config.capture_timeout,
                maximum_age=self._config.capture_maximum_age,
            ),
            clock=clock,
            now=now,
        )

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RoadSignsApp:
        if self._capture.provider is None and self._config.geolocation_url:
            self._http_session = aiohttp.ClientSession()
            self._capture.provider = HttpGeolocationProvider(self._config.geolocation_url, self._http_session)
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self._reconciler.close()
        if self._http_session is not None:
            self._capture.provider = None
            await self._http_session.close()
            self._http_session = None

    def start(self) -> None:
        """Restore the session and load the signs. Runs once."""
        if self._started:
            return
        self._started = True
        _logger.debug("Starting with config %s", redact_for_log(self._config))

        if self._sessions.restore():
            count = self._repository.load_initial()
            _logger.info("Session restored for %s with %d road sign(s)", self._sessions.identity, count)
        elif self._has_stored_signs():
            # Signs never outlive a session.
            _logger.warning("Purging road signs stored without an active session")
            self._store.clear_observations()

    def _has_stored_signs(self) -> bool:
        try:
            return self._store.load(Bucket.SIGNS) is not None
        except MalformedPersistedDataError:
            return True

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> RoadSignsConfig:
        return self._config

    @property
    def store(self) -> PersistentStore:
        return self._store

    @property
    def repository(self) -> SignRepository:
        return self._repository

    @property
    def reconciler(self) -> MarkerReconciler:
        return self._reconciler

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    @property
    def capture_flow(self) -> CaptureFlow:
        return self._capture

    @property
    def session(self) -> Session:
        return self._sessions.session

    @property
    def signs(self) -> tuple[RoadSignObservation, ...]:
        return self._repository.observations

    @property
    def surface(self) -> MapSurface | None:
        return self._reconciler.surface

    @property
    def selected_category(self) -> str:
        return self._selected_category

    def _is_active(self) -> bool:
        return self._sessions.is_active

    def _require_active(self) -> None:
        if not self._sessions.is_active:
            raise SessionInactiveError("Log in first")

    def _notice(self, level: NoticeLevel, message: str) -> None:
        _logger.debug("Notice [%s] %s", level, message)
        if self._on_notice is None:
            return
        try:
            self._on_notice(level, message)
        except Exception:
            _logger.debug("on_notice callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def register(self, identity: str, secret: str) -> UserCredential:
        try:
            credential = self._sessions.register(identity, secret)
        except DuplicateIdentityError:
            self._notice(NoticeLevel.ERROR, "This identity is already registered.")
            raise
        self._notice(NoticeLevel.SUCCESS, "Account created. You can now log in.")
        return credential

    def login(self, identity: str, secret: str) -> Session:
        try:
            session = self._sessions.login(identity, secret)
        except InvalidCredentialsError:
            self._notice(NoticeLevel.ERROR, "Wrong identity or secret.")
            raise
        self._notice(NoticeLevel.SUCCESS, "Login successful. Welcome!")
        return session

    def logout(self) -> None:
        self._sessions.logout()
        self._capture.forget_cached_fix()
        self._selected_category = DEFAULT_CATEGORY_ID
        self._notice(NoticeLevel.INFO, "Logged out.")

    # ------------------------------------------------------------------
    # Map surface
    # ------------------------------------------------------------------

    def open_surface(self, surface: MapSurface | None = None) -> MapSurface:
        """Attach a map surface, creating one if needed.

        A live attached surface is reused unless a different one is passed.

        Raises
        ------
        SessionInactiveError
            The map is only available to a logged-in operator.
        """
        self._require_active()
        current = self._reconciler.surface
        if current is not None and current.is_live and (surface is None or surface is current):
            return current
        if surface is None:
            surface = self._surface_factory(self._config)
            _logger.debug("Created map surface")
        self._reconciler.attach_surface(surface)
        return surface

    # ------------------------------------------------------------------
    # Signs
    # ------------------------------------------------------------------

    def select_category(self, category_id: str) -> None:
        if not is_known_category(category_id):
            raise ValueError(f"Unknown sign category: {category_id!r}")
        self._selected_category = category_id

    async def capture(self, category: str | None = None) -> RoadSignObservation:
        """Capture a sign at the current position.

        *category* defaults to :attr:`selected_category`.
        """
        try:
            observation = await self._capture.capture(category or self._selected_category)
        except GeolocationError as exc:
            self._notice(NoticeLevel.ERROR, f"GPS error: {exc}")
            raise
        self._notice(NoticeLevel.SUCCESS, f'Sign "{category_name(observation.category)}" captured.')
        return observation

    def remove_sign(self, observation_id: str) -> RoadSignObservation | None:
        self._require_active()
        removed = self._repository.remove(observation_id)
        if removed is not None:
            self._notice(NoticeLevel.INFO, f'Sign "{category_name(removed.category)}" removed.')
        return removed
