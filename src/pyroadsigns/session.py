"""Session state and the manager that owns login/logout."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, model_validator

from pyroadsigns._crypto import Base64SecretCodec, SecretCodec
from pyroadsigns.exceptions import DuplicateIdentityError, InvalidCredentialsError
from pyroadsigns.models.credential import UserCredential
from pyroadsigns.repository import SignRepository
from pyroadsigns.storage.store import PersistentStore

_logger = logging.getLogger(__name__)


class Session(BaseModel):
    """Authenticated/unauthenticated state of the operator.

    Parameters
    ----------
    is_active : bool
        Whether an operator is logged in.
    identity : str or None
        The logged-in identity; always ``None`` when inactive.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    is_active: bool = False
    identity: str | None = None

    @model_validator(mode="after")
    def _identity_matches_state(self) -> Session:
        if self.is_active and not self.identity:
            raise ValueError("an active session needs an identity")
        if not self.is_active and self.identity is not None:
            raise ValueError("an inactive session cannot carry an identity")
        return self


INACTIVE = Session()


class SessionManager:
    """Owns the single session and the credential set.

    Parameters
    ----------
    store : PersistentStore
        Durable storage for credentials and session state.
    repository : SignRepository
        Cleared on logout.
    codec : SecretCodec
        Turns plaintext secrets into their stored form.
    on_logout : callable, optional
        Called at the end of :meth:`logout`; the application uses it to
        release the map surface.
    """

    def __init__(
        self,
        store: PersistentStore,
        repository: SignRepository,
        *,
        codec: SecretCodec | None = None,
        on_logout: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._repository = repository
        self._codec: SecretCodec = codec if codec is not None else Base64SecretCodec()
        self._on_logout = on_logout
        self._session = INACTIVE
        self._credentials: list[UserCredential] = store.load_credentials()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session.is_active

    @property
    def identity(self) -> str | None:
        return self._session.identity

    @property
    def credentials(self) -> list[UserCredential]:
        return list(self._credentials)

    def _find(self, identity: str) -> UserCredential | None:
        for credential in self._credentials:
            if credential.identity == identity:
                return credential
        return None

    def register(self, identity: str, secret: str) -> UserCredential:
        """Create a credential for *identity*.

        Raises
        ------
        DuplicateIdentityError
            If the identity is already registered. Nothing is changed.
        """
        identity = identity.strip()
        if self._find(identity) is not None:
            raise DuplicateIdentityError(identity)

        credential = UserCredential(identity=identity, encoded_secret=self._codec.encode(secret))
        updated = [*self._credentials, credential]
        self._store.save_credentials(updated)
        self._credentials = updated
        _logger.info("Registered identity %s", identity)
        return credential

    def login(self, identity: str, secret: str) -> Session:
        """Activate the session if *identity* and *secret* match a credential.

        The observation collection is left untouched; it is loaded once at
        start-up, not per login.

        Raises
        ------
        InvalidCredentialsError
            If no stored credential matches both fields.
        """
        identity = identity.strip()
        encoded = self._codec.encode(secret)
        match = next(
            (c for c in self._credentials if c.identity == identity and c.encoded_secret == encoded),
            None,
        )
        if match is None:
            _logger.info("Login rejected")
            raise InvalidCredentialsError

        # Persist first; a failed write leaves the session inactive.
        self._store.save_session(match.identity)
        self._session = Session(is_active=True, identity=match.identity)
        _logger.info("Logged in as %s", match.identity)
        return self._session

    def logout(self) -> None:
        """Deactivate the session and purge every observation.

        Order matters: the session goes inactive first so the repository's
        clear cannot write to storage, then the sign bucket is purged, then
        the logout hook releases the map surface.
        """
        previous = self._session.identity
        self._session = INACTIVE
        self._store.clear_session()
        self._repository.clear()
        self._store.clear_observations()
        if self._on_logout is not None:
            self._on_logout()
        _logger.info("Logged out %s", previous or "(no session)")

    def restore(self) -> bool:
        """Reactivate a persisted session without re-checking the secret.

        Returns whether the session is active afterwards.
        """
        if self._session.is_active:
            return True
        if not self._store.load_session_flag():
            return False
        identity = self._store.load_session_identity()
        if identity is None:
            _logger.warning("Stored session flag without identity; staying logged out")
            return False
        self._session = Session(is_active=True, identity=identity)
        _logger.debug("Restored session for %s", identity)
        return True
