from __future__ import annotations

import pytest
from pydantic import ValidationError

from pyroadsigns._crypto import Base64SecretCodec, Pbkdf2SecretCodec, codec_for_scheme
from pyroadsigns.exceptions import (
    DuplicateIdentityError,
    InvalidCredentialsError,
    RoadSignsConfigError,
    RoadSignsError,
    StorageError,
)
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.repository import SignRepository
from pyroadsigns.session import Session, SessionManager
from pyroadsigns.storage import MemoryBackend, PersistentStore


def _manager(backend: MemoryBackend | None = None, **kwargs) -> SessionManager:
    store = PersistentStore(backend if backend is not None else MemoryBackend(), codec=kwargs.get("codec"))
    repository = SignRepository(store)
    return SessionManager(store, repository, **kwargs)


def test_base64_codec_matches_btoa() -> None:
    codec = Base64SecretCodec()
    assert codec.encode("password123") == "cGFzc3dvcmQxMjM="
    assert codec.decode("cGFzc3dvcmQxMjM=") == "password123"
    with pytest.raises(RoadSignsError):
        codec.decode("not base64!")


def test_pbkdf2_codec_is_deterministic_and_salted() -> None:
    a = Pbkdf2SecretCodec("salt-a", iterations=1000)
    b = Pbkdf2SecretCodec("salt-b", iterations=1000)

    assert a.encode("password123") == a.encode("password123")
    assert a.encode("password123") != b.encode("password123")
    assert len(a.encode("password123")) == 64


def test_codec_for_scheme_rejects_unknown_and_unsalted() -> None:
    assert isinstance(codec_for_scheme(" Base64 "), Base64SecretCodec)
    with pytest.raises(RoadSignsConfigError):
        codec_for_scheme("rot13")
    with pytest.raises(RoadSignsConfigError):
        codec_for_scheme("pbkdf2", salt="")


def test_session_model_ties_identity_to_state() -> None:
    with pytest.raises(ValidationError):
        Session(is_active=True)
    with pytest.raises(ValidationError):
        Session(is_active=False, identity="user@example.com")


def test_seeded_demo_login_succeeds_and_persists() -> None:
    backend = MemoryBackend()
    manager = _manager(backend)

    session = manager.login("user@example.com", "password123")

    assert session.is_active
    assert session.identity == "user@example.com"
    assert backend.read("isLoggedIn") == "true"
    assert backend.read("userEmail") == '"user@example.com"'


def test_wrong_secret_is_rejected_and_session_stays_inactive() -> None:
    backend = MemoryBackend()
    manager = _manager(backend)

    with pytest.raises(InvalidCredentialsError):
        manager.login("user@example.com", "wrong")

    assert not manager.is_active
    assert backend.read("isLoggedIn") is None


def test_unknown_identity_gets_the_same_error_message() -> None:
    manager = _manager()

    with pytest.raises(InvalidCredentialsError) as unknown:
        manager.login("nobody@example.com", "password123")
    with pytest.raises(InvalidCredentialsError) as wrong:
        manager.login("user@example.com", "nope")

    assert str(unknown.value) == str(wrong.value)


def test_register_then_login() -> None:
    backend = MemoryBackend()
    manager = _manager(backend)

    manager.register("op@example.com", "s3cret")
    manager.login("op@example.com", "s3cret")

    assert manager.identity == "op@example.com"
    reloaded = _manager(backend)
    assert {c.identity for c in reloaded.credentials} == {"user@example.com", "op@example.com"}


def test_duplicate_registration_changes_nothing() -> None:
    backend = MemoryBackend()
    manager = _manager(backend)

    with pytest.raises(DuplicateIdentityError) as excinfo:
        manager.register("user@example.com", "other")

    assert excinfo.value.identity == "user@example.com"
    assert len(manager.credentials) == 1
    assert backend.read("users") is None
    manager.login("user@example.com", "password123")


def test_logout_purges_signs_and_session() -> None:
    backend = MemoryBackend()
    store = PersistentStore(backend)
    repository = SignRepository(store)
    released: list[bool] = []
    manager = SessionManager(store, repository, on_logout=lambda: released.append(True))
    manager.login("user@example.com", "password123")
    repository.append(RoadSignObservation(id="1", category="works", latitude=1.0, longitude=2.0))

    manager.logout()

    assert not manager.is_active
    assert manager.session == Session()
    assert len(repository) == 0
    assert backend.read("roadSigns") is None
    assert backend.read("isLoggedIn") is None
    assert backend.read("userEmail") is None
    assert released == [True]


def test_restore_reactivates_persisted_session() -> None:
    backend = MemoryBackend()
    _manager(backend).login("user@example.com", "password123")

    restored = _manager(backend)

    assert restored.restore() is True
    assert restored.identity == "user@example.com"


def test_restore_requires_flag_and_identity() -> None:
    assert _manager(MemoryBackend({"userEmail": '"user@example.com"'})).restore() is False
    assert _manager(MemoryBackend({"isLoggedIn": "true"})).restore() is False


def test_pbkdf2_scheme_seeds_a_hashed_demo_credential() -> None:
    codec = Pbkdf2SecretCodec("pepper", iterations=1000)
    manager = _manager(codec=codec)

    assert manager.credentials[0].encoded_secret == codec.encode("password123")
    assert manager.login("user@example.com", "password123").is_active


class _FailingWriteBackend(MemoryBackend):
    def write(self, key: str, text: str) -> None:
        raise StorageError(f"disk full writing {key}", bucket=key)


def test_login_stays_inactive_when_session_cannot_be_saved() -> None:
    manager = _manager(_FailingWriteBackend())

    with pytest.raises(StorageError):
        manager.login("user@example.com", "password123")

    assert not manager.is_active
    assert manager.identity is None
