from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path

import pytest

from pyroadsigns._crypto import Base64SecretCodec
from pyroadsigns.exceptions import MalformedPersistedDataError, StorageError
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.storage import Bucket, JsonFileBackend, MemoryBackend, PersistentStore
from pyroadsigns.storage.store import decode_observations


def _obs(obs_id: str, category: str = "works") -> RoadSignObservation:
    return RoadSignObservation(
        id=obs_id,
        category=category,
        latitude=45.0,
        longitude=9.0,
        captured_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


def test_bucket_keys_match_stored_names() -> None:
    assert [b.value for b in Bucket] == ["users", "isLoggedIn", "userEmail", "roadSigns"]


def test_missing_credentials_load_the_demo_seed() -> None:
    store = PersistentStore(MemoryBackend())

    credentials = store.load_credentials()

    assert len(credentials) == 1
    assert credentials[0].identity == "user@example.com"
    assert credentials[0].encoded_secret == Base64SecretCodec().encode("password123")


def test_malformed_credentials_fall_back_to_seed(caplog: pytest.LogCaptureFixture) -> None:
    store = PersistentStore(MemoryBackend({"users": "{not json"}))

    with caplog.at_level(logging.WARNING):
        credentials = store.load_credentials()

    assert [c.identity for c in credentials] == ["user@example.com"]
    assert "Ignoring stored credentials" in caplog.text


def test_missing_or_malformed_signs_load_empty() -> None:
    assert PersistentStore(MemoryBackend()).load_observations() == []
    assert PersistentStore(MemoryBackend({"roadSigns": '{"id": 1}'})).load_observations() == []
    assert PersistentStore(MemoryBackend({"roadSigns": "[{}]"})).load_observations() == []


def test_decode_observations_drops_repeated_ids() -> None:
    blob = json.dumps([_obs("1", "works").to_record(), _obs("1", "no_parking").to_record(), _obs("2").to_record()])

    decoded = decode_observations(blob)

    assert [(o.id, o.category) for o in decoded] == [("1", "works"), ("2", "works")]


def test_decode_observations_raises_on_non_list() -> None:
    with pytest.raises(MalformedPersistedDataError) as excinfo:
        decode_observations('{"id": "1"}')
    assert excinfo.value.bucket == "roadSigns"


def test_empty_sign_list_is_written_not_deleted() -> None:
    backend = MemoryBackend()
    store = PersistentStore(backend)

    store.save_observations([_obs("1")])
    store.save_observations([])

    assert backend.read("roadSigns") == "[]"
    assert store.load_observations() == []


def test_session_round_trip_and_clear_leave_other_buckets_alone() -> None:
    backend = MemoryBackend()
    store = PersistentStore(backend)
    store.save_observations([_obs("1")])

    store.save_session("user@example.com")
    assert store.load_session_flag() is True
    assert store.load_session_identity() == "user@example.com"

    store.clear_session()
    assert store.load_session_flag() is False
    assert store.load_session_identity() is None
    assert [o.id for o in store.load_observations()] == ["1"]


def test_session_flag_only_true_for_json_true() -> None:
    assert PersistentStore(MemoryBackend({"isLoggedIn": '"true"'})).load_session_flag() is False
    assert PersistentStore(MemoryBackend({"isLoggedIn": "1"})).load_session_flag() is False
    assert PersistentStore(MemoryBackend({"isLoggedIn": "true"})).load_session_flag() is True


def test_session_identity_accepts_bare_text() -> None:
    store = PersistentStore(MemoryBackend({"userEmail": "user@example.com"}))
    assert store.load_session_identity() == "user@example.com"


def test_json_file_backend_persists_across_instances(tmp_path: Path) -> None:
    first = PersistentStore(JsonFileBackend(tmp_path / "data"))
    first.save_observations([_obs("1"), _obs("2")])

    second = PersistentStore(JsonFileBackend(tmp_path / "data"))
    assert [o.id for o in second.load_observations()] == ["1", "2"]
    assert (tmp_path / "data" / "roadSigns.json").is_file()
    assert not list((tmp_path / "data").glob("*.tmp"))


def test_json_file_backend_delete_is_idempotent(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path)
    backend.write("users", "[]")

    backend.delete("users")
    backend.delete("users")

    assert backend.read("users") is None


@pytest.mark.parametrize("key", ["", "../users", ".hidden", "a/b"])
def test_json_file_backend_rejects_bad_keys(tmp_path: Path, key: str) -> None:
    with pytest.raises(StorageError):
        JsonFileBackend(tmp_path).read(key)


def test_non_utf8_sign_file_loads_empty(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    (tmp_path / "roadSigns.json").write_bytes(b"\xff\xfe[not utf8")
    store = PersistentStore(JsonFileBackend(tmp_path))

    with caplog.at_level(logging.WARNING):
        assert store.load_observations() == []

    assert "Ignoring stored road signs" in caplog.text


def test_non_utf8_files_fall_back_for_every_bucket(tmp_path: Path) -> None:
    for name in ("users", "isLoggedIn", "userEmail"):
        (tmp_path / f"{name}.json").write_bytes(b"\xff\xfe")
    store = PersistentStore(JsonFileBackend(tmp_path))

    assert [c.identity for c in store.load_credentials()] == ["user@example.com"]
    assert store.load_session_flag() is False
    assert store.load_session_identity() is None


def test_json_file_backend_reports_non_utf8_as_malformed(tmp_path: Path) -> None:
    (tmp_path / "roadSigns.json").write_bytes(b"\xff")

    with pytest.raises(MalformedPersistedDataError) as excinfo:
        JsonFileBackend(tmp_path).read("roadSigns")
    assert excinfo.value.bucket == "roadSigns"
