from __future__ import annotations

import logging

import pytest

from pyroadsigns.exceptions import DuplicateObservationError, StorageError
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.repository import SignRepository
from pyroadsigns.storage import Bucket, MemoryBackend, PersistentStore


def _obs(obs_id: str) -> RoadSignObservation:
    return RoadSignObservation(id=obs_id, category="works", latitude=45.0, longitude=9.0)


def _repo(*, persist: bool = True) -> tuple[SignRepository, PersistentStore]:
    store = PersistentStore(MemoryBackend())
    return SignRepository(store, should_persist=lambda: persist), store


def test_append_persists_and_notifies() -> None:
    repo, store = _repo()
    seen: list[int] = []
    repo.subscribe(lambda snapshot: seen.append(len(snapshot)))

    repo.append(_obs("1"))
    repo.append(_obs("2"))

    assert [o.id for o in repo] == ["1", "2"]
    assert [o.id for o in store.load_observations()] == ["1", "2"]
    assert seen == [1, 2]


def test_append_rejects_duplicate_id_without_side_effects() -> None:
    repo, store = _repo()
    repo.append(_obs("1"))
    seen: list[int] = []
    repo.subscribe(lambda snapshot: seen.append(len(snapshot)))

    with pytest.raises(DuplicateObservationError) as excinfo:
        repo.append(_obs("1"))

    assert excinfo.value.observation_id == "1"
    assert len(repo) == 1
    assert seen == []


def test_remove_absent_id_changes_nothing() -> None:
    repo, store = _repo()
    repo.append(_obs("1"))
    seen: list[int] = []
    repo.subscribe(lambda snapshot: seen.append(len(snapshot)))

    assert repo.remove("nope") is None
    assert len(repo) == 1
    assert seen == []


def test_removing_last_sign_persists_empty_list() -> None:
    repo, store = _repo()
    repo.append(_obs("1"))

    removed = repo.remove("1")

    assert removed is not None and removed.id == "1"
    assert store.load(Bucket.SIGNS) == "[]"
    assert store.load_observations() == []


def test_writes_skip_storage_while_persist_gate_is_closed() -> None:
    repo, store = _repo(persist=False)

    repo.append(_obs("1"))

    assert "1" in repo
    assert store.load_observations() == []
    assert store.backend.read("roadSigns") is None


def test_clear_notifies_without_writing() -> None:
    repo, store = _repo()
    repo.append(_obs("1"))
    seen: list[int] = []
    repo.subscribe(lambda snapshot: seen.append(len(snapshot)))

    repo.clear()

    assert len(repo) == 0
    assert seen == [0]
    assert [o.id for o in store.load_observations()] == ["1"]


def test_load_initial_replaces_contents() -> None:
    repo, store = _repo()
    repo.append(_obs("x"))
    store.save_observations([_obs("a"), _obs("b")])

    assert repo.load_initial() == 2
    assert repo.ids() == {"a", "b"}
    assert repo.get("a") is not None
    assert repo.get("x") is None


def test_failing_listener_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    repo, _store = _repo()
    seen: list[int] = []

    def _boom(_snapshot: tuple[RoadSignObservation, ...]) -> None:
        raise RuntimeError("boom")

    repo.subscribe(_boom)
    repo.subscribe(lambda snapshot: seen.append(len(snapshot)))

    with caplog.at_level(logging.ERROR):
        repo.append(_obs("1"))

    assert seen == [1]
    assert "listener" in caplog.text


def test_unsubscribe_stops_notifications() -> None:
    repo, _store = _repo()
    seen: list[int] = []
    unsubscribe = repo.subscribe(lambda snapshot: seen.append(len(snapshot)))

    unsubscribe()
    unsubscribe()
    repo.append(_obs("1"))

    assert seen == []


class _FailingWriteBackend(MemoryBackend):
    def __init__(self) -> None:
        super().__init__()
        self.fail_writes = False

    def write(self, key: str, text: str) -> None:
        if self.fail_writes:
            raise StorageError(f"disk full writing {key}", bucket=key)
        super().write(key, text)


def test_failed_write_leaves_collection_and_listeners_untouched() -> None:
    backend = _FailingWriteBackend()
    repo = SignRepository(PersistentStore(backend))
    repo.append(_obs("1"))
    seen: list[int] = []
    repo.subscribe(lambda snapshot: seen.append(len(snapshot)))
    backend.fail_writes = True

    with pytest.raises(StorageError):
        repo.append(_obs("2"))
    with pytest.raises(StorageError):
        repo.remove("1")

    assert [o.id for o in repo] == ["1"]
    assert seen == []
