"""Key/value backends for the persistent store.

Backends move opaque text blobs. Encoding and decoding belong to
:class:`~pyroadsigns.storage.store.PersistentStore`.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pyroadsigns.exceptions import MalformedPersistedDataError, StorageError

_logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Structural interface for durable text storage.

    Writes are synchronous: when ``write`` returns, a later ``read`` of the
    same key (in this or a new process) sees the new value.
    """

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, text: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryBackend:
    """Dict-backed storage for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, text: str) -> None:
        self._data[key] = text

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileBackend:
    """One ``<key>.json`` file per bucket inside *directory*.

    Files are replaced atomically so a crash mid-write leaves the previous
    value in place.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}", bucket=key)
        return self._directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise MalformedPersistedDataError(f"{path} is not UTF-8 text: {exc}", bucket=key) from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}", bucket=key) from exc

    def write(self, key: str, text: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self._directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}", bucket=key) from exc
        _logger.debug("Wrote bucket %s (%d bytes)", key, len(text))

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {path}: {exc}", bucket=key) from exc
