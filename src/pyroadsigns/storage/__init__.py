"""Durable local storage for credentials, session state and road signs."""

from pyroadsigns.storage.backend import JsonFileBackend, MemoryBackend, StorageBackend
from pyroadsigns.storage.buckets import Bucket
from pyroadsigns.storage.store import (
    PersistentStore,
    decode_credentials,
    decode_observations,
    encode_credentials,
    encode_observations,
)

__all__ = [
    "Bucket",
    "JsonFileBackend",
    "MemoryBackend",
    "PersistentStore",
    "StorageBackend",
    "decode_credentials",
    "decode_observations",
    "encode_credentials",
    "encode_observations",
]
