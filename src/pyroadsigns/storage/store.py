"""Typed access to the four storage buckets.

Missing buckets load as their defaults. Blobs that fail to decode are
logged and replaced by the same defaults; a corrupt file never stops the
application from starting.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import TypeAdapter, ValidationError

from pyroadsigns._constants import DEMO_IDENTITY, DEMO_SECRET
from pyroadsigns._crypto import Base64SecretCodec, SecretCodec
from pyroadsigns.exceptions import MalformedPersistedDataError, StorageError
from pyroadsigns.models.credential import UserCredential
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.storage.backend import StorageBackend
from pyroadsigns.storage.buckets import Bucket

_logger = logging.getLogger(__name__)

_CREDENTIALS_ADAPTER = TypeAdapter(list[UserCredential])
_OBSERVATIONS_ADAPTER = TypeAdapter(list[RoadSignObservation])


def _decode_json(bucket: Bucket, blob: str) -> Any:
    try:
        return json.loads(blob)
    except json.JSONDecodeError as exc:
        raise MalformedPersistedDataError(f"Bucket {bucket} is not JSON: {exc}", bucket=bucket) from exc


def decode_observations(blob: str) -> list[RoadSignObservation]:
    """Decode a sign collection blob.

    Entries with an id seen earlier in the same blob are dropped.

    Raises
    ------
    MalformedPersistedDataError
        If the blob is not a JSON list of valid observations.
    """
    data = _decode_json(Bucket.SIGNS, blob)
    if not isinstance(data, list):
        raise MalformedPersistedDataError(
            f"Bucket {Bucket.SIGNS} must hold a list, got {type(data).__name__}",
            bucket=Bucket.SIGNS,
        )
    try:
        observations = _OBSERVATIONS_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise MalformedPersistedDataError(
            f"Bucket {Bucket.SIGNS} has invalid entries: {exc.error_count()} error(s)",
            bucket=Bucket.SIGNS,
        ) from exc

    unique: list[RoadSignObservation] = []
    seen: set[str] = set()
    for observation in observations:
        if observation.id in seen:
            _logger.warning("Dropping duplicate stored observation id=%s", observation.id)
            continue
        seen.add(observation.id)
        unique.append(observation)
    return unique


def encode_observations(observations: Iterable[RoadSignObservation]) -> str:
    return json.dumps([observation.to_record() for observation in observations], separators=(",", ":"))


def decode_credentials(blob: str) -> list[UserCredential]:
    """Decode a credential set blob, keeping the first entry per identity.

    Raises
    ------
    MalformedPersistedDataError
        If the blob is not a JSON list of valid credentials.
    """
    data = _decode_json(Bucket.CREDENTIALS, blob)
    if not isinstance(data, list):
        raise MalformedPersistedDataError(
            f"Bucket {Bucket.CREDENTIALS} must hold a list, got {type(data).__name__}",
            bucket=Bucket.CREDENTIALS,
        )
    try:
        credentials = _CREDENTIALS_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise MalformedPersistedDataError(
            f"Bucket {Bucket.CREDENTIALS} has invalid entries: {exc.error_count()} error(s)",
            bucket=Bucket.CREDENTIALS,
        ) from exc

    unique: dict[str, UserCredential] = {}
    for credential in credentials:
        unique.setdefault(credential.identity, credential)
    return list(unique.values())


def encode_credentials(credentials: Iterable[UserCredential]) -> str:
    return json.dumps([credential.to_record() for credential in credentials], separators=(",", ":"))


class PersistentStore:
    """Load/save/clear per bucket on top of a :class:`StorageBackend`.

    Parameters
    ----------
    backend : StorageBackend
        Where blobs live.
    codec : SecretCodec
        Encodes the demo credential seeded into an empty credential
        bucket. Must be the codec the session manager logs in with.
    """

    def __init__(self, backend: StorageBackend, *, codec: SecretCodec | None = None) -> None:
        self._backend = backend
        self._codec: SecretCodec = codec if codec is not None else Base64SecretCodec()

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    # ------------------------------------------------------------------
    # Raw bucket access
    # ------------------------------------------------------------------

    def load(self, bucket: Bucket) -> str | None:
        return self._backend.read(bucket.value)

    def save(self, bucket: Bucket, blob: str) -> None:
        self._backend.write(bucket.value, blob)

    def clear(self, bucket: Bucket) -> None:
        self._backend.delete(bucket.value)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def default_credentials(self) -> list[UserCredential]:
        """The seed: exactly one demo credential."""
        return [UserCredential(identity=DEMO_IDENTITY, encoded_secret=self._codec.encode(DEMO_SECRET))]

    def load_credentials(self) -> list[UserCredential]:
        try:
            blob = self.load(Bucket.CREDENTIALS)
            if blob is None:
                return self.default_credentials()
            return decode_credentials(blob)
        except StorageError as exc:
            _logger.warning("Ignoring stored credentials: %s", exc)
            return self.default_credentials()

    def save_credentials(self, credentials: Iterable[UserCredential]) -> None:
        self.save(Bucket.CREDENTIALS, encode_credentials(credentials))

    # ------------------------------------------------------------------
    # Session flag + identity
    # ------------------------------------------------------------------

    def load_session_flag(self) -> bool:
        try:
            blob = self.load(Bucket.SESSION_FLAG)
            if blob is None:
                return False
            value = _decode_json(Bucket.SESSION_FLAG, blob)
        except StorageError as exc:
            _logger.warning("Ignoring stored session flag: %s", exc)
            return False
        return value is True

    def load_session_identity(self) -> str | None:
        try:
            blob = self.load(Bucket.SESSION_IDENTITY)
        except StorageError as exc:
            _logger.warning("Ignoring stored session identity: %s", exc)
            return None
        if blob is None:
            return None
        try:
            value = _decode_json(Bucket.SESSION_IDENTITY, blob)
        except MalformedPersistedDataError:
            # Older data directories stored the identity as bare text.
            value = blob
        if not isinstance(value, str):
            _logger.warning("Ignoring stored session identity of type %s", type(value).__name__)
            return None
        identity = value.strip()
        return identity or None

    def save_session(self, identity: str) -> None:
        self.save(Bucket.SESSION_FLAG, json.dumps(True))
        self.save(Bucket.SESSION_IDENTITY, json.dumps(identity))

    def clear_session(self) -> None:
        self.clear(Bucket.SESSION_FLAG)
        self.clear(Bucket.SESSION_IDENTITY)

    # ------------------------------------------------------------------
    # Sign collection
    # ------------------------------------------------------------------

    def load_observations(self) -> list[RoadSignObservation]:
        try:
            blob = self.load(Bucket.SIGNS)
            if blob is None:
                return []
            return decode_observations(blob)
        except StorageError as exc:
            _logger.warning("Ignoring stored road signs: %s", exc)
            return []

    def save_observations(self, observations: Iterable[RoadSignObservation]) -> None:
        self.save(Bucket.SIGNS, encode_observations(observations))

    def clear_observations(self) -> None:
        self.clear(Bucket.SIGNS)
