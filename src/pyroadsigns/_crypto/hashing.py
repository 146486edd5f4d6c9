"""One-way secret hashing for stored credentials."""

from __future__ import annotations

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from pyroadsigns._constants import PBKDF2_ITERATIONS
from pyroadsigns.exceptions import RoadSignsConfigError

_KEY_LENGTH = 32


class Pbkdf2SecretCodec:
    """PBKDF2-HMAC-SHA256 with a fixed application salt.

    Parameters
    ----------
    salt : str
        Application-wide salt. Changing it invalidates every stored
        credential.
    iterations : int
        PBKDF2 iteration count.
    """

    scheme = "pbkdf2"

    def __init__(self, salt: str, *, iterations: int = PBKDF2_ITERATIONS) -> None:
        if not salt:
            raise RoadSignsConfigError("pbkdf2 secret scheme requires a non-empty salt")
        if iterations <= 0:
            raise RoadSignsConfigError(f"pbkdf2 iterations must be positive, got {iterations}")
        self._salt = salt.encode("utf-8")
        self._iterations = iterations

    def encode(self, secret: str) -> str:
        """Return the lowercase hex digest of *secret*."""
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=_KEY_LENGTH,
            salt=self._salt,
            iterations=self._iterations,
        )
        return kdf.derive(secret.encode("utf-8")).hex()
