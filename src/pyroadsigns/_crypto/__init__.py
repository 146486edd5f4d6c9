"""Credential secret encoding."""

from __future__ import annotations

from typing import Protocol

from pyroadsigns._constants import PBKDF2_ITERATIONS
from pyroadsigns._crypto.encoding import Base64SecretCodec
from pyroadsigns._crypto.hashing import Pbkdf2SecretCodec
from pyroadsigns.exceptions import RoadSignsConfigError


class SecretCodec(Protocol):
    """Protocol for turning a plaintext secret into its stored form.

    Implementations must be deterministic: login compares encoded values
    by exact match.
    """

    def encode(self, secret: str) -> str: ...


def codec_for_scheme(
    scheme: str,
    *,
    salt: str = "",
    iterations: int = PBKDF2_ITERATIONS,
) -> SecretCodec:
    """Return the codec registered for *scheme*."""
    normalized = scheme.strip().lower()
    if normalized == "base64":
        return Base64SecretCodec()
    if normalized == "pbkdf2":
        return Pbkdf2SecretCodec(salt, iterations=iterations)
    raise RoadSignsConfigError(f"Unknown secret scheme: {scheme!r}")


__all__ = [
    "Base64SecretCodec",
    "Pbkdf2SecretCodec",
    "SecretCodec",
    "codec_for_scheme",
]
