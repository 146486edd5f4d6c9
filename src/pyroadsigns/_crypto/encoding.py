"""Reversible secret encoding.

This is the demo placeholder the field log has always stored: the secret is
base64 encoded, not hashed. Anyone with read access to the data directory
can recover it. Use :class:`~pyroadsigns._crypto.hashing.Pbkdf2SecretCodec`
for anything beyond a demo.
"""

from __future__ import annotations

import base64
import binascii

from pyroadsigns.exceptions import RoadSignsError


class Base64SecretCodec:
    """UTF-8 then standard base64, like a browser's ``btoa``."""

    scheme = "base64"

    def encode(self, secret: str) -> str:
        return base64.b64encode(secret.encode("utf-8")).decode("ascii")

    def decode(self, encoded: str) -> str:
        """Recover the plaintext secret.

        Raises
        ------
        RoadSignsError
            If *encoded* is not valid base64 of UTF-8 text.
        """
        try:
            return base64.b64decode(encoded.encode("ascii"), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError) as exc:
            raise RoadSignsError(f"Secret is not base64 encoded: {exc}") from exc
