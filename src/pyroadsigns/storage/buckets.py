"""Named partitions of durable storage."""

from __future__ import annotations

from enum import StrEnum


class Bucket(StrEnum):
    """Storage keys, one per independent bucket."""

    CREDENTIALS = "users"
    SESSION_FLAG = "isLoggedIn"
    SESSION_IDENTITY = "userEmail"
    SIGNS = "roadSigns"
