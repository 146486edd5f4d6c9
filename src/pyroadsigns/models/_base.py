"""Shared timestamp helpers for persisted models.

Capture times are stored as ISO-8601 text with millisecond resolution and a
``Z`` suffix, the shape a browser's ``Date.toISOString`` produces. Models
truncate to milliseconds on construction so that a save/load round trip
compares equal.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, PlainSerializer


def utcnow() -> datetime:
    return datetime.now(UTC)


def to_utc_millis(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime truncated to milliseconds.

    Naive datetimes are taken to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC text with milliseconds, e.g. ``2026-01-01T10:00:00.123Z``."""
    text = to_utc_millis(value).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


MillisTimestamp = Annotated[
    datetime,
    AfterValidator(to_utc_millis),
    PlainSerializer(_serialize, return_type=str, when_used="json"),
]
"""Annotated type: aware UTC datetime, millisecond resolution, ISO text in JSON."""
