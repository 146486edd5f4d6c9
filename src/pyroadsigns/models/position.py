"""Position fix models exchanged with geolocation providers."""

from __future__ import annotations

import math
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pyroadsigns._constants import CAPTURE_MAXIMUM_AGE, CAPTURE_TIMEOUT
from pyroadsigns.models._base import MillisTimestamp, utcnow


def _safe_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


class Position(BaseModel):
    """A single position fix.

    Parameters
    ----------
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.
    accuracy : float or None
        Reported accuracy radius in meters.
    timestamp : datetime
        When the fix was taken.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lng", "lon"))
    accuracy: float | None = Field(default=None, validation_alias=AliasChoices("accuracy", "acc"))
    timestamp: MillisTimestamp = Field(
        default_factory=utcnow,
        validation_alias=AliasChoices("timestamp", "time"),
    )

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinates(cls, value: Any) -> float:
        parsed = _safe_float(value)
        if parsed is None:
            raise ValueError("coordinate must be a finite number")
        return parsed

    @field_validator("accuracy", mode="before")
    @classmethod
    def _coerce_accuracy(cls, value: Any) -> float | None:
        return _safe_float(value)


class PositionOptions(BaseModel):
    """Options for a one-shot position request."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    high_accuracy: bool = True
    timeout: float = Field(default=CAPTURE_TIMEOUT, gt=0)
    maximum_age: float = Field(default=CAPTURE_MAXIMUM_AGE, ge=0)
