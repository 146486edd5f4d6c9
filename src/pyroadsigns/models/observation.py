"""Road sign observation model."""

from __future__ import annotations

import math
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pyroadsigns.models._base import MillisTimestamp, utcnow


class RoadSignObservation(BaseModel):
    """One recorded road sign sighting.

    Observations are append/remove only; they are never edited.

    Parameters
    ----------
    id : str
        Unique id, derived from the capture time in epoch milliseconds.
    category : str
        Catalog category id. Unknown ids are kept as-is so the data is
        never lost; rendering falls back to a default style.
    latitude : float
        WGS84 latitude in degrees.
    longitude : float
        WGS84 longitude in degrees.
    captured_at : datetime
        Capture time, UTC, millisecond resolution.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str
    category: str = Field(validation_alias=AliasChoices("category", "type"))
    latitude: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(validation_alias=AliasChoices("longitude", "lng", "lon"))
    captured_at: MillisTimestamp = Field(
        default_factory=utcnow,
        validation_alias=AliasChoices("capturedAt", "captured_at", "timestamp"),
        serialization_alias="capturedAt",
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("id must be non-empty")
        return value

    @field_validator("latitude", "longitude")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("coordinates must be finite")
        return value

    def to_record(self) -> dict[str, Any]:
        """Persisted shape: ``{id, category, latitude, longitude, capturedAt}``."""
        return self.model_dump(mode="json", by_alias=True)
