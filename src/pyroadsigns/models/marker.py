"""Visual marker model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Marker(BaseModel):
    """A marker placed on a map surface for one observation.

    Markers are derived from observations on every reconciliation and are
    never persisted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    observation_id: str
    latitude: float
    longitude: float
    color: str
    label: str
    icon_html: str
    popup_html: str
