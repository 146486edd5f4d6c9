"""Road sign category catalog.

The catalog is fixed: categories cannot be added or edited at runtime.
Lookups use different fallbacks depending on what they are for, so each
helper documents its own.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SignCategory(BaseModel):
    """A selectable road sign category.

    Parameters
    ----------
    id : str
        Stable identifier stored with observations.
    name : str
        Display name.
    color : str
        CSS color used for the marker.
    badge : str
        Short text for compact badges.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str
    name: str
    color: str
    badge: str

    @property
    def label(self) -> str:
        """Single-letter marker label."""
        return self.id[:1].upper()


CATALOG: tuple[SignCategory, ...] = (
    SignCategory(id="works", name="Road Works", color="orange", badge="Works"),
    SignCategory(id="speed_limit_30", name="Speed Limit 30 km/h", color="red", badge="30 KM/H"),
    SignCategory(id="mandatory_turn", name="Mandatory Turn", color="blue", badge="Turn"),
    SignCategory(id="no_parking", name="No Parking", color="red", badge="No Parking"),
)

DEFAULT_CATEGORY_ID = CATALOG[0].id
UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "gray"

_BY_ID: dict[str, SignCategory] = {category.id: category for category in CATALOG}


def find_category(category_id: str) -> SignCategory | None:
    return _BY_ID.get(category_id)


def is_known_category(category_id: str) -> bool:
    return category_id in _BY_ID


def resolve_category(category_id: str) -> SignCategory:
    """Category used for styling; unknown ids fall back to the first entry."""
    return _BY_ID.get(category_id, CATALOG[0])


def category_name(category_id: str) -> str:
    """Display name; unknown ids read ``"Unknown"``."""
    category = _BY_ID.get(category_id)
    return category.name if category is not None else UNKNOWN_CATEGORY_NAME


def category_color(category_id: str) -> str:
    """Color for swatches and legends; unknown ids are ``"gray"``."""
    category = _BY_ID.get(category_id)
    return category.color if category is not None else UNKNOWN_CATEGORY_COLOR
