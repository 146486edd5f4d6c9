"""Application configuration for pyroadsigns."""

from __future__ import annotations

import dataclasses
import os
from datetime import UTC, tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pyroadsigns._constants import (
    CAPTURE_MAXIMUM_AGE,
    CAPTURE_TIMEOUT,
    DEFAULT_CENTER,
    DEFAULT_DATA_DIR,
    DEFAULT_TIME_ZONE,
    DEFAULT_ZOOM,
    FIT_PADDING,
    PBKDF2_ITERATIONS,
    SIZE_RECHECK_DELAY,
    TILE_ATTRIBUTION,
    TILE_MAX_ZOOM,
    TILE_URL,
)
from pyroadsigns.exceptions import RoadSignsConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class TileLayerConfig:
    """Base layer drawn under the markers of a new map surface."""

    url: str = TILE_URL
    attribution: str = TILE_ATTRIBUTION
    max_zoom: int = TILE_MAX_ZOOM


@dataclasses.dataclass(frozen=True)
class RoadSignsConfig:
    """Application configuration.

    Parameters
    ----------
    data_dir : str
        Directory holding one JSON file per storage bucket.
    time_zone : str
        IANA time zone used to display capture times in marker popups.
    secret_scheme : str
        ``"base64"`` (reversible demo encoding) or ``"pbkdf2"``.
    secret_salt : str
        Salt for the ``"pbkdf2"`` scheme.
    secret_iterations : int
        Iteration count for the ``"pbkdf2"`` scheme.
    capture_timeout : float
        Seconds to wait for a position fix before giving up.
    capture_maximum_age : float
        Seconds a previous fix may be reused instead of asking the sensor.
    capture_high_accuracy : bool
        Ask the geolocation provider for a high accuracy fix.
    fit_padding : tuple of int
        Pixel padding applied when fitting the viewport to the markers.
    recheck_delay : float
        Delay before the follow-up viewport size recheck.
    default_center : tuple of float
        Initial map center ``(latitude, longitude)``.
    default_zoom : int
        Initial map zoom level.
    geolocation_url : str or None
        Local position service queried over HTTP. ``None`` disables the
        HTTP provider.
    tiles : TileLayerConfig
        Base tile layer.
    """

    data_dir: str = DEFAULT_DATA_DIR
    time_zone: str = DEFAULT_TIME_ZONE
    secret_scheme: str = "base64"
    secret_salt: str = "pyroadsigns"
    secret_iterations: int = PBKDF2_ITERATIONS
    capture_timeout: float = CAPTURE_TIMEOUT
    capture_maximum_age: float = CAPTURE_MAXIMUM_AGE
    capture_high_accuracy: bool = True
    fit_padding: tuple[int, int] = FIT_PADDING
    recheck_delay: float = SIZE_RECHECK_DELAY
    default_center: tuple[float, float] = DEFAULT_CENTER
    default_zoom: int = DEFAULT_ZOOM
    geolocation_url: str | None = None
    tiles: TileLayerConfig = dataclasses.field(default_factory=TileLayerConfig)

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir).expanduser()

    def zoneinfo(self) -> tzinfo:
        """Resolve :attr:`time_zone`.

        Raises
        ------
        RoadSignsConfigError
            If the zone is not known to the system tz database.
        """
        if self.time_zone.upper() == "UTC":
            return UTC
        try:
            return ZoneInfo(self.time_zone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise RoadSignsConfigError(f"Unknown time zone: {self.time_zone!r}") from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> RoadSignsConfig:
        """Create configuration from environment variables.

        Reads optional ``ROADSIGNS_*`` variables. Explicit keyword
        arguments override environment values.
        """
        env = os.environ

        tile_overrides = overrides.pop("tiles", None)
        tile_url = env.get("ROADSIGNS_TILE_URL")
        if isinstance(tile_overrides, TileLayerConfig):
            tiles = tile_overrides
        elif tile_url is not None:
            tiles = TileLayerConfig(url=tile_url)
        else:
            tiles = TileLayerConfig()

        _ENV_CONFIG_MAP = {
            "ROADSIGNS_DATA_DIR": "data_dir",
            "ROADSIGNS_TIME_ZONE": "time_zone",
            "ROADSIGNS_SECRET_SCHEME": "secret_scheme",
            "ROADSIGNS_SECRET_SALT": "secret_salt",
            "ROADSIGNS_GEOLOCATION_URL": "geolocation_url",
        }
        config_kwargs: dict[str, Any] = {"tiles": tiles}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # numeric values, handled separately
        _ENV_FLOAT_MAP = {
            "ROADSIGNS_CAPTURE_TIMEOUT": "capture_timeout",
            "ROADSIGNS_CAPTURE_MAXIMUM_AGE": "capture_maximum_age",
            "ROADSIGNS_RECHECK_DELAY": "recheck_delay",
        }
        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)

            iterations_env = env.get("ROADSIGNS_SECRET_ITERATIONS")
            if iterations_env is not None and "secret_iterations" not in overrides:
                config_kwargs["secret_iterations"] = int(iterations_env)
        except ValueError as exc:
            raise RoadSignsConfigError(f"Invalid numeric ROADSIGNS_* value: {exc}") from exc

        if "capture_high_accuracy" not in overrides:
            config_kwargs["capture_high_accuracy"] = _env_bool(
                env.get("ROADSIGNS_CAPTURE_HIGH_ACCURACY"),
                True,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
