from __future__ import annotations

import pytest

from pyroadsigns.config import RoadSignsConfig, TileLayerConfig
from pyroadsigns.exceptions import RoadSignsConfigError


def test_defaults() -> None:
    config = RoadSignsConfig()

    assert config.secret_scheme == "base64"
    assert config.fit_padding == (20, 20)
    assert config.default_zoom == 9
    assert config.capture_timeout == 10.0
    assert config.tiles.max_zoom == 19


def test_from_env_reads_roadsigns_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROADSIGNS_DATA_DIR", "/tmp/signs")
    monkeypatch.setenv("ROADSIGNS_SECRET_SCHEME", "pbkdf2")
    monkeypatch.setenv("ROADSIGNS_CAPTURE_TIMEOUT", "2.5")
    monkeypatch.setenv("ROADSIGNS_SECRET_ITERATIONS", "1000")
    monkeypatch.setenv("ROADSIGNS_CAPTURE_HIGH_ACCURACY", "off")
    monkeypatch.setenv("ROADSIGNS_TILE_URL", "https://tiles.example/{z}/{x}/{y}.png")

    config = RoadSignsConfig.from_env()

    assert config.data_dir == "/tmp/signs"
    assert config.secret_scheme == "pbkdf2"
    assert config.capture_timeout == 2.5
    assert config.secret_iterations == 1000
    assert config.capture_high_accuracy is False
    assert config.tiles == TileLayerConfig(url="https://tiles.example/{z}/{x}/{y}.png")


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROADSIGNS_DATA_DIR", "/tmp/env")
    monkeypatch.setenv("ROADSIGNS_CAPTURE_TIMEOUT", "2.5")

    config = RoadSignsConfig.from_env(data_dir="/tmp/explicit", capture_timeout=7.0)

    assert config.data_dir == "/tmp/explicit"
    assert config.capture_timeout == 7.0


def test_bad_numeric_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROADSIGNS_RECHECK_DELAY", "soon")

    with pytest.raises(RoadSignsConfigError):
        RoadSignsConfig.from_env()


def test_unknown_time_zone_raises() -> None:
    with pytest.raises(RoadSignsConfigError):
        RoadSignsConfig(time_zone="Mars/Olympus").zoneinfo()
