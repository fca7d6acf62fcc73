# -*- coding: utf-8 -*-
"""Tests for the settings loader."""

import pytest
from pydantic import ValidationError

from latlong_lib.settings import CRS_ENV_VAR
from latlong_lib.settings import DURATION_ENV_VAR
from latlong_lib.settings import WARMUP_ENV_VAR
from latlong_lib.settings import LatLongSettings
from latlong_lib.settings import load_settings
from latlong_lib.settings import parse_crs_code
from latlong_lib.settings import parse_seconds


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in (WARMUP_ENV_VAR, DURATION_ENV_VAR, CRS_ENV_VAR):
        monkeypatch.delenv(name, raising=False)


class TestParseSeconds:
    """Tests for parse_seconds."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("45", 45),
            (" 12 ", 12),
            ("0", 1),
            ("-5", 1),
            ("601", 600),
            ("100000", 600),
            (None, 30),
            ("", 30),
            ("abc", 30),
            ("1.5", 30),
        ],
    )
    def test_values(self, raw, expected):
        assert parse_seconds(raw, default=30) == expected


class TestParseCrsCode:
    """Tests for parse_crs_code."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("7850", "7850"),
            ("EPSG:28350", "28350"),
            (None, "4326"),
            ("  ", "4326"),
            ("EPSG:", "4326"),
        ],
    )
    def test_values(self, raw, expected):
        assert parse_crs_code(raw) == expected


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self):
        settings = load_settings()
        assert settings == LatLongSettings()
        assert settings.warmup_seconds == 30
        assert settings.averaging_duration_seconds == 60
        assert settings.default_crs_code == "4326"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv(WARMUP_ENV_VAR, "5")
        monkeypatch.setenv(DURATION_ENV_VAR, "900")
        monkeypatch.setenv(CRS_ENV_VAR, "EPSG:7850")

        settings = load_settings()
        assert settings.warmup_seconds == 5
        assert settings.averaging_duration_seconds == 600
        assert settings.default_crs_code == "7850"

    def test_env_file_overrides_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(WARMUP_ENV_VAR, "5")
        env_file = tmp_path / "settings.env"
        env_file.write_text(f"{WARMUP_ENV_VAR}=10\n{DURATION_ENV_VAR}=oops\n")

        settings = load_settings(env_file)
        assert settings.warmup_seconds == 10
        assert settings.averaging_duration_seconds == 60

    def test_missing_env_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Impossible to find"):
            load_settings(tmp_path / "missing.env")


class TestLatLongSettings:
    """Tests for the settings model."""

    def test_to_session_config(self):
        config = LatLongSettings(
            warmup_seconds=2, averaging_duration_seconds=10
        ).to_session_config(confirm_before_finalize=True)
        assert config.warmup_ms == 2000
        assert config.collection_ms == 10_000
        assert config.confirm_before_finalize

    @pytest.mark.parametrize("seconds", [0, 601])
    def test_rejects_out_of_range(self, seconds):
        with pytest.raises(ValidationError):
            LatLongSettings(warmup_seconds=seconds)
